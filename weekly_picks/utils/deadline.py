"""
Weekly pick deadlines.

The deadline for week N is ``season_start + (N - 1) weeks + 3 days`` at the
configured hour in the configured timezone. Picks are open strictly before
that instant.
"""

from datetime import timedelta

from weekly_picks.utils.timezone_utils import (
    ensure_aware,
    get_utc_time,
    localize,
    parse_date,
    resolve_timezone,
)

DEADLINE_OFFSET_DAYS = 3


class DeadlineGate:
    def __init__(
        self,
        season_start,
        timezone_name="America/Chicago",
        deadline_hour=12,
        offset_days=DEADLINE_OFFSET_DAYS,
    ):
        self.season_start = parse_date(season_start)
        self.tz = resolve_timezone(timezone_name)
        self.deadline_hour = deadline_hour
        self.offset_days = offset_days

    @classmethod
    def from_config(cls, config):
        return cls(
            season_start=config.get("SEASON_START_DATE", "2025-09-08"),
            timezone_name=config.get("TIMEZONE", "America/Chicago"),
            deadline_hour=config.get("PICKS_DEADLINE_HOUR", 12),
        )

    def deadline(self, week):
        """Instant after which picks for the week are closed"""
        day = self.season_start + timedelta(days=(week - 1) * 7 + self.offset_days)
        # Localize the wall-clock time so DST shifts are respected
        return localize(self.tz, day.year, day.month, day.day, self.deadline_hour)

    def is_open(self, week, now=None):
        now = ensure_aware(now) if now is not None else get_utc_time()
        return now < self.deadline(week)

    def status(self, week, now=None):
        deadline = self.deadline(week)
        return {
            "week": week,
            "deadline": deadline.isoformat(),
            "isOpen": self.is_open(week, now),
        }
