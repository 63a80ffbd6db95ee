"""
Game schedule and score provider.

Fetches fixtures from the sports-data feed when an API key is configured and
falls back to a deterministic synthetic schedule whenever the feed is
unavailable. Callers never see feed failures.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import wraps
from typing import Optional

import requests

from weekly_picks.exceptions import UpstreamUnavailable
from weekly_picks.utils.timezone_utils import (
    ensure_aware,
    get_utc_time,
    localize,
    parse_date,
    resolve_timezone,
)

logger = logging.getLogger(__name__)

REGULAR_SEASON_WEEKS = 18
GAMES_PER_WEEK = 16

TEAMS = [
    "Buffalo Bills", "Miami Dolphins", "New England Patriots", "New York Jets",
    "Baltimore Ravens", "Cincinnati Bengals", "Cleveland Browns", "Pittsburgh Steelers",
    "Houston Texans", "Indianapolis Colts", "Jacksonville Jaguars", "Tennessee Titans",
    "Denver Broncos", "Kansas City Chiefs", "Las Vegas Raiders", "Los Angeles Chargers",
    "Dallas Cowboys", "New York Giants", "Philadelphia Eagles", "Washington Commanders",
    "Chicago Bears", "Detroit Lions", "Green Bay Packers", "Minnesota Vikings",
    "Atlanta Falcons", "Carolina Panthers", "New Orleans Saints", "Tampa Bay Buccaneers",
    "Arizona Cardinals", "Los Angeles Rams", "San Francisco 49ers", "Seattle Seahawks",
]


@dataclass
class GameFixture:
    external_id: str
    week: int
    home_team: str
    away_team: str
    game_time: datetime
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    is_completed: bool = False


def rate_limit_decorator(max_retries=3, base_delay=1.0, backoff_factor=2.0):
    """
    Decorator to handle API rate limiting with exponential backoff
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            for attempt in range(max_retries):
                try:
                    response = func(self, *args, **kwargs)
                except requests.exceptions.RequestException as e:
                    delay = base_delay * (backoff_factor**attempt)
                    logger.warning(
                        f"Request failed: {e}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    if attempt < max_retries - 1:
                        self._sleep(delay)
                        continue
                    raise UpstreamUnavailable(str(e)) from e

                if response.status_code == 429 or response.status_code >= 500:
                    delay = float(
                        response.headers.get(
                            "Retry-After", base_delay * (backoff_factor**attempt)
                        )
                    )
                    logger.warning(
                        f"Feed returned {response.status_code}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    if attempt < max_retries - 1:
                        self._sleep(delay)
                    continue

                return response

            raise UpstreamUnavailable(f"Max retries ({max_retries}) exceeded")

        return wrapper

    return decorator


class ScheduleProvider:
    """
    Supplies weekly fixtures and scores, from the feed or synthetically
    """

    def __init__(
        self,
        api_key=None,
        base_url="https://api.sportsdata.io/v3/nfl",
        season_start="2025-09-08",
        timezone_name="America/Chicago",
        session=None,
        timeout=30,
        sleep=time.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.season_start = parse_date(season_start)
        self.tz = resolve_timezone(timezone_name)
        self.timeout = timeout
        self._sleep = sleep

        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "Weekly-Picks/1.0"})
        if api_key:
            self.session.headers.update({"Ocp-Apim-Subscription-Key": api_key})

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get("NFL_API_KEY"),
            base_url=config.get("NFL_API_BASE_URL") or "https://api.sportsdata.io/v3/nfl",
            season_start=config.get("SEASON_START_DATE", "2025-09-08"),
            timezone_name=config.get("TIMEZONE", "America/Chicago"),
        )

    @rate_limit_decorator(max_retries=3, base_delay=2.0)
    def _make_api_request(self, path):
        return self.session.get(f"{self.base_url}{path}", timeout=self.timeout)

    def _fetch_week(self, season, week):
        response = self._make_api_request(f"/scores/json/ScoresByWeek/{season}/{week}")
        try:
            response.raise_for_status()
            payload = response.json()
            fixtures = [self._parse_feed_game(item, week) for item in payload]
        except (requests.exceptions.HTTPError, ValueError, KeyError, TypeError) as e:
            raise UpstreamUnavailable(f"Unusable feed response: {e}") from e
        return [fixture for fixture in fixtures if fixture is not None]

    def _parse_feed_game(self, item, week):
        """Fixture for one feed game, or None while its kickoff is unscheduled"""
        external_id = str(item["GameKey"])
        home_team = item["HomeTeam"]
        away_team = item["AwayTeam"]

        if not item.get("DateTime"):
            logger.warning(
                f"Skipping feed game {external_id} ({away_team} at {home_team}): "
                "no kickoff time yet"
            )
            return None

        # Feed kickoff times are Eastern wall-clock without an offset
        kickoff = datetime.fromisoformat(item["DateTime"])
        if kickoff.tzinfo is None:
            kickoff = resolve_timezone("America/New_York").localize(kickoff)

        return GameFixture(
            external_id=external_id,
            week=week,
            home_team=home_team,
            away_team=away_team,
            game_time=kickoff,
            home_score=item.get("HomeScore"),
            away_score=item.get("AwayScore"),
            is_completed=bool(item.get("IsFinal") or False),
        )

    def get_weekly_schedule(self, season, week):
        """Fixtures for a week, synthetic when the feed is unavailable"""
        if not self.api_key:
            return self.get_synthetic_schedule(season, week)

        try:
            return self._fetch_week(season, week)
        except UpstreamUnavailable as e:
            logger.error(
                f"Schedule feed unavailable for {season} week {week}, using synthetic data: {e}"
            )
            return self.get_synthetic_schedule(season, week)

    def update_game_scores(self, season, week):
        """Completed fixtures with final scores"""
        return [
            fixture
            for fixture in self.get_weekly_schedule(season, week)
            if fixture.is_completed
        ]

    def get_full_season_schedule(self, season):
        fixtures = []
        for week in range(1, REGULAR_SEASON_WEEKS + 1):
            logger.info(f"Fetching schedule for week {week}...")
            fixtures.extend(self.get_weekly_schedule(season, week))
            if self.api_key:
                # Keep clear of the feed's rate limit
                self._sleep(0.1)
        return fixtures

    def get_synthetic_schedule(self, season, week):
        """Deterministic 16-game week: Thursday night, Sunday slate, Monday night"""
        week_start = self.season_start + timedelta(days=(week - 1) * 7)
        fixtures = []

        for i in range(GAMES_PER_WEEK):
            if i == 0:
                day, hour = week_start + timedelta(days=3), 20
            elif i <= 13:
                day, hour = week_start + timedelta(days=6), 13 + (i % 2) * 3
            else:
                day, hour = week_start + timedelta(days=7), 20

            fixtures.append(
                GameFixture(
                    external_id=f"{season}-W{week}-{i + 1}",
                    week=week,
                    home_team=TEAMS[(i * 2) % len(TEAMS)],
                    away_team=TEAMS[(i * 2 + 1) % len(TEAMS)],
                    game_time=localize(self.tz, day.year, day.month, day.day, hour),
                )
            )

        return fixtures

    def get_current_season(self, now=None):
        """Season year: seasons start in September"""
        now = ensure_aware(now) if now is not None else get_utc_time()
        return now.year if now.month >= 9 else now.year - 1

    def get_current_week(self, now=None):
        """Weeks elapsed since season start, clamped to the regular season"""
        now = ensure_aware(now) if now is not None else get_utc_time()
        start = localize(
            self.tz,
            self.season_start.year,
            self.season_start.month,
            self.season_start.day,
        )

        if now < start:
            return 1

        weeks = (now - start) // timedelta(days=7)
        return min(max(weeks + 1, 1), REGULAR_SEASON_WEEKS)
