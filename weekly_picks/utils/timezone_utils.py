"""
Timezone utility functions for the Weekly Picks application
"""

from datetime import datetime, timezone

import pytz


def resolve_timezone(timezone_name):
    """pytz timezone for a name, UTC if the name is unknown"""
    try:
        return pytz.timezone(timezone_name or "UTC")
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def get_utc_time():
    """Get current time in UTC"""
    return datetime.now(timezone.utc)


def ensure_aware(dt):
    """Treat naive datetimes as UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def convert_to_timezone(dt, tz):
    """Convert a datetime to the given timezone (naive input is UTC)"""
    if dt is None:
        return None
    return ensure_aware(dt).astimezone(tz)


def localize(tz, year, month, day, hour=0, minute=0):
    """Wall-clock time in tz as an aware datetime"""
    return tz.localize(datetime(year, month, day, hour, minute))


def parse_date(value):
    """Parse a YYYY-MM-DD configuration value"""
    if hasattr(value, "year") and not isinstance(value, str):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()
