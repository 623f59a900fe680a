"""
Date helpers for the stress engine.

The engine compares instants as naive wall-clock datetimes in a single
reference timezone. Aware inputs are converted into that timezone and then
stripped, so naive and aware records can be mixed safely.
"""
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Optional, Tuple

import pytz
from loguru import logger


############################################################################################################
def resolve_timezone(timezone_str: Optional[str]) -> tzinfo:
    """Look up a timezone by name, falling back to UTC."""
    if not timezone_str:
        return pytz.UTC
    try:
        return pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {timezone_str}, using UTC")
        return pytz.UTC


def to_naive(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz or pytz.UTC).replace(tzinfo=None)


def parse_instant(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse a datetime, date or ISO-8601 string into a naive datetime.

    Anything unparseable (empty strings, garbage, unsupported types) yields
    None rather than raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive(value, tz)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return to_naive(datetime.fromisoformat(text), tz)
    except ValueError:
        logger.debug(f"Unparseable date value: {value!r}")
        return None


def current_time(timezone_str: Optional[str] = None) -> datetime:
    """Wall-clock now in the given zone, naive. Only hosts call this."""
    tz = resolve_timezone(timezone_str)
    return datetime.now(tz).replace(tzinfo=None)


############################################################################################################
def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(value: datetime) -> datetime:
    # ISO weeks start on Monday
    return start_of_day(value) - timedelta(days=value.weekday())


def start_of_month(value: datetime) -> datetime:
    return start_of_day(value).replace(day=1)


def start_of_year(value: datetime) -> datetime:
    return start_of_month(value).replace(month=1)


def add_months(value: datetime, months: int) -> datetime:
    """Shift a first-of-month datetime by whole months."""
    index = value.year * 12 + (value.month - 1) + months
    return value.replace(year=index // 12, month=index % 12 + 1, day=1)


def normalize_range(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    """Return the range in ascending order."""
    if end < start:
        return end, start
    return start, end


def day_range(now: datetime, days: int) -> Tuple[datetime, datetime]:
    """Calendar days ending today: (start of first day, now)."""
    first = start_of_day(now) - timedelta(days=max(days, 1) - 1)
    return first, now
