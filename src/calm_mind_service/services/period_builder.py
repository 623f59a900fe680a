"""
Calendar-aligned period generation for dashboard time series.
"""
from datetime import datetime, timedelta
from typing import Callable, Dict, Final, List, Optional, Tuple

from loguru import logger

from ..models.analytics import Period, PeriodMode
from ..utils.dates import (
    add_months,
    start_of_day,
    start_of_month,
    start_of_week,
    start_of_year,
)

_TICK: Final[timedelta] = timedelta(microseconds=1)

# mode -> (align to unit start, advance one unit)
_UNITS: Final[Dict[str, Tuple[Callable[[datetime], datetime], Callable[[datetime], datetime]]]] = {
    "daily": (start_of_day, lambda value: value + timedelta(days=1)),
    "weekly": (start_of_week, lambda value: value + timedelta(days=7)),
    "monthly": (start_of_month, lambda value: add_months(value, 1)),
    "yearly": (start_of_year, lambda value: add_months(value, 12)),
}

GRANULARITIES: Final = tuple(_UNITS.keys())


############################################################################################################
def period_label(start: datetime, end: datetime, mode: PeriodMode) -> str:
    if mode == "daily":
        return start.strftime("%a %b %d")
    if mode == "weekly":
        return f"{start.strftime('%b %d')} - {end.strftime('%b %d')}"
    if mode == "monthly":
        return start.strftime("%b %Y")
    return str(start.year)


def period_key(start: datetime, mode: PeriodMode) -> str:
    if mode == "daily":
        return start.strftime("%Y-%m-%d")
    if mode == "weekly":
        iso_year, iso_week, _ = start.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if mode == "monthly":
        return start.strftime("%Y-%m")
    return f"{start.year:04d}"


############################################################################################################
def build_periods(start: datetime, end: datetime, mode: PeriodMode) -> List[Period]:
    """
    Split ``[start, end]`` into contiguous calendar units.

    The first period begins at the unit boundary at or before ``start`` and
    the last one ends at or after ``end``; each ``end`` is the instant just
    before the next period's ``start``. Callers must pass ``start <= end``;
    a reversed range yields no periods.
    """
    if mode not in _UNITS:
        raise ValueError(f"Unknown period mode: {mode!r}")
    if start > end:
        logger.warning(f"build_periods called with start {start} after end {end}")
        return []

    align, advance = _UNITS[mode]
    periods: List[Period] = []
    cursor = align(start)
    while cursor <= end:
        following = advance(cursor)
        period_end = following - _TICK
        periods.append(
            Period(
                label=period_label(cursor, period_end, mode),
                start=cursor,
                end=period_end,
                key=period_key(cursor, mode),
            )
        )
        cursor = following

    logger.debug(f"Built {len(periods)} {mode} periods for {start} .. {end}")
    return periods


def find_period(periods: List[Period], instant: Optional[datetime]) -> Optional[Period]:
    """Return the single period containing ``instant``, if any."""
    if instant is None:
        return None
    for period in periods:
        if period.contains(instant):
            return period
    return None
