"""Tests for calendar-aligned period generation."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from calm_mind_service.services.period_builder import (
    GRANULARITIES,
    build_periods,
    find_period,
)


def assert_contiguous(periods):
    for current, following in zip(periods, periods[1:]):
        assert current.end + timedelta(microseconds=1) == following.start
        assert current.start < current.end


def test_daily_periods_cover_range():
    periods = build_periods(datetime(2026, 10, 12), datetime(2026, 10, 14, 12, 0), "daily")
    assert [p.label for p in periods] == ["Mon Oct 12", "Tue Oct 13", "Wed Oct 14"]
    assert [p.key for p in periods] == ["2026-10-12", "2026-10-13", "2026-10-14"]
    assert periods[-1].end == datetime(2026, 10, 14, 23, 59, 59, 999999)
    assert_contiguous(periods)


def test_weekly_periods_start_on_monday():
    periods = build_periods(datetime(2026, 10, 7, 15, 0), datetime(2026, 10, 20), "weekly")
    assert [p.start for p in periods] == [
        datetime(2026, 10, 5),
        datetime(2026, 10, 12),
        datetime(2026, 10, 19),
    ]
    assert [p.key for p in periods] == ["2026-W41", "2026-W42", "2026-W43"]
    assert periods[0].label == "Oct 05 - Oct 11"
    assert_contiguous(periods)


def test_monthly_periods_cross_year_boundary():
    periods = build_periods(datetime(2025, 11, 15), datetime(2026, 2, 3), "monthly")
    assert [p.label for p in periods] == ["Nov 2025", "Dec 2025", "Jan 2026", "Feb 2026"]
    assert [p.key for p in periods] == ["2025-11", "2025-12", "2026-01", "2026-02"]
    assert periods[1].end == datetime(2025, 12, 31, 23, 59, 59, 999999)
    assert_contiguous(periods)


def test_yearly_periods():
    periods = build_periods(datetime(2025, 6, 1), datetime(2026, 1, 1), "yearly")
    assert [p.label for p in periods] == ["2025", "2026"]
    assert periods[0].start == datetime(2025, 1, 1)
    assert periods[1].end == datetime(2026, 12, 31, 23, 59, 59, 999999)


def test_single_instant_yields_one_period():
    instant = datetime(2026, 10, 14, 8, 30)
    for mode in GRANULARITIES:
        periods = build_periods(instant, instant, mode)
        assert len(periods) == 1
        assert periods[0].contains(instant)


def test_keys_are_unique_and_ordered():
    periods = build_periods(datetime(2024, 12, 20), datetime(2026, 1, 10), "weekly")
    keys = [p.key for p in periods]
    assert len(keys) == len(set(keys))
    assert [p.start for p in periods] == sorted(p.start for p in periods)


def test_reversed_range_yields_nothing():
    assert build_periods(datetime(2026, 10, 14), datetime(2026, 10, 1), "daily") == []


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        build_periods(datetime(2026, 10, 1), datetime(2026, 10, 2), "hourly")  # type: ignore[arg-type]


def test_every_instant_belongs_to_exactly_one_period():
    periods = build_periods(datetime(2026, 9, 28), datetime(2026, 10, 14), "daily")
    boundary = datetime(2026, 10, 1)
    matches = [p for p in periods if p.contains(boundary)]
    assert len(matches) == 1
    assert matches[0].key == "2026-10-01"
    last_tick = boundary - timedelta(microseconds=1)
    assert find_period(periods, last_tick).key == "2026-09-30"
    assert find_period(periods, None) is None
    assert find_period(periods, datetime(2027, 1, 1)) is None
