"""Tests for the workload/stress regression and forecast."""

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from calm_mind_service.models.analytics import AggregateBucket
from calm_mind_service.services.period_builder import build_periods
from calm_mind_service.services.trend_estimator import (
    MINIMAL_INSIGHT,
    NO_DATA_INSIGHT,
    fit,
    fit_points,
    next_friday,
    predict,
    predicted_trend,
    trend_direction,
)

NOW = datetime(2026, 10, 14, 12, 0)


def make_buckets(pairs):
    periods = build_periods(datetime(2026, 10, 1), datetime(2026, 10, len(pairs)), "daily")
    return [
        AggregateBucket(period=period, workload=workload, stress=stress, count=workload)
        for period, (workload, stress) in zip(periods, pairs)
    ]


def test_exact_linear_fit():
    model = fit(make_buckets([(0, 1.0), (1, 1.5), (2, 2.0), (3, 2.5)]))
    assert model.slope == pytest.approx(0.5)
    assert model.intercept == pytest.approx(1.0)
    assert not model.degenerate
    assert model.meaningful
    assert predict(model, 4) == pytest.approx(3.0)


def test_identical_workloads_fall_back_to_mean():
    model = fit_points([(2.0, 1.0), (2.0, 3.0)])
    assert model.degenerate
    assert model.slope == 0.0
    assert model.intercept == pytest.approx(2.0)


def test_single_and_empty_inputs_are_flat():
    single = fit_points([(3.0, 2.4)])
    assert single.degenerate
    assert single.intercept == pytest.approx(2.4)
    assert not single.meaningful
    assert fit_points([]).intercept == 0.0


def test_direction_thresholds():
    assert trend_direction(0.0) == "minimal"
    assert trend_direction(0.029) == "minimal"
    assert trend_direction(-0.029) == "minimal"
    assert trend_direction(0.03) == "increasing"
    assert trend_direction(-0.5) == "decreasing"


def test_next_friday():
    assert next_friday(NOW).date() == datetime(2026, 10, 16).date()
    friday = datetime(2026, 10, 16, 9, 0)
    assert next_friday(friday) == friday


class TestPredictedTrend:
    def test_increasing_trend_with_forecast(self):
        trend = predicted_trend(make_buckets([(0, 1.0), (1, 1.5), (2, 2.0), (3, 2.5)]), NOW)
        assert trend.direction == "increasing"
        assert [p.predicted for p in trend.series] == [1.0, 1.5, 2.0, 2.5]
        assert [p.stress for p in trend.series] == [1.0, 1.5, 2.0, 2.5]
        assert trend.forecast.workload == 4
        assert trend.forecast.predicted_stress == 3.0
        assert trend.insight.startswith("If current workload continues")
        assert "by Friday" in trend.insight

    def test_forecast_is_clamped(self):
        trend = predicted_trend(make_buckets([(0, 1.0), (1, 3.0), (2, 5.0)]), NOW)
        assert trend.forecast.predicted_stress == 5.0

    def test_decreasing_trend(self):
        trend = predicted_trend(make_buckets([(0, 3.0), (1, 2.0), (2, 1.0)]), NOW)
        assert trend.direction == "decreasing"
        assert trend.insight.startswith("Model suggests stress will")
        assert trend.forecast.predicted_stress == 0.0

    def test_flat_stress_is_minimal(self):
        trend = predicted_trend(make_buckets([(1, 2.0), (2, 2.0), (3, 2.0)]), NOW)
        assert trend.direction == "minimal"
        assert trend.insight == MINIMAL_INSIGHT

    def test_no_data(self):
        empty = predicted_trend([], NOW)
        assert empty.series == []
        assert empty.forecast is None
        assert empty.insight == NO_DATA_INSIGHT

        zeros = predicted_trend(make_buckets([(0, 0.0), (0, 0.0), (0, 0.0)]), NOW)
        assert zeros.insight == NO_DATA_INSIGHT
        assert all(p.predicted == 0.0 for p in zeros.series)

    def test_single_bucket_has_no_forecast(self):
        trend = predicted_trend(make_buckets([(2, 2.5)]), NOW)
        assert trend.forecast is None
        assert trend.series[0].predicted == 2.5
