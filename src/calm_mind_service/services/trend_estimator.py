"""
Least-squares trend of stress against workload.

The predicted series is reported next to the actual one, never in place of
it, so consumers can see where the model and reality diverge.
"""
from datetime import datetime, timedelta
from typing import Final, List, Literal, Optional, Sequence, Tuple

from loguru import logger

from ..models.analytics import (
    AggregateBucket,
    PredictedTrend,
    RegressionModel,
    TrendForecast,
    TrendPoint,
)
from ..utils.numeric import clamp, mean_or_zero, round_half_up, safe_div

MINIMAL_SLOPE: Final[float] = 0.03
STRESS_CEILING: Final[float] = 5.0

NO_DATA_INSIGHT: Final[str] = "Not enough data to compute a trend."
MINIMAL_INSIGHT: Final[str] = (
    "Predicted impact is minimal, stress changes are weakly tied to workload."
)


############################################################################################################
def fit_points(points: Sequence[Tuple[float, float]]) -> RegressionModel:
    """
    Ordinary least squares over ``(workload, stress)`` pairs.

    With fewer than two points, or when every workload is identical, the fit
    is flat: slope 0 and intercept equal to the mean stress (0 if no points).
    """
    n = len(points)
    meaningful = sum(1 for x, y in points if x or y) >= 2
    flat = RegressionModel(
        slope=0.0,
        intercept=mean_or_zero(y for _, y in points),
        points=n,
        degenerate=True,
        meaningful=meaningful,
    )
    if n < 2:
        logger.debug(f"Regression over {n} points is degenerate, using flat mean")
        return flat

    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        logger.debug("All workloads identical, using flat mean")
        return flat

    slope = safe_div(n * sum_xy - sum_x * sum_y, denominator)
    intercept = safe_div(sum_y - slope * sum_x, n)
    return RegressionModel(
        slope=slope, intercept=intercept, points=n, degenerate=False, meaningful=meaningful
    )


def fit(buckets: Sequence[AggregateBucket]) -> RegressionModel:
    return fit_points([(float(bucket.workload), bucket.stress) for bucket in buckets])


def predict(model: RegressionModel, workload: float) -> float:
    return model.slope * workload + model.intercept


############################################################################################################
def trend_direction(slope: float) -> Literal["minimal", "increasing", "decreasing"]:
    if abs(slope) < MINIMAL_SLOPE:
        return "minimal"
    return "increasing" if slope > 0 else "decreasing"


def next_friday(now: datetime) -> datetime:
    """The coming Friday (today when ``now`` is a Friday)."""
    return now + timedelta(days=(4 - now.weekday()) % 7)


def build_insight(model: RegressionModel, series: Sequence[TrendPoint], now: datetime) -> str:
    if not any(point.workload > 0 or point.stress > 0 for point in series):
        return NO_DATA_INSIGHT

    last_stress = series[-1].stress
    last_predicted = series[-1].predicted
    change = "increase" if last_predicted > last_stress else "decrease"

    direction = trend_direction(model.slope)
    if direction == "minimal":
        return MINIMAL_INSIGHT
    if direction == "increasing":
        projected = min(STRESS_CEILING, last_predicted + model.slope * 2)
        return (
            f"If current workload continues, stress may {change} to {projected:.1f} "
            f"by {next_friday(now).strftime('%A')}. Consider taking breaks to manage stress levels."
        )
    return f"Model suggests stress will {change}. Keep up the good work with task management!"


def forecast_next(
    buckets: Sequence[AggregateBucket], model: RegressionModel
) -> Optional[TrendForecast]:
    """Project one more unit of workload past the last bucket, clamped to the 0..5 scale."""
    if len(buckets) < 2:
        return None
    workload = buckets[-1].workload + 1
    return TrendForecast(
        workload=workload,
        predicted_stress=round_half_up(clamp(predict(model, workload), 0.0, STRESS_CEILING), 1),
    )


def predicted_trend(buckets: Sequence[AggregateBucket], now: datetime) -> PredictedTrend:
    model = fit(buckets)
    series: List[TrendPoint] = [
        TrendPoint(
            label=bucket.period.label,
            workload=bucket.workload,
            stress=round_half_up(bucket.stress, 2),
            predicted=round_half_up(predict(model, bucket.workload), 2),
        )
        for bucket in buckets
    ]
    return PredictedTrend(
        model=model,
        series=series,
        forecast=forecast_next(buckets, model),
        direction=trend_direction(model.slope),
        insight=build_insight(model, series, now) if series else NO_DATA_INSIGHT,
    )
