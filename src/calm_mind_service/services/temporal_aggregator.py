"""
Bucket task and stress-log records into periods and compute whole-range
summaries for the dashboard.

Empty buckets carry ``stress = 0`` and ``workload = 0``; every average and
percentage goes through ``safe_div`` so no summary is ever NaN.
"""
from collections import Counter
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from loguru import logger

from ..models.analytics import (
    AggregateBucket,
    DailyStress,
    NamedCount,
    Period,
    SeriesPoint,
    StatusCounts,
    StressByStatus,
    StressSummary,
    TagShare,
    TaskStress,
    WorkloadStressPoint,
)
from ..models.task import Priority, StressLogEntry, TaskRecord, TaskStatus
from ..utils.dates import day_range
from ..utils.numeric import mean_or_zero, percent, round_half_up, safe_div
from .period_builder import build_periods
from .stress_scorer import (
    AGGREGATE_MAX_TASK_STRESS,
    board_status,
    score_aggregate,
    score_display,
)

R = TypeVar("R")

# five high-priority tasks at the per-task maximum map to the top of the 1..5 scale
NORMALIZED_SCALE_BASE = AGGREGATE_MAX_TASK_STRESS * 5


############################################################################################################
def task_date(task: TaskRecord) -> Optional[datetime]:
    return task.relevant_date


def log_date(log: StressLogEntry) -> Optional[datetime]:
    return log.timestamp


def is_active(task: TaskRecord) -> bool:
    return not task.is_completed


def filter_in_range(
    records: Iterable[R],
    start: datetime,
    end: datetime,
    date_fn: Callable[[R], Optional[datetime]],
    keep_undated: bool = False,
) -> List[R]:
    """Records whose date lies in ``[start, end]``; undated ones only if ``keep_undated``."""
    selected = []
    for record in records:
        instant = date_fn(record)
        if instant is None:
            if keep_undated:
                selected.append(record)
            continue
        if start <= instant <= end:
            selected.append(record)
    return selected


############################################################################################################
def aggregate(
    records: Sequence[R],
    periods: Sequence[Period],
    score_fn: Callable[[R], float],
    date_fn: Callable[[R], Optional[datetime]] = task_date,  # type: ignore[assignment]
    workload_fn: Optional[Callable[[R], bool]] = None,
) -> List[AggregateBucket]:
    """
    Group records into ``periods`` by ``date_fn`` (inclusive bounds).

    ``workload`` counts the selected records, or only those accepted by
    ``workload_fn`` when given. ``stress`` is the mean of ``score_fn`` over
    the selected records and 0 for an empty period.
    """
    dated = [(date_fn(record), record) for record in records]
    buckets: List[AggregateBucket] = []
    for period in periods:
        selected = [
            record for instant, record in dated if instant is not None and period.contains(instant)
        ]
        workload = (
            sum(1 for record in selected if workload_fn(record))
            if workload_fn is not None
            else len(selected)
        )
        buckets.append(
            AggregateBucket(
                period=period,
                stress=mean_or_zero(score_fn(record) for record in selected),
                workload=workload,
                count=len(selected),
            )
        )

    undated = sum(1 for instant, _ in dated if instant is None)
    if undated:
        logger.debug(f"{undated} records without a date were left out of {len(periods)} periods")
    return buckets


def to_series(buckets: Iterable[AggregateBucket], ndigits: int = 2) -> List[SeriesPoint]:
    return [
        SeriesPoint(
            label=bucket.period.label,
            key=bucket.period.key,
            stress=round_half_up(bucket.stress, ndigits),
            count=bucket.count,
        )
        for bucket in buckets
    ]


def to_workload_points(
    buckets: Iterable[AggregateBucket], ndigits: int = 2
) -> List[WorkloadStressPoint]:
    return [
        WorkloadStressPoint(
            label=bucket.period.label,
            key=bucket.period.key,
            workload=bucket.workload,
            stress=round_half_up(bucket.stress, ndigits),
        )
        for bucket in buckets
    ]


############################################################################################################
def status_counts(tasks: Iterable[TaskRecord], now: datetime) -> StatusCounts:
    """Partition tasks into the four board columns; the counts sum to ``len(tasks)``."""
    counter = Counter(board_status(task, now) for task in tasks)
    return StatusCounts(
        todo=counter[TaskStatus.TODO],
        in_progress=counter[TaskStatus.IN_PROGRESS],
        missing=counter[TaskStatus.MISSING],
        completed=counter[TaskStatus.COMPLETED],
    )


def priority_distribution(
    tasks: Iterable[TaskRecord], active_only: bool = False
) -> List[NamedCount]:
    """High/Medium/Low counts; tasks without a known priority count as Medium."""
    counter: Counter = Counter()
    for task in tasks:
        if active_only and task.is_completed:
            continue
        counter[task.priority or Priority.MEDIUM] += 1
    return [NamedCount(name=priority.value, value=counter[priority]) for priority in Priority]


def average_stress_by_status(tasks: Iterable[TaskRecord], now: datetime) -> StressByStatus:
    """
    Mean aggregate-profile stress of open tasks per derived status.

    Completed is pinned to 0: finished work counts as resolved on the
    dashboard.
    """
    grouped: dict = {TaskStatus.TODO: [], TaskStatus.IN_PROGRESS: [], TaskStatus.MISSING: []}
    for task in tasks:
        if task.is_completed:
            continue
        grouped[board_status(task, now)].append(score_aggregate(task, now))
    return StressByStatus(
        todo=round_half_up(mean_or_zero(grouped[TaskStatus.TODO]), 1),
        in_progress=round_half_up(mean_or_zero(grouped[TaskStatus.IN_PROGRESS]), 1),
        missing=round_half_up(mean_or_zero(grouped[TaskStatus.MISSING]), 1),
        completed=0.0,
    )


def tag_distribution(tag_lists: Iterable[Iterable[str]], ranked: bool = False) -> List[TagShare]:
    """
    Frequency of each tag with its integer share of all occurrences.

    Shares are 0 when there are no tags at all. With ``ranked`` the result is
    ordered by count (descending), otherwise by first appearance.
    """
    counter: Counter = Counter()
    for tags in tag_lists:
        counter.update(tags)
    total = sum(counter.values())
    items = counter.most_common() if ranked else list(counter.items())
    return [TagShare(name=name, value=value, pct=percent(value, total)) for name, value in items]


def task_tag_distribution(
    tasks: Iterable[TaskRecord], active_only: bool = False, ranked: bool = False
) -> List[TagShare]:
    return tag_distribution(
        (task.tags for task in tasks if not (active_only and task.is_completed)), ranked=ranked
    )


############################################################################################################
def calculate_daily_stress(tasks: Sequence[TaskRecord], now: datetime) -> DailyStress:
    """Aggregate-profile totals; ``percent`` is the share of the per-task maximum."""
    task_stresses = [
        TaskStress(task_id=task.id, title=task.title, stress=score_aggregate(task, now))
        for task in tasks
    ]
    total = sum(item.stress for item in task_stresses)
    maximum = AGGREGATE_MAX_TASK_STRESS * len(task_stresses)
    return DailyStress(
        total=round_half_up(total, 2),
        max=round_half_up(maximum, 2),
        percent=round_half_up(safe_div(total, maximum) * 100, 1),
        normalized=round_half_up(1 + safe_div(total, NORMALIZED_SCALE_BASE) * 4, 1),
        task_stresses=task_stresses,
    )


def daily_stress_summary(tasks: Iterable[TaskRecord], now: datetime) -> StressSummary:
    """Display-profile totals over open tasks (each maxes at 1.0)."""
    scores = [score_display(task, now) for task in tasks if not task.is_completed]
    total = sum(scores)
    average = safe_div(total, len(scores))
    return StressSummary(
        average=average,
        total=total,
        max=len(scores),
        percent=round_half_up(average * 100, 1),
        count=len(scores),
    )


def most_stressful_tasks(
    tasks: Iterable[TaskRecord], now: datetime, limit: int = 5
) -> List[TaskStress]:
    scored = [
        TaskStress(task_id=task.id, title=task.title, stress=score_display(task, now))
        for task in tasks
        if not task.is_completed
    ]
    scored.sort(key=lambda item: item.stress, reverse=True)
    return scored[: max(limit, 0)]


############################################################################################################
def stress_series(
    tasks: Sequence[TaskRecord], periods: Sequence[Period], now: datetime
) -> List[AggregateBucket]:
    """Mean aggregate-profile stress per period, all dated tasks counted as workload."""
    return aggregate(tasks, periods, lambda task: score_aggregate(task, now), task_date)


def workload_vs_stress(
    tasks: Sequence[TaskRecord], periods: Sequence[Period], now: datetime
) -> List[AggregateBucket]:
    """Like ``stress_series`` but workload counts only open tasks."""
    return aggregate(
        tasks, periods, lambda task: score_aggregate(task, now), task_date, workload_fn=is_active
    )


def stress_over_time(tasks: Sequence[TaskRecord], now: datetime, days: int = 7) -> List[SeriesPoint]:
    """Normalized (1..5) daily stress for the last ``days`` days; empty days are 0."""
    start, end = day_range(now, days)
    points = []
    for period in build_periods(start, end, "daily"):
        day_tasks = filter_in_range(tasks, period.start, period.end, task_date)
        normalized = calculate_daily_stress(day_tasks, now).normalized if day_tasks else 0.0
        points.append(
            SeriesPoint(label=period.label, key=period.key, stress=normalized, count=len(day_tasks))
        )
    return points

