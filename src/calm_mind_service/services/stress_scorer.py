"""
Per-task stress scoring.

Two scoring profiles coexist and must never be mixed in one ratio:

- ``ScoringProfile.DISPLAY``: averaged factors in [0, 1], used for per-task
  rings, "most stressful" ordering and the display summary.
- ``ScoringProfile.AGGREGATE``: priority weight 1..3 plus small deadline and
  completion deltas (max 3.2), used for daily/period percentages.

All functions take an explicit ``now`` so scores are deterministic.
"""
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Final, Optional, final

from ..models.task import Priority, TaskRecord, TaskStatus
from ..utils.numeric import clamp01, round_half_up, safe_div


@final
class ScoringProfile(str, Enum):
    DISPLAY = "display"
    AGGREGATE = "aggregate"


DISPLAY_PRIORITY_WEIGHTS: Final[Dict[Priority, float]] = {
    Priority.HIGH: 1.0,
    Priority.MEDIUM: 0.6,
    Priority.LOW: 0.3,
}
AGGREGATE_PRIORITY_WEIGHTS: Final[Dict[Priority, float]] = {
    Priority.HIGH: 3.0,
    Priority.MEDIUM: 2.0,
    Priority.LOW: 1.0,
}

# display profile deadline tiers: (hours until due, factor)
DISPLAY_DEADLINE_TIERS: Final = ((24.0, 0.9), (72.0, 0.7), (168.0, 0.5))
DISPLAY_DEADLINE_FAR: Final[float] = 0.3
DISPLAY_DEADLINE_OVERDUE: Final[float] = 1.0
DISPLAY_DEADLINE_UNKNOWN: Final[float] = 0.5

DISPLAY_COMPLETION_FACTORS: Final[Dict[TaskStatus, float]] = {
    TaskStatus.COMPLETED: 0.0,
    TaskStatus.DONE_LATE: 0.0,
    TaskStatus.IN_PROGRESS: 0.7,
    TaskStatus.MISSING: 1.0,
    TaskStatus.TODO: 0.8,
}
SUBTASK_MAX_REDUCTION: Final[float] = 0.3

AGGREGATE_OVERDUE_DELTA: Final[float] = 0.10
AGGREGATE_DUE_SOON_DELTA: Final[float] = 0.05
AGGREGATE_UNKNOWN_DUE_DELTA: Final[float] = 0.05
AGGREGATE_DUE_SOON_HOURS: Final[float] = 72.0
AGGREGATE_COMPLETION_DELTA: Final[float] = 0.10
AGGREGATE_COMPLETED_DELTA: Final[float] = 0.0
AGGREGATE_MAX_TASK_STRESS: Final[float] = 3.2  # High (3) + overdue + completion deltas


############################################################################################################
def hours_until_due(task: TaskRecord, now: datetime) -> Optional[float]:
    """Signed hours from ``now`` to the due date; None without a due date."""
    if task.due_date is None:
        return None
    return (task.due_date - now).total_seconds() / 3600


def is_overdue(task: TaskRecord, now: datetime) -> bool:
    hours = hours_until_due(task, now)
    return hours is not None and hours < 0 and not task.is_completed


def derive_status(task: TaskRecord, now: datetime) -> TaskStatus:
    """
    Resolve the presentation status of a task.

    Completed tasks are ``done_late`` when stored as such or finished after
    the due date, otherwise ``completed``. Open tasks past their due date are
    ``missing`` regardless of the stored status.
    """
    if task.is_completed:
        if task.status == TaskStatus.DONE_LATE:
            return TaskStatus.DONE_LATE
        if task.completed_at and task.due_date and task.completed_at > task.due_date:
            return TaskStatus.DONE_LATE
        return TaskStatus.COMPLETED
    if is_overdue(task, now):
        return TaskStatus.MISSING
    if task.status in (TaskStatus.IN_PROGRESS, TaskStatus.MISSING):
        return task.status
    return TaskStatus.TODO


def board_status(task: TaskRecord, now: datetime) -> TaskStatus:
    """Derived status folded onto the four dashboard columns."""
    status = derive_status(task, now)
    return TaskStatus.COMPLETED if status == TaskStatus.DONE_LATE else status


############################################################################################################
def priority_weight(priority: Optional[Priority], profile: ScoringProfile) -> float:
    weights = (
        DISPLAY_PRIORITY_WEIGHTS if profile == ScoringProfile.DISPLAY else AGGREGATE_PRIORITY_WEIGHTS
    )
    # unknown priority is scored as Medium
    return weights[priority] if priority in weights else weights[Priority.MEDIUM]


def deadline_factor(task: TaskRecord, now: datetime) -> float:
    """Display-profile deadline pressure."""
    if task.is_completed:
        return 0.0
    hours = hours_until_due(task, now)
    if hours is None:
        return DISPLAY_DEADLINE_UNKNOWN
    if hours < 0:
        return DISPLAY_DEADLINE_OVERDUE
    for limit, factor in DISPLAY_DEADLINE_TIERS:
        if hours <= limit:
            return factor
    return DISPLAY_DEADLINE_FAR


def completion_factor(task: TaskRecord, now: datetime) -> float:
    """Display-profile completion pressure, eased by finished subtasks."""
    status = derive_status(task, now)
    factor = DISPLAY_COMPLETION_FACTORS[status]
    if factor and task.subtasks:
        done = sum(1 for subtask in task.subtasks if subtask.completed)
        factor *= 1 - safe_div(done, len(task.subtasks)) * SUBTASK_MAX_REDUCTION
    return factor


def deadline_delta(task: TaskRecord, now: datetime) -> float:
    """Aggregate-profile increment for deadline proximity."""
    hours = hours_until_due(task, now)
    if hours is None:
        return AGGREGATE_UNKNOWN_DUE_DELTA
    if hours < 0:
        return AGGREGATE_OVERDUE_DELTA
    if hours <= AGGREGATE_DUE_SOON_HOURS:
        return AGGREGATE_DUE_SOON_DELTA
    return 0.0


############################################################################################################
def score_display(task: TaskRecord, now: datetime) -> float:
    """Averaged mode: ``(weight + deadline + completion) / 3`` clamped to [0, 1]."""
    weight = priority_weight(task.priority, ScoringProfile.DISPLAY)
    return clamp01((weight + deadline_factor(task, now) + completion_factor(task, now)) / 3)


def score_aggregate(task: TaskRecord, now: datetime) -> float:
    """Additive mode: ``weight + deadline delta + completion delta``, 2 decimals."""
    weight = priority_weight(task.priority, ScoringProfile.AGGREGATE)
    if task.is_completed:
        return round_half_up(weight + AGGREGATE_COMPLETED_DELTA, 2)
    return round_half_up(weight + deadline_delta(task, now) + AGGREGATE_COMPLETION_DELTA, 2)


def score_task(
    task: TaskRecord, now: datetime, profile: ScoringProfile = ScoringProfile.DISPLAY
) -> float:
    if profile == ScoringProfile.AGGREGATE:
        return score_aggregate(task, now)
    return score_display(task, now)


def scorer_for(profile: ScoringProfile, now: datetime) -> Callable[[TaskRecord], float]:
    """Bind ``now`` and a profile into a one-argument score function."""
    return lambda task: score_task(task, now, profile)


def display_percent(value: float) -> int:
    """Convert a display-profile score to the 0..100 ring percentage."""
    return int(round_half_up(clamp01(value) * 100))
