"""
Admin analytics: the same bucketing and trend logic applied to records
merged from every student, plus per-student report rows.

Every task and stress log counts once regardless of its owner. Records with
no owner are still part of the global figures but are skipped when rows are
joined back to individual users.
"""
import csv
import io
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from ..models.analytics import (
    AggregateBucket,
    GlobalAnalytics,
    NamedCount,
    Period,
    TagShare,
    UserReportRow,
)
from ..models.task import StressLogEntry, StudentProfile, TaskRecord, TaskStatus, UserRecord
from ..utils.numeric import percent, round_half_up
from .stress_scorer import derive_status
from .temporal_aggregator import (
    aggregate,
    average_stress_by_status,
    filter_in_range,
    log_date,
    priority_distribution,
    status_counts,
    tag_distribution,
    task_date,
    to_series,
    to_workload_points,
)
from .trend_estimator import predicted_trend

UNASSIGNED_DEPARTMENT = "Unassigned"

REPORT_HEADERS = [
    "Student ID",
    "Name",
    "Level",
    "Department",
    "Total Task",
    "Total Stress",
    "On-time Task Rate",
    "Overdue Task Rate",
]


############################################################################################################
def stress_log_series(
    stress_logs: Sequence[StressLogEntry], periods: Sequence[Period]
) -> List[AggregateBucket]:
    """Average self-reported level per period; workload counts the logs."""
    return aggregate(stress_logs, periods, lambda log: log.level, log_date)


def workload_stress_correlation(
    tasks: Sequence[TaskRecord],
    stress_logs: Sequence[StressLogEntry],
    periods: Sequence[Period],
) -> List[AggregateBucket]:
    """Per period: number of tasks as workload against the average logged stress."""
    task_buckets = aggregate(tasks, periods, lambda task: 0.0, task_date)
    log_buckets = stress_log_series(stress_logs, periods)
    return [
        AggregateBucket(
            period=task_bucket.period,
            stress=log_bucket.stress,
            workload=task_bucket.workload,
            count=log_bucket.count,
        )
        for task_bucket, log_bucket in zip(task_buckets, log_buckets)
    ]


def stressor_distribution(stress_logs: Iterable[StressLogEntry]) -> List[TagShare]:
    return tag_distribution((log.tags for log in stress_logs), ranked=True)


def department_distribution(
    profiles: Iterable[StudentProfile], users: Iterable[UserRecord] = ()
) -> List[NamedCount]:
    """Students per department; the profile wins over the user record."""
    departments: Dict[str, str] = {}
    for user in users:
        if user.id:
            departments[user.id] = user.department
    for profile in profiles:
        if profile.user_id:
            departments[profile.user_id] = profile.department or departments.get(profile.user_id, "")
    counter = Counter(name.strip() or UNASSIGNED_DEPARTMENT for name in departments.values())
    return [NamedCount(name=name, value=value) for name, value in counter.most_common()]


############################################################################################################
def aggregate_across_users(
    tasks: Sequence[TaskRecord],
    stress_logs: Sequence[StressLogEntry],
    periods: Sequence[Period],
    now: datetime,
    profiles: Sequence[StudentProfile] = (),
    users: Sequence[UserRecord] = (),
) -> GlobalAnalytics:
    """
    Global dashboard over the span covered by ``periods``.

    Snapshot figures (status, priority, stress by status) keep undated tasks;
    time series only use dated tasks and logs inside the span.
    """
    if periods:
        start, end = periods[0].start, periods[-1].end
        snapshot = filter_in_range(tasks, start, end, task_date, keep_undated=True)
        dated_tasks = filter_in_range(tasks, start, end, task_date)
        logs = filter_in_range(stress_logs, start, end, log_date)
    else:
        snapshot, dated_tasks, logs = list(tasks), [], []

    correlation = workload_stress_correlation(dated_tasks, logs, periods)
    logger.debug(
        f"Global analytics: {len(snapshot)} tasks, {len(logs)} stress logs, {len(periods)} periods"
    )
    return GlobalAnalytics(
        periods=list(periods),
        status_counts=status_counts(snapshot, now),
        priority_distribution=priority_distribution(snapshot),
        stress_series=to_series(stress_log_series(logs, periods), ndigits=1),
        workload_vs_stress=to_workload_points(correlation, ndigits=1),
        stressor_distribution=stressor_distribution(logs),
        predicted_trend=predicted_trend(correlation, now),
        stress_by_status=average_stress_by_status(snapshot, now),
        department_distribution=department_distribution(profiles, users),
    )


############################################################################################################
def completed_on_time(task: TaskRecord, now: datetime) -> Optional[bool]:
    """True/False for finished or missing tasks, None for work still open and not late."""
    status = derive_status(task, now)
    if status == TaskStatus.COMPLETED:
        return True
    if status in (TaskStatus.DONE_LATE, TaskStatus.MISSING):
        return False
    return None


def live_stress_percentage(profile: Optional[StudentProfile]) -> Optional[float]:
    """Stress percentage published on the profile, converting a 1..5 level when needed."""
    if profile is None:
        return None
    if profile.stress_percentage is not None and profile.stress_percentage > 0:
        return profile.stress_percentage
    if profile.stress_level is not None and profile.stress_level > 0:
        return (profile.stress_level - 1) / 4 * 100
    return None


def _group_by_owner(records: Iterable, kind: str) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    orphans = 0
    for record in records:
        if not record.owner_id:
            orphans += 1
            continue
        grouped[record.owner_id].append(record)
    if orphans:
        logger.debug(f"Skipped {orphans} {kind} without an owner for the user report")
    return grouped


def build_user_report(
    users: Sequence[UserRecord],
    tasks: Sequence[TaskRecord],
    stress_logs: Sequence[StressLogEntry],
    profiles: Sequence[StudentProfile],
    start: datetime,
    end: datetime,
    now: datetime,
) -> List[UserReportRow]:
    """One row per user with task totals and on-time / overdue rates for the range."""
    tasks_by_user = _group_by_owner(tasks, "tasks")
    logs_by_user = _group_by_owner(stress_logs, "stress logs")
    profiles_by_user = {profile.user_id: profile for profile in profiles if profile.user_id}

    rows: List[UserReportRow] = []
    for user in users:
        if not user.id:
            logger.debug("Skipped a user record without an id")
            continue
        profile = profiles_by_user.get(user.id)
        user_tasks = filter_in_range(tasks_by_user.get(user.id, []), start, end, task_date)
        user_logs = filter_in_range(logs_by_user.get(user.id, []), start, end, log_date)

        on_time = overdue = 0
        for task in user_tasks:
            outcome = completed_on_time(task, now)
            if outcome is True:
                on_time += 1
            elif outcome is False:
                overdue += 1
        considered = len(user_tasks) or 1

        live = live_stress_percentage(profile)
        if live is not None:
            total_stress = live
            display = f"{int(round_half_up(live))}%"
        else:
            total_stress = sum(log.level for log in user_logs)
            display = f"{total_stress:g}"

        rows.append(
            UserReportRow(
                user_id=user.id,
                student_id=(profile.student_number if profile else "") or user.student_id or user.id,
                name=user.display_name or (profile.display_name if profile else ""),
                level=(profile.year_level if profile else "") or user.level,
                department=(profile.department if profile else "") or user.department,
                total_tasks=len(user_tasks),
                total_stress=total_stress,
                total_stress_display=display,
                on_time_rate=percent(on_time, considered),
                overdue_rate=percent(overdue, considered),
            )
        )
    return rows


def export_report_csv(rows: Iterable[UserReportRow]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(REPORT_HEADERS)
    for row in rows:
        writer.writerow(
            [
                row.student_id,
                row.name,
                row.level,
                row.department,
                row.total_tasks,
                row.total_stress_display,
                f"{row.on_time_rate}%",
                f"{row.overdue_rate}%",
            ]
        )
    return buffer.getvalue()
