"""
Dashboard assembly: parse raw snapshots supplied by the host and run the
stress engine over them.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..config.configuration import DEFAULT_RANGE_DAYS, EngineConfig
from ..models.analytics import ChatContext, GlobalAnalytics, PeriodMode, UserDashboard, UserReportRow
from ..models.task import StressLogEntry, StudentProfile, TaskRecord, UserRecord
from ..utils.dates import current_time, normalize_range, parse_instant, resolve_timezone, start_of_day
from .chat_context import build_chat_context
from .cross_user_aggregator import aggregate_across_users, build_user_report
from .period_builder import build_periods
from .temporal_aggregator import (
    average_stress_by_status,
    calculate_daily_stress,
    daily_stress_summary,
    filter_in_range,
    priority_distribution,
    status_counts,
    stress_over_time,
    stress_series,
    task_date,
    task_tag_distribution,
    to_series,
    to_workload_points,
    workload_vs_stress,
)
from .trend_estimator import predicted_trend

M = TypeVar("M", bound=BaseModel)


class StressDashboardCalculator:
    """Compute dashboards from in-memory snapshots. Holds no per-request state."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    ############################################################################################################
    def parse_records(
        self, model: Type[M], raw: Iterable[Dict[str, Any]], timezone_str: Optional[str] = None
    ) -> Tuple[List[M], int]:
        """Validate raw dicts, dropping (and counting) the ones that cannot be read at all."""
        context = {"timezone": timezone_str or self.config.timezone}
        records: List[M] = []
        skipped = 0
        for item in raw:
            try:
                records.append(model.model_validate(item, context=context))
            except ValidationError as e:
                skipped += 1
                logger.warning(f"Skipping malformed {model.__name__}: {e.error_count()} errors")
        return records, skipped

    def resolve_now(self, now: Optional[datetime], timezone_str: Optional[str] = None) -> datetime:
        zone = timezone_str or self.config.timezone
        if now is None:
            return current_time(zone)
        parsed = parse_instant(now, resolve_timezone(zone))
        return parsed if parsed is not None else current_time(zone)

    def resolve_range(
        self, start: Any, end: Any, now: datetime, timezone_str: Optional[str] = None
    ) -> Tuple[datetime, datetime]:
        """Parse the requested range, defaulting to the last 30 days and swapping if reversed."""
        tz = resolve_timezone(timezone_str or self.config.timezone)
        parsed_end = parse_instant(end, tz)
        parsed_start = parse_instant(start, tz)
        range_end = parsed_end or now
        range_start = parsed_start or start_of_day(range_end) - timedelta(days=DEFAULT_RANGE_DAYS)
        range_start, range_end = normalize_range(range_start, range_end)
        # a date-only end covers its whole day
        if parsed_end is not None and range_end == start_of_day(range_end):
            range_end = range_end + timedelta(days=1) - timedelta(microseconds=1)
        return range_start, range_end

    ############################################################################################################
    def get_user_dashboard(
        self,
        tasks: List[TaskRecord],
        start: datetime,
        end: datetime,
        now: datetime,
        period_mode: Optional[PeriodMode] = None,
    ) -> UserDashboard:
        mode = period_mode or self.config.default_period_mode
        periods = build_periods(start, end, mode)

        snapshot = filter_in_range(tasks, start, end, task_date, keep_undated=True)
        # an empty range falls back to everything so the cards are never blank
        if not snapshot and tasks:
            snapshot = list(tasks)
        dated = filter_in_range(tasks, start, end, task_date)

        workload_buckets = workload_vs_stress(dated, periods, now)
        dashboard = UserDashboard(
            periods=periods,
            status_counts=status_counts(snapshot, now),
            priority_distribution=priority_distribution(snapshot),
            stress_by_status=average_stress_by_status(tasks, now),
            stress_series=to_series(stress_series(dated, periods, now)),
            workload_vs_stress=to_workload_points(workload_buckets),
            tag_distribution=task_tag_distribution(snapshot),
            predicted_trend=predicted_trend(workload_buckets, now),
            daily_stress=calculate_daily_stress(tasks, now),
            summary=daily_stress_summary(tasks, now),
            stress_over_time=stress_over_time(tasks, now, self.config.stress_over_time_days),
        )
        logger.info(
            f"Built user dashboard: {len(tasks)} tasks, {len(periods)} {mode} periods, "
            f"daily stress {dashboard.daily_stress.percent}%"
        )
        return dashboard

    def get_admin_dashboard(
        self,
        tasks: List[TaskRecord],
        stress_logs: List[StressLogEntry],
        start: datetime,
        end: datetime,
        now: datetime,
        period_mode: Optional[PeriodMode] = None,
        users: Optional[List[UserRecord]] = None,
        profiles: Optional[List[StudentProfile]] = None,
    ) -> GlobalAnalytics:
        mode = period_mode or self.config.default_period_mode
        periods = build_periods(start, end, mode)
        analytics = aggregate_across_users(
            tasks, stress_logs, periods, now, profiles=profiles or [], users=users or []
        )
        logger.info(
            f"Built admin dashboard: {analytics.status_counts.total} tasks, "
            f"{len(stress_logs)} stress logs, {len(periods)} {mode} periods"
        )
        return analytics

    def get_user_report(
        self,
        users: List[UserRecord],
        tasks: List[TaskRecord],
        stress_logs: List[StressLogEntry],
        profiles: List[StudentProfile],
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> List[UserReportRow]:
        rows = build_user_report(users, tasks, stress_logs, profiles, start, end, now)
        logger.info(f"Built report rows for {len(rows)} users")
        return rows

    def get_chat_context(self, tasks: List[TaskRecord], now: datetime) -> ChatContext:
        return build_chat_context(
            tasks,
            now,
            top_limit=self.config.top_stressors_limit,
            deadline_limit=self.config.next_deadlines_limit,
        )
