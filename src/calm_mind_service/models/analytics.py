"""
Computed analytics shapes handed to charts, KPI cards and the assistant.
"""
from datetime import datetime
from typing import List, Literal, Optional, final

from pydantic import BaseModel, Field

from .registry import register_base_model_class

PeriodMode = Literal["daily", "weekly", "monthly", "yearly"]


################################################################################################################
################################################################################################################
################################################################################################################


@final
@register_base_model_class
class Period(BaseModel):
    """A calendar-aligned time bucket; ``end`` is inclusive."""
    label: str = Field(description="Short human-readable tag")
    start: datetime = Field(description="First instant of the period")
    end: datetime = Field(description="Last instant of the period")
    key: str = Field(description="Stable sortable identifier, unique per build")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@final
@register_base_model_class
class AggregateBucket(BaseModel):
    period: Period
    stress: float = Field(default=0.0, description="Mean score of records in the period, 0 if empty")
    workload: int = Field(default=0, ge=0)
    count: int = Field(default=0, ge=0)

    @property
    def label(self) -> str:
        return self.period.label


@final
@register_base_model_class
class RegressionModel(BaseModel):
    slope: float = 0.0
    intercept: float = 0.0
    points: int = Field(default=0, description="Number of (workload, stress) pairs fitted")
    degenerate: bool = Field(default=True, description="Fit fell back to the flat mean")
    meaningful: bool = Field(default=False, description="At least two buckets carry data")


@final
@register_base_model_class
class TrendPoint(BaseModel):
    label: str
    workload: int
    stress: float
    predicted: float


@final
@register_base_model_class
class TrendForecast(BaseModel):
    workload: int
    predicted_stress: float


@final
@register_base_model_class
class PredictedTrend(BaseModel):
    model: RegressionModel
    series: List[TrendPoint] = Field(default_factory=list)
    forecast: Optional[TrendForecast] = None
    direction: Literal["minimal", "increasing", "decreasing"] = "minimal"
    insight: str = ""


################################################################################################################
################################################################################################################
################################################################################################################


@final
@register_base_model_class
class StatusCounts(BaseModel):
    todo: int = 0
    in_progress: int = 0
    missing: int = 0
    completed: int = 0

    @property
    def total(self) -> int:
        return self.todo + self.in_progress + self.missing + self.completed


@final
@register_base_model_class
class NamedCount(BaseModel):
    name: str
    value: int


@final
@register_base_model_class
class StressByStatus(BaseModel):
    todo: float = 0.0
    in_progress: float = 0.0
    missing: float = 0.0
    completed: float = 0.0


@final
@register_base_model_class
class TagShare(BaseModel):
    name: str
    value: int
    pct: int = Field(description="Integer percentage of all tag occurrences")


@final
@register_base_model_class
class TaskStress(BaseModel):
    task_id: Optional[str] = None
    title: str
    stress: float


@final
@register_base_model_class
class DailyStress(BaseModel):
    """Additive-profile totals for one set of tasks."""
    total: float = 0.0
    max: float = 0.0
    percent: float = 0.0
    normalized: float = 1.0
    task_stresses: List[TaskStress] = Field(default_factory=list)


@final
@register_base_model_class
class StressSummary(BaseModel):
    """Display-profile totals over active tasks."""
    average: float = 0.0
    total: float = 0.0
    max: int = 0
    percent: float = 0.0
    count: int = 0


@final
@register_base_model_class
class SeriesPoint(BaseModel):
    label: str
    key: str
    stress: float
    count: int = 0


@final
@register_base_model_class
class WorkloadStressPoint(BaseModel):
    label: str
    key: str
    workload: int
    stress: float


################################################################################################################
################################################################################################################
################################################################################################################


@final
@register_base_model_class
class AIStressLevel(BaseModel):
    percent: float = 0.0
    overdue: int = 0
    due_soon: int = 0
    label: Literal["Low", "Moderate", "High"] = "Low"


@final
@register_base_model_class
class TopStressor(BaseModel):
    task_id: Optional[str] = None
    title: str
    percent: int


@final
@register_base_model_class
class Deadline(BaseModel):
    task_id: Optional[str] = None
    title: str
    due: datetime


@final
@register_base_model_class
class ChatContext(BaseModel):
    """Numbers the assistant is allowed to quote back to the student."""
    stress: AIStressLevel
    top_stressors: List[TopStressor] = Field(default_factory=list)
    next_deadlines: List[Deadline] = Field(default_factory=list)
    reply: str = ""
    recommendations: List[str] = Field(default_factory=list)


################################################################################################################
################################################################################################################
################################################################################################################


@final
@register_base_model_class
class UserDashboard(BaseModel):
    periods: List[Period]
    status_counts: StatusCounts
    priority_distribution: List[NamedCount]
    stress_by_status: StressByStatus
    stress_series: List[SeriesPoint]
    workload_vs_stress: List[WorkloadStressPoint]
    tag_distribution: List[TagShare]
    predicted_trend: PredictedTrend
    daily_stress: DailyStress
    summary: StressSummary
    stress_over_time: List[SeriesPoint]


@final
@register_base_model_class
class GlobalAnalytics(BaseModel):
    periods: List[Period]
    status_counts: StatusCounts
    priority_distribution: List[NamedCount]
    stress_series: List[SeriesPoint]
    workload_vs_stress: List[WorkloadStressPoint]
    stressor_distribution: List[TagShare]
    predicted_trend: PredictedTrend
    stress_by_status: StressByStatus
    department_distribution: List[NamedCount] = Field(default_factory=list)


@final
@register_base_model_class
class UserReportRow(BaseModel):
    user_id: str
    student_id: str
    name: str
    level: str
    department: str
    total_tasks: int
    total_stress: float
    total_stress_display: str
    on_time_rate: int
    overdue_rate: int
