from datetime import datetime
from typing import Any, Dict, List, Optional, final

from pydantic import BaseModel, Field

from .analytics import ChatContext, GlobalAnalytics, PeriodMode, UserDashboard, UserReportRow
from .registry import register_base_model_class

################################################################################################################
################################################################################################################
################################################################################################################

# Records travel as raw dicts so that each one is validated with the
# request's timezone in the validation context.


@final
@register_base_model_class
class DashboardRequest(BaseModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    start: Optional[str] = None
    end: Optional[str] = None
    period_mode: PeriodMode = "daily"
    now: Optional[datetime] = None
    timezone: str = "UTC"


@final
@register_base_model_class
class DashboardResponse(BaseModel):
    dashboard: UserDashboard
    skipped_records: int = 0


@final
@register_base_model_class
class AdminDashboardRequest(BaseModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    stress_logs: List[Dict[str, Any]] = Field(default_factory=list)
    users: List[Dict[str, Any]] = Field(default_factory=list)
    profiles: List[Dict[str, Any]] = Field(default_factory=list)
    start: Optional[str] = None
    end: Optional[str] = None
    period_mode: PeriodMode = "monthly"
    now: Optional[datetime] = None
    timezone: str = "UTC"


@final
@register_base_model_class
class AdminDashboardResponse(BaseModel):
    analytics: GlobalAnalytics
    skipped_records: int = 0


@final
@register_base_model_class
class UserReportResponse(BaseModel):
    rows: List[UserReportRow]
    csv: str = ""


@final
@register_base_model_class
class ChatContextRequest(BaseModel):
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    now: Optional[datetime] = None
    timezone: str = "UTC"


@final
@register_base_model_class
class ChatContextResponse(BaseModel):
    context: ChatContext
