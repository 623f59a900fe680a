from pathlib import Path
from typing import Final, Literal, final

from pydantic import BaseModel

"""
Service and engine settings are hard-coded here for now.
"""


##################################################################################################################
# Analytics service (HTTP host around the stress engine)
@final
class AnalyticsServerConfig(BaseModel):
    server_ip_address: str = "0.0.0.0"
    port: int = 8700
    user_dashboard_api: str = "/analytics/v1/dashboard/"
    admin_dashboard_api: str = "/analytics/v1/admin/"
    user_report_api: str = "/analytics/v1/admin/report/"
    chat_context_api: str = "/analytics/v1/chat-context/"
    test_get_api: str = "/analytics/test/get/v1/"
    fast_api_title: str = "analytics_service"
    fast_api_version: str = "0.1.0"
    fast_api_description: str = "Stress scoring and temporal aggregation for student tasks"


##################################################################################################################
# Stress engine defaults
@final
class EngineConfig(BaseModel):
    timezone: str = "UTC"
    default_period_mode: Literal["daily", "weekly", "monthly", "yearly"] = "daily"
    stress_over_time_days: int = 7
    refresh_interval_seconds: int = 300
    top_stressors_limit: int = 5
    next_deadlines_limit: int = 3


##################################################################################################################


# log output directory
LOGS_DIR: Path = Path("logs")
LOGS_DIR.mkdir(parents=True, exist_ok=True)
assert LOGS_DIR.exists(), f"Directory not found: {LOGS_DIR}"

# default dashboard range when the caller does not pass one (days back from today)
DEFAULT_RANGE_DAYS: Final[int] = 29
