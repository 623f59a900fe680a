from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ...config.configuration import AnalyticsServerConfig, EngineConfig
from ...models.api import (
    AdminDashboardRequest,
    AdminDashboardResponse,
    ChatContextRequest,
    ChatContextResponse,
    DashboardRequest,
    DashboardResponse,
    UserReportResponse,
)
from ...models.task import StressLogEntry, StudentProfile, TaskRecord, UserRecord
from ..cross_user_aggregator import export_report_csv
from ..dashboard_service import StressDashboardCalculator

analytics_server_config = AnalyticsServerConfig()
calculator = StressDashboardCalculator(EngineConfig())

############################################################################################################
# Initialize the FastAPI app
app = FastAPI(
    title=analytics_server_config.fast_api_title,
    version=analytics_server_config.fast_api_version,
    description=analytics_server_config.fast_api_description,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


############################################################################################################
############################################################################################################
############################################################################################################
@app.get(path=analytics_server_config.test_get_api)
async def handle_test_get() -> dict:
    return {"status": "ok", "service": analytics_server_config.fast_api_title}


############################################################################################################
@app.post(path=analytics_server_config.user_dashboard_api, response_model=DashboardResponse)
async def handle_user_dashboard(request_data: DashboardRequest) -> DashboardResponse:
    try:
        now = calculator.resolve_now(request_data.now, request_data.timezone)
        start, end = calculator.resolve_range(
            request_data.start, request_data.end, now, request_data.timezone
        )
        tasks, skipped = calculator.parse_records(
            TaskRecord, request_data.tasks, request_data.timezone
        )
        dashboard = calculator.get_user_dashboard(
            tasks, start, end, now, period_mode=request_data.period_mode
        )
        return DashboardResponse(dashboard=dashboard, skipped_records=skipped)

    except Exception as e:
        logger.error(f"Error building user dashboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build dashboard: {e}",
        )


############################################################################################################
@app.post(path=analytics_server_config.admin_dashboard_api, response_model=AdminDashboardResponse)
async def handle_admin_dashboard(request_data: AdminDashboardRequest) -> AdminDashboardResponse:
    try:
        zone = request_data.timezone
        now = calculator.resolve_now(request_data.now, zone)
        start, end = calculator.resolve_range(request_data.start, request_data.end, now, zone)
        tasks, skipped_tasks = calculator.parse_records(TaskRecord, request_data.tasks, zone)
        logs, skipped_logs = calculator.parse_records(StressLogEntry, request_data.stress_logs, zone)
        users, _ = calculator.parse_records(UserRecord, request_data.users, zone)
        profiles, _ = calculator.parse_records(StudentProfile, request_data.profiles, zone)

        analytics = calculator.get_admin_dashboard(
            tasks,
            logs,
            start,
            end,
            now,
            period_mode=request_data.period_mode,
            users=users,
            profiles=profiles,
        )
        return AdminDashboardResponse(
            analytics=analytics, skipped_records=skipped_tasks + skipped_logs
        )

    except Exception as e:
        logger.error(f"Error building admin dashboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build admin dashboard: {e}",
        )


############################################################################################################
@app.post(path=analytics_server_config.user_report_api, response_model=UserReportResponse)
async def handle_user_report(request_data: AdminDashboardRequest) -> UserReportResponse:
    try:
        zone = request_data.timezone
        now = calculator.resolve_now(request_data.now, zone)
        start, end = calculator.resolve_range(request_data.start, request_data.end, now, zone)
        tasks, _ = calculator.parse_records(TaskRecord, request_data.tasks, zone)
        logs, _ = calculator.parse_records(StressLogEntry, request_data.stress_logs, zone)
        users, _ = calculator.parse_records(UserRecord, request_data.users, zone)
        profiles, _ = calculator.parse_records(StudentProfile, request_data.profiles, zone)

        rows = calculator.get_user_report(users, tasks, logs, profiles, start, end, now)
        return UserReportResponse(rows=rows, csv=export_report_csv(rows))

    except Exception as e:
        logger.error(f"Error building user report: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build user report: {e}",
        )


############################################################################################################
@app.post(path=analytics_server_config.chat_context_api, response_model=ChatContextResponse)
async def handle_chat_context(request_data: ChatContextRequest) -> ChatContextResponse:
    try:
        now = calculator.resolve_now(request_data.now, request_data.timezone)
        tasks, _ = calculator.parse_records(TaskRecord, request_data.tasks, request_data.timezone)
        return ChatContextResponse(context=calculator.get_chat_context(tasks, now))

    except Exception as e:
        logger.error(f"Error building chat context: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build chat context: {e}",
        )
