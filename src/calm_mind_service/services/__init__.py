"""
Business services for the calm_mind_service application.

This module contains:
- Stress scoring and derived status
- Period building and temporal aggregation
- Trend estimation and cross-user rollups
- Chat context and dashboard assembly
- App services (FastAPI host)
"""

# Import service modules
from . import (
    app_services,
    chat_context,
    cross_user_aggregator,
    dashboard_service,
    period_builder,
    stress_scorer,
    temporal_aggregator,
    trend_estimator,
)

__all__ = [
    "app_services",
    "chat_context",
    "cross_user_aggregator",
    "dashboard_service",
    "period_builder",
    "stress_scorer",
    "temporal_aggregator",
    "trend_estimator",
]
