"""
FastAPI host around the stress engine.

This module provides:
- HTTP endpoints computing dashboards from posted snapshots
- A polling refresher for hosts that pull records themselves
"""

from .analytics_refresher import AnalyticsRefresher

__all__ = [
    "AnalyticsRefresher",
]
