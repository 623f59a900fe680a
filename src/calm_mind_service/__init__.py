"""
calm_mind_service - stress scoring and temporal analytics for the calm_mind student task app.

This package provides:
- Models: Task, stress-log and analytics schemas
- Services: Stress scoring, period building, aggregation and trend estimation
- Config: Configuration management
- Utils: Numeric and date helpers
"""

__version__ = "0.1.0"

from .config import *

# Import main models for easy access
from .models import *

__all__ = [
    "__version__",
]
