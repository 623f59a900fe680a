"""
Data models and schemas for the calm_mind_service application.

This module contains:
- Input records (tasks, stress logs, users, profiles)
- Computed analytics shapes
- API request/response models
"""

from .analytics import *
from .api import *
from .registry import *
from .task import *

__all__ = [
    # Models are exported via star imports
]
