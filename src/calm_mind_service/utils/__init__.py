"""
Utility functions for the calm_mind_service application.

This module provides:
- Numeric guards (safe division, clamping, rounding)
- Date parsing and calendar alignment
"""

# Import utility modules
from . import dates, numeric

__all__ = [
    "dates",
    "numeric",
]
