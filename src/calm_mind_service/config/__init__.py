"""
Configuration management for the calm_mind_service application.

This module provides:
- Service configuration models
- Engine defaults
"""

from typing import List

from .configuration import *

__all__: List[str] = [
    # Configuration components will be exported via star imports
]
