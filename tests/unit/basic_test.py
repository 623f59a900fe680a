"""Basic tests for the calm_mind_service package."""

import sys
from pathlib import Path

# Add src directory to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from calm_mind_service import __version__


def test_version():
    """Test that version is defined."""
    assert __version__ is not None
    assert isinstance(__version__, str)
    assert __version__ == "0.1.0"


def test_package_import():
    """Test that package imports correctly."""
    import calm_mind_service

    assert calm_mind_service is not None


def test_config_import():
    """Test that config modules import correctly."""
    from calm_mind_service.config import AnalyticsServerConfig, EngineConfig

    server_config = AnalyticsServerConfig()
    engine_config = EngineConfig()

    assert server_config.port == 8700
    assert engine_config.timezone == "UTC"
    assert engine_config.stress_over_time_days == 7


def test_models_import():
    """Test that model modules import correctly."""
    from calm_mind_service.models import Period, TaskRecord, get_registered_model

    assert get_registered_model("TaskRecord") is TaskRecord
    assert get_registered_model("Period") is Period
