"""Configuration package.

Provides environment-driven settings (pydantic-settings) and the pydantic
models describing charts and batch extraction runs.

Usage:
    from machinechart.config import get_settings

    settings = get_settings()
    if settings.validate_output:
        ...
"""

from .models import ChartConfig, ExtractionConfig, MachineConfig, SingleStateConfig
from .settings import StatechartSettings, get_settings, reset_settings

__all__ = [
    "StatechartSettings",
    "get_settings",
    "reset_settings",
    "ChartConfig",
    "SingleStateConfig",
    "MachineConfig",
    "ExtractionConfig",
]
