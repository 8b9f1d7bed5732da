"""Configuration management for machinechart using pydantic-settings.

Settings are read from environment variables prefixed with ``MACHINECHART_``
and from an optional ``.env`` file.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StatechartSettings(BaseSettings):
    """Main configuration settings for machinechart."""

    # Logging settings
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level when debug mode is off")
    structured_logging: bool = Field(
        False, description="Render log records as JSON instead of console lines"
    )
    log_file: Path | None = Field(None, description="Optional file that receives log records")

    # Output settings
    json_indent: int | None = Field(
        2, ge=0, description="Indentation used when serializing statecharts to JSON"
    )
    validate_output: bool = Field(
        True, description="Run the advisory validation pass after assembling a chart"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MACHINECHART_",
        case_sensitive=False,
        extra="ignore",
    )

    def effective_log_level(self) -> str:
        """Return the log level after applying debug mode."""
        return "DEBUG" if self.debug_mode else self.log_level.upper()


# Singleton instance
_settings: StatechartSettings | None = None


def get_settings() -> StatechartSettings:
    """Get the singleton settings instance.

    Returns:
        StatechartSettings instance
    """
    global _settings

    if _settings is None:
        _settings = StatechartSettings()

    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
