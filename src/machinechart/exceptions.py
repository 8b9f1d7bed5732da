"""Exception hierarchy for machinechart.

Only contract violations raise: per-member and per-class problems found during
extraction degrade the document and are reported as advisories instead.
"""

from typing import Any


class MachineChartException(Exception):
    """Base exception for all machinechart errors.

    Attributes:
        message: Human-readable error message
        error_code: Optional error code for programmatic handling
        context: Additional context information
    """

    def __init__(
        self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            error_code: Optional error code
            context: Optional context dictionary
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ChartConfigurationError(MachineChartException):
    """Raised when a chart configuration is missing required fields."""

    def __init__(self, reason: str, **kwargs) -> None:
        super().__init__(
            f"Invalid chart configuration: {reason}",
            error_code="INVALID_CHART_CONFIG",
            context={"reason": reason, **kwargs},
        )


class MixedExtractionModeError(MachineChartException):
    """Raised when live instances and declarations are assembled into one chart."""

    def __init__(self, state_name: str, expected_mode: str, **kwargs) -> None:
        super().__init__(
            f"State '{state_name}' does not match extraction mode '{expected_mode}'; "
            "mixing dynamic and static sources in one chart is unsupported",
            error_code="MIXED_EXTRACTION_MODE",
            context={"state_name": state_name, "expected_mode": expected_mode, **kwargs},
        )


class SourceNotFoundError(MachineChartException):
    """Raised when a source file to analyze does not exist."""

    def __init__(self, path: str, **kwargs) -> None:
        super().__init__(
            f"Source file not found at '{path}'",
            error_code="SOURCE_NOT_FOUND",
            context={"path": path, **kwargs},
        )


class SourceParseError(MachineChartException):
    """Raised when a source file cannot be parsed."""

    def __init__(self, filename: str, reason: str, **kwargs) -> None:
        super().__init__(
            f"Failed to parse '{filename}': {reason}",
            error_code="SOURCE_PARSE_FAILED",
            context={"filename": filename, "reason": reason, **kwargs},
        )
