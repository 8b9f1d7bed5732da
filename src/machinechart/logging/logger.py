"""Structured logging configuration for machinechart using structlog.

Log records go to stderr so that stdout stays free for generated documents.
"""

import logging
import sys
from pathlib import Path
from typing import Any, cast

import structlog

from ..config import get_settings


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    structured: bool = False,
    add_timestamp: bool = True,
    colorize: bool = False,
    force: bool = True,
) -> None:
    """Configure structured logging for machinechart.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        structured: Use JSON structured output
        add_timestamp: Add timestamps to logs
        colorize: Colorize console output (only for non-structured)
        force: Replace handlers already installed on the root logger. When
            False and the root logger has handlers, they are left in place
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colorize))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if not force and logging.getLogger().handlers:
        return

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=force,
    )


# Global state for lazy initialization
_logging_initialized = False


def _ensure_logging_initialized() -> None:
    """Configure logging on first use unless the host application already did."""
    global _logging_initialized

    if _logging_initialized:
        return

    # Configuration the host application already did is kept
    if structlog.is_configured():
        _logging_initialized = True
        return

    try:
        settings = get_settings()
        setup_logging(
            level=settings.effective_log_level(),
            log_file=settings.log_file,
            structured=settings.structured_logging,
            colorize=settings.debug_mode,
            force=False,
        )
    except (AttributeError, OSError, ValueError):
        # Unusable settings or log path: fall back to plain console logging
        setup_logging(level="INFO", force=False)

    _logging_initialized = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    _ensure_logging_initialized()
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
