"""Structured logging configuration.

Logs go to stderr so that tables and JSON summaries written to stdout can be
piped into other tools.
"""

import logging
import os
import sys
from typing import Optional, Tuple

import structlog

LOG_LEVEL_ENV = "SIMULATED_RATINGS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# (level name, json_logs) of the last configure_logging call, if any
_settings: Optional[Tuple[str, bool]] = None


def resolve_log_level(level: Optional[str] = None) -> int:
    """Map a level name (or the environment variable) to a logging level.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return value


def configure_logging(level: Optional[str] = None, json_logs: bool = False) -> None:
    """Configure structlog for command line use.

    Args:
        level: Minimum level name; defaults to $SIMULATED_RATINGS_LOG_LEVEL,
            then WARNING
        json_logs: Render one JSON object per line instead of console output
    """
    global _settings

    min_level = resolve_log_level(level)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _settings = (logging.getLevelName(min_level), json_logs)


def logging_settings() -> Optional[Tuple[str, bool]]:
    """Arguments that reproduce the current configuration in a new process.

    Returns None when :func:`configure_logging` has not been called.
    """
    return _settings


def reset_logging() -> None:
    """Restore structlog's defaults and forget the stored settings."""
    global _settings

    structlog.reset_defaults()
    _settings = None
