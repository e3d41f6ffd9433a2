"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Log lines go to stderr so command output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(level_name: str = "INFO") -> None:
    """Configure structlog processors and level filtering.

    Args:
        level_name: Minimum level name, e.g. ``INFO`` or ``DEBUG``.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so a redirected sys.stderr is honored.
    _ = args
    return structlog.PrintLogger(sys.stderr)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)
