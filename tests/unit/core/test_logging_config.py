"""Unit tests for structured logging setup."""

from __future__ import annotations

import structlog
from structlog.testing import capture_logs

from core.logging_config import configure_logging, get_logger


def test_get_logger_emits_event_with_fields() -> None:
    """Module loggers should emit named events with keyword fields."""
    with capture_logs() as logs:
        get_logger("tests").info("conversion_started", rows=3)

    assert logs == [{"event": "conversion_started", "rows": 3, "log_level": "info"}]


def test_configure_logging_marks_structlog_configured() -> None:
    """Configuring should leave structlog in a configured state."""
    configure_logging("DEBUG")

    assert structlog.is_configured()
