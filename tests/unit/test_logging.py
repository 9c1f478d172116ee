# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging setup."""

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from registrar.utils.logging import (
    QUIET_LOGGERS,
    bind_context,
    build_formatter,
    clear_context,
    drop_empty_context,
    setup_logging,
)


def make_record(message: str, *args: object, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        "registrar.domains.enrollment.service",
        logging.INFO,
        __file__,
        1,
        message,
        args,
        exc_info,
    )


@pytest.fixture(autouse=True)
def clean_context():
    """Isolate bound context and root handlers between tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    clear_context()
    yield
    clear_context()
    root.handlers = handlers
    root.setLevel(level)


class TestJsonFormatter:
    """Tests for the production formatter."""

    def test_renders_stdlib_record(self) -> None:
        """Test %-style arguments are merged into the event."""
        formatter = build_formatter(json_output=True)

        line = json.loads(formatter.format(make_record("Seat taken in section %s", 12)))

        assert line["event"] == "Seat taken in section 12"
        assert line["level"] == "info"
        assert line["logger"] == "registrar.domains.enrollment.service"
        assert "timestamp" in line
        assert "_record" not in line

    def test_includes_request_context(self) -> None:
        """Test identity bound for the request appears on the line."""
        formatter = build_formatter(json_output=True)
        bind_context(method="POST", path="/api/v1/enroll", user_id="42", role="student")

        line = json.loads(formatter.format(make_record("Enroll request")))

        assert line["method"] == "POST"
        assert line["path"] == "/api/v1/enroll"
        assert line["user_id"] == "42"
        assert line["role"] == "student"

    def test_cleared_context_is_gone(self) -> None:
        """Test nothing from a previous request survives clear_context."""
        formatter = build_formatter(json_output=True)
        bind_context(user_id="42")
        clear_context()

        line = json.loads(formatter.format(make_record("Health check")))

        assert "user_id" not in line

    def test_renders_exception(self) -> None:
        """Test exc_info is rendered as text."""
        formatter = build_formatter(json_output=True)
        try:
            raise ValueError("broken")
        except ValueError:
            record = make_record("Failed to enroll", exc_info=sys.exc_info())

        line = json.loads(formatter.format(record))

        assert "ValueError: broken" in line["exception"]


class TestDropEmptyContext:
    """Tests for the drop_empty_context processor."""

    def test_drops_unset_request_keys(self) -> None:
        """Test None and empty request keys are removed, others kept."""
        event = {"event": "x", "user_id": None, "role": "", "path": "/health", "section": None}

        result = drop_empty_context(None, "info", event)

        assert result == {"event": "x", "path": "/health", "section": None}


class TestSetupLogging:
    """Tests for setup_logging."""

    def _settings(self, development: bool, level: str = "INFO") -> MagicMock:
        settings = MagicMock()
        settings.log_level = level
        settings.is_development = development
        settings.debug = development
        return settings

    def test_installs_single_handler(self) -> None:
        """Test repeated setup keeps exactly one root handler."""
        setup_logging(self._settings(development=False))
        setup_logging(self._settings(development=False))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_log_level_from_settings(self) -> None:
        """Test the configured level is applied to the root logger."""
        setup_logging(self._settings(development=True, level="warning"))

        assert logging.getLogger().level == logging.WARNING

    def test_quiets_noisy_loggers(self) -> None:
        """Test library loggers are raised to WARNING."""
        setup_logging(self._settings(development=True, level="DEBUG"))

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
