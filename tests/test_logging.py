"""Tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from contentscale.app.core.config import Settings
from contentscale.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
    setup_logging,
)


def _record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_context_fields_promoted(self):
        record = _record(
            "Agent request",
            request_id="req-1",
            path="/api/agent/status",
            method="GET",
            is_agent_request=True,
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["request_id"] == "req-1"
        assert data["path"] == "/api/agent/status"
        assert data["method"] == "GET"
        assert data["is_agent_request"] is True
        assert "extra" not in data

    def test_unknown_fields_grouped_under_extra(self):
        data = json.loads(JSONFormatter().format(_record(category="seo")))

        assert data["extra"] == {"category": "seo"}

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert any("ValueError: bad" in line for line in data["exception"])

    def test_unicode_preserved(self):
        data = json.loads(JSONFormatter().format(_record("Café ☕")))

        assert data["message"] == "Café ☕"


class TestContextFilter:
    def test_adds_default_fields(self):
        record = _record()

        assert ContextFilter().filter(record) is True
        assert record.request_id is None
        assert record.is_agent_request is None

    def test_preserves_existing_values(self):
        record = _record(request_id="abc")

        ContextFilter().filter(record)

        assert record.request_id == "abc"


class TestLoggingConfig:
    @pytest.mark.parametrize(
        ("log_format", "formatter"),
        [("text", "standard"), ("structured", "structured"), ("json", "json")],
    )
    def test_formatter_selection(self, log_format, formatter):
        config = get_logging_config(Settings(_env_file=None, log_format=log_format))

        assert config["handlers"]["console"]["formatter"] == formatter

    def test_level_from_settings(self):
        config = get_logging_config(Settings(_env_file=None, log_level="debug"))

        assert config["loggers"]["contentscale"]["level"] == "DEBUG"
        assert config["handlers"]["console"]["filters"] == ["context"]

    def test_setup_logging_applies_config(self):
        setup_logging(Settings(_env_file=None, log_format="json", log_level="WARNING"))
        try:
            logger = logging.getLogger("contentscale")
            handler = logger.handlers[0]

            assert logger.level == logging.WARNING
            assert logger.propagate is False
            assert isinstance(handler.formatter, JSONFormatter)
            assert any(isinstance(f, ContextFilter) for f in handler.filters)
        finally:
            setup_logging(Settings(_env_file=None))


class TestGetLogger:
    def test_default_name(self):
        assert get_logger().name == "contentscale"

    def test_custom_name(self):
        assert get_logger("contentscale.api").name == "contentscale.api"


class TestGetLogContext:
    def test_filters_none(self):
        assert get_log_context(request_id="r", path=None) == {"request_id": "r"}

    def test_extra_fields(self):
        context = get_log_context(method="POST", status_code=201, duration_ms=1.5)

        assert context == {"method": "POST", "status_code": 201, "duration_ms": 1.5}
