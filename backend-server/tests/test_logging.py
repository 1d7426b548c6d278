"""
Tests for the structlog-backed log rendering.
"""

import io
import json
import logging

import pytest

from streams_api.core.logging import configure_logging


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    root = logging.getLogger()
    level = root.level
    yield stream
    for h in list(root.handlers):
        if h.get_name() == "streams-api":
            root.removeHandler(h)
    root.setLevel(level)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_json_lines_carry_extra_fields(self, log_stream):
        configure_logging("INFO", "json", stream=log_stream)
        logging.getLogger("streams_api.test").info("Message produced", extra={"topic": "orders", "offset": 3})

        record = json.loads(log_stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Message produced"
        assert record["level"] == "info"
        assert record["logger"] == "streams_api.test"
        assert record["app"] == "streams-api"
        assert record["topic"] == "orders"
        assert record["offset"] == 3
        assert "timestamp" in record

    def test_level_filters(self, log_stream):
        configure_logging("WARNING", "json", stream=log_stream)
        logging.getLogger("streams_api.test").info("hidden")
        logging.getLogger("streams_api.test").warning("shown")
        lines = log_stream.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["shown"]

    def test_reconfigure_replaces_handler(self, log_stream):
        configure_logging("INFO", "json", stream=log_stream)
        configure_logging("INFO", "json", stream=log_stream)
        logging.getLogger("streams_api.test").info("once")
        assert len(log_stream.getvalue().strip().splitlines()) == 1

    def test_console_format(self, log_stream):
        configure_logging("INFO", "console", stream=log_stream)
        logging.getLogger("streams_api.test").error("Failed to list messages", extra={"topic": "orders"})
        out = log_stream.getvalue()
        assert "Failed to list messages" in out
        assert "topic=orders" in out
