"""
Unit tests for logging setup.
"""

import io
import json
import logging
import sys

from src.utils.correlation import CorrelationContext
from src.utils.logging_config import configure_logging, StructuredJSONFormatter


class TestConfigureLogging:
    """Test handler installation and formatting."""

    def test_json_output_includes_correlation_and_extras(self):
        stream = io.StringIO()
        configure_logging(level="DEBUG", json_output=True, handler=logging.StreamHandler(stream))

        with CorrelationContext("run-42"):
            logging.getLogger("src.sql.builder").info(
                "Built insert",
                extra={"operation": "insert", "table": "users"}
            )

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        # DEBUG also lets the correlation context's own records through
        assert len(entries) > 1
        entry = next(e for e in entries if e["message"] == "Built insert")
        assert entry["message"] == "Built insert"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "src.sql.builder"
        assert entry["correlation_id"] == "run-42"
        assert entry["operation"] == "insert"
        assert entry["table"] == "users"

    def test_plain_output(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_output=False, handler=logging.StreamHandler(stream))

        logging.getLogger("src.arrays.differ").warning("Something odd")

        assert "WARNING - Something odd" in stream.getvalue()

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("BLIB_LOG_LEVEL", "warning")
        monkeypatch.setenv("JSON_LOGGING", "false")

        package_logger = configure_logging(handler=logging.StreamHandler(io.StringIO()))

        assert package_logger.level == logging.WARNING

    def test_json_from_environment(self, monkeypatch):
        monkeypatch.setenv("JSON_LOGGING", "true")
        handler = logging.StreamHandler(io.StringIO())

        configure_logging(level="INFO", handler=handler)

        assert isinstance(handler.formatter, StructuredJSONFormatter)

    def test_reconfiguring_replaces_handler(self):
        first = logging.StreamHandler(io.StringIO())
        second = logging.StreamHandler(io.StringIO())

        configure_logging(level="INFO", json_output=False, handler=first)
        package_logger = configure_logging(level="INFO", json_output=False, handler=second)

        assert package_logger.handlers == [second]

    def test_extra_loggers_share_handler(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)

        configure_logging(
            level="INFO", json_output=False, handler=handler, loggers=("blib_cli_app",)
        )
        app_logger = logging.getLogger("blib_cli_app")
        try:
            app_logger.info("Loaded document")

            assert app_logger.handlers == [handler]
            assert app_logger.propagate is False
            assert "INFO - Loaded document" in stream.getvalue()
        finally:
            app_logger.removeHandler(handler)
            app_logger.propagate = True


class TestStructuredJSONFormatter:
    """Test JSON rendering of records."""

    def test_exception_included(self):
        formatter = StructuredJSONFormatter()
        try:
            raise ValueError("bad input")
        except ValueError:
            record = logging.getLogger("src").makeRecord(
                "src", logging.ERROR, "x.py", 1, "failed", (), exc_info=sys.exc_info()
            )

        entry = json.loads(formatter.format(record))

        assert entry["correlation_id"] == "N/A"
        assert "ValueError: bad input" in entry["exception"]
