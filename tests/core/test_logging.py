"""Tests for logging helpers."""

import json
import logging

from mathcheck.core.logging import (
    LoggerAdapter,
    StructuredFormatter,
    TextFormatter,
    get_context_logger,
    get_logger,
    setup_logging,
)


def _record(msg="Checked answer", extra_data=None):
    record = logging.LogRecord("mathcheck.test", logging.INFO, __file__, 10, msg, (), None)
    if extra_data is not None:
        record.extra_data = extra_data
    return record


class TestFormatters:
    def test_structured_formatter_emits_json(self):
        output = StructuredFormatter().format(_record(extra_data={"score": 1.0}))
        data = json.loads(output)
        assert data["message"] == "Checked answer"
        assert data["level"] == "INFO"
        assert data["score"] == 1.0

    def test_text_formatter_appends_extra_data(self):
        output = TextFormatter().format(_record(extra_data={"score": 1}))
        assert "Checked answer" in output
        assert "score=1" in output


class TestLoggers:
    def test_get_logger_returns_named_logger(self):
        assert get_logger("mathcheck.answer").name == "mathcheck.answer"

    def test_context_logger_merges_extra_data(self):
        adapter = get_context_logger("mathcheck.test", checker="interval")
        assert isinstance(adapter, LoggerAdapter)
        _, kwargs = adapter.process("msg", {"extra_data": {"score": 0}})
        assert kwargs["extra"]["extra_data"] == {"checker": "interval", "score": 0}

    def test_setup_logging_configures_package_logger(self):
        setup_logging("DEBUG")
        root = logging.getLogger("mathcheck")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.propagate is False
        setup_logging("WARNING")
        assert logging.getLogger("mathcheck").level == logging.WARNING
