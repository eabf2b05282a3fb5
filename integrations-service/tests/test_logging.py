"""Tests for log formatting."""

import json
import logging
import sys

import pytest

from integration_hub.utils.logging import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord(
        name="integration_hub.services.ingestion",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Successfully processed webhook from %s",
        args=("slack",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Structured log output."""

    def test_basic_fields(self):
        formatter = JSONFormatter("integration-hub", "test")

        payload = json.loads(formatter.format(_record()))

        assert payload["message"] == "Successfully processed webhook from slack"
        assert payload["level"] == "INFO"
        assert payload["service"] == "integration-hub"
        assert payload["environment"] == "test"

    def test_extra_fields_are_included(self):
        formatter = JSONFormatter("integration-hub", "test")

        payload = json.loads(formatter.format(_record(webhook_event="ping", data_size=16)))

        assert payload["webhook_event"] == "ping"
        assert payload["data_size"] == 16

    def test_credential_fields_are_masked(self):
        formatter = JSONFormatter("integration-hub", "test")

        payload = json.loads(formatter.format(_record(webhookSecret="s3cr3t", access_token="t")))

        assert payload["webhookSecret"] == "********"
        assert payload["access_token"] == "********"
        assert "s3cr3t" not in formatter.format(_record(webhookSecret="s3cr3t"))

    def test_exception_is_rendered(self):
        formatter = JSONFormatter("integration-hub", "test")
        try:
            raise RuntimeError("provider down")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        payload = json.loads(formatter.format(record))

        assert "provider down" in payload["exception"]


@pytest.mark.parametrize("log_format,formatter_type", [
    ("json", JSONFormatter),
    ("text", logging.Formatter),
])
def test_setup_logging_selects_formatter(settings, log_format, formatter_type):
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    settings.log_format = log_format
    try:
        setup_logging(settings)

        handler = logging.root.handlers[-1]
        assert type(handler.formatter) is formatter_type
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        logging.root.handlers = root_handlers
        logging.root.setLevel(root_level)
