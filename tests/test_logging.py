import json
import logging
import sys

import pytest

from phonedeals.utils.logging import JsonFormatter

pytestmark = pytest.mark.unit


def make_record(msg, *args, exc_info=None):
    return logging.LogRecord("phonedeals.test", logging.WARNING, __file__, 1, msg, args, exc_info)


def test_json_formatter_emits_parseable_json():
    line = JsonFormatter().format(make_record("Order %s for %s", 7, "bea@example.com"))

    payload = json.loads(line)
    assert payload["level"] == "WARNING"
    assert payload["name"] == "phonedeals.test"
    assert payload["message"] == "Order 7 for bea@example.com"
    assert "timestamp" in payload


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = make_record("failed", exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]
