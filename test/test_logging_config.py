import json
import logging
import sys

from bizdash.logging_config import JsonFormatter


def test_json_formatter_emits_one_object_per_record():
    record = logging.LogRecord("bizdash.api", logging.ERROR, __file__, 1, "api_error status=%s", (500,), None)
    line = JsonFormatter(datefmt="%Y-%m-%d").format(record)

    payload = json.loads(line)
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "bizdash.api"
    assert payload["message"] == "api_error status=500"
    assert payload["thread"] == record.threadName
    assert "exception" not in payload


def test_json_formatter_includes_exception_text():
    try:
        raise ValueError("bad row")
    except ValueError:
        record = logging.LogRecord("bizdash", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert "ValueError: bad row" in payload["exception"]
