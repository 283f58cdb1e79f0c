"""Tests for secret redaction in log output."""

from __future__ import annotations

import io
import json
import logging

from pretty_weather.log_setup import JsonConsoleFormatter, setup_logger
from pretty_weather.redaction import REDACTED, sanitize_for_logging, sanitize_text


def test_query_string_api_key_is_redacted() -> None:
    url = "https://api.openweathermap.org/data/2.5/weather?lat=1&appid=abc123&units=metric"
    sanitized = sanitize_text(url)
    assert "abc123" not in sanitized
    assert f"appid={REDACTED}&units=metric" in sanitized


def test_nested_secret_keys_are_redacted() -> None:
    payload = {"params": {"apikey": "abc", "latitude": 1.0}, "notes": ["api_key=xyz"]}
    sanitized = sanitize_for_logging(payload)
    assert sanitized["params"]["apikey"] == REDACTED
    assert sanitized["params"]["latitude"] == 1.0
    assert sanitized["notes"] == [f"api_key={REDACTED}"]


def test_json_formatter_redacts_message() -> None:
    record = logging.LogRecord(
        name="pretty_weather",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="request failed for %s",
        args=("?appid=topsecret",),
        exc_info=None,
    )
    event = json.loads(JsonConsoleFormatter().format(record))
    assert event["level"] == "WARNING"
    assert event["logger"] == "pretty_weather"
    assert "topsecret" not in event["message"]


def test_json_formatter_includes_widget_context() -> None:
    record = logging.LogRecord(
        name="pretty_weather",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Refresh decision",
        args=(),
        exc_info=None,
    )
    record.instance_id = "93"
    record.refresh_reason = "stale"
    event = json.loads(JsonConsoleFormatter().format(record))
    assert event["instance_id"] == "93"
    assert event["refresh_reason"] == "stale"
    assert "failure_kind" not in event
    assert "status_code" not in event


def test_setup_logger_writes_json_lines_to_stream() -> None:
    stream = io.StringIO()
    logger = setup_logger("pretty_weather.test_stream", level="DEBUG", stream=stream)
    logger.warning(
        "fetch failed for ?appid=abc",
        extra={"failure_kind": "upstream_status", "status_code": 401},
    )
    event = json.loads(stream.getvalue().splitlines()[-1])
    assert event["failure_kind"] == "upstream_status"
    assert event["status_code"] == 401
    assert "abc" not in event["message"]
    assert logger.propagate is False
