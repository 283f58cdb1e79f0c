"""Tests for widget params parsing, settings, and lenient rule parsing."""

from __future__ import annotations

from typing import Any

import pytest

from pretty_weather.config import Settings
from pretty_weather.exceptions import ConfigError
from pretty_weather.widget_config import Rule, parse_widget_config


def _params(**overrides: Any) -> dict[str, Any]:
    params: dict[str, Any] = {
        "provider": "openweathermap",
        "apikey": "abc123",
        "latitude": "52.3676",
        "longitude": "4.9041",
        "units": "metric",
        "pausetime": "15",
        "debug": "0",
        "default_content": "<p>{temp}</p>",
        "conditional_content": {
            "conditional_content0": {
                "content": "<p>Warm</p>",
                "rules": {
                    "rules0": {"type": "temp", "operator": ">", "value": "20"},
                },
            },
        },
    }
    params.update(overrides)
    return params


def test_host_params_blob_parses_into_typed_config() -> None:
    config = parse_widget_config("93", _params())

    assert config.instance_id == "93"
    assert config.latitude == 52.3676
    assert config.longitude == 4.9041
    assert config.pause_time_minutes == 15
    assert config.pause_time_seconds == 900
    assert config.debug is False
    assert len(config.conditional_blocks) == 1
    rule = config.conditional_blocks[0].rules[0]
    assert rule.field == "temp"
    assert rule.operator == "gt"
    assert rule.threshold == 20.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"provider": ""},
        {"provider": None},
        {"apikey": "   "},
        {"apikey": None},
    ],
)
def test_missing_provider_or_key_is_config_error(overrides: dict[str, Any]) -> None:
    with pytest.raises(ConfigError, match="No Provider and/or API Key set"):
        parse_widget_config("1", _params(**overrides))


@pytest.mark.parametrize(
    "overrides",
    [
        {"latitude": None},
        {"longitude": ""},
        {"latitude": "north"},
        {"latitude": "91"},
        {"longitude": "-181"},
        {"units": "kelvin"},
        {"pausetime": "-5"},
    ],
)
def test_invalid_params_raise_config_error(overrides: dict[str, Any]) -> None:
    with pytest.raises(ConfigError):
        parse_widget_config("1", _params(**overrides))


def test_optional_params_fall_back_to_defaults() -> None:
    params = _params(pausetime="", units="", debug="")
    del params["default_content"]
    del params["conditional_content"]

    config = parse_widget_config("1", params)

    assert config.pause_time_minutes == 10
    assert config.units == "metric"
    assert config.debug is False
    assert config.default_content == ""
    assert config.conditional_blocks == []


@pytest.mark.parametrize("pausetime", ["0", 0, None, ""])
def test_zero_or_blank_pause_time_uses_default(pausetime: Any) -> None:
    assert parse_widget_config("1", _params(pausetime=pausetime)).pause_time_minutes == 10


def test_api_key_is_hidden_from_repr_and_summary() -> None:
    config = parse_widget_config("1", _params(apikey="very-secret"))
    assert "very-secret" not in repr(config)
    assert "very-secret" not in str(config.safe_summary())


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (">", "gt"),
        (">=", "gte"),
        ("<", "lt"),
        ("<=", "lte"),
        ("=", "eq"),
        ("==", "eq"),
        ("!=", "neq"),
        ("GTE", "gte"),
        ("between", "between"),
    ],
)
def test_operator_spellings_normalize(token: str, expected: str) -> None:
    assert Rule.model_validate({"field": "temp", "operator": token, "value": 1}).operator == expected


def test_incomplete_rules_parse_without_raising() -> None:
    rule = Rule.model_validate({"type": "", "operator": None, "value": "lots"})
    assert rule.field is None
    assert rule.operator is None
    assert rule.threshold is None

    assert Rule.model_validate({"field": "temp", "operator": "gt", "value": True}).threshold is None


def test_non_mapping_entries_are_dropped_or_emptied() -> None:
    config = parse_widget_config(
        "1",
        _params(conditional_content=["junk", {"content": "x", "rules": ["junk"]}]),
    )
    assert len(config.conditional_blocks) == 1
    assert config.conditional_blocks[0].rules == [Rule()]


def test_settings_reject_timeout_above_cap(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEATHER_TIMEOUT_SECONDS", "30")
    with pytest.raises(ValueError, match="cannot exceed"):
        Settings(_env_file=None)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WEATHER_TIMEOUT_SECONDS", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.weather_timeout_seconds == 5.0
    assert settings.log_level == "DEBUG"
    assert str(settings.openweathermap_base_url).startswith("https://api.openweathermap.org/")
