"""Tests for the time and coordinate refresh triggers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pretty_weather.refresh import evaluate_refresh, should_refresh
from pretty_weather.weather.models import Coordinates, MainReadings, WeatherSnapshot
from pretty_weather.widget_config import WidgetConfig

NOW = datetime(2026, 2, 24, 12, 0, tzinfo=UTC)


def _config(**overrides: object) -> WidgetConfig:
    payload: dict[str, object] = {
        "instance_id": "93",
        "provider": "openweathermap",
        "api_key": "key",
        "latitude": 10.0,
        "longitude": 20.0,
        "pause_time_minutes": 10,
    }
    payload.update(overrides)
    return WidgetConfig.model_validate(payload)


def _snapshot(
    *, age_seconds: float = 0, lat: float = 10.0, lon: float = 20.0
) -> WeatherSnapshot:
    return WeatherSnapshot(
        location_name="Somewhere",
        main=MainReadings(temp=20.0, feels_like=19.0, temp_min=18.0, temp_max=22.0),
        coordinates=Coordinates(lat=lat, lon=lon),
        fetched_at=NOW - timedelta(seconds=age_seconds),
    )


def test_missing_cache_refreshes() -> None:
    decision = evaluate_refresh(None, _config(), NOW)
    assert decision.refresh is True
    assert decision.reason == "no_cache"


def test_just_past_pause_time_is_stale() -> None:
    decision = evaluate_refresh(_snapshot(age_seconds=10 * 60 + 1), _config(), NOW)
    assert decision.refresh is True
    assert decision.reason == "stale"


def test_exactly_pause_time_is_stale() -> None:
    assert should_refresh(_snapshot(age_seconds=10 * 60), _config(), NOW) is True


def test_just_inside_pause_time_is_fresh() -> None:
    decision = evaluate_refresh(_snapshot(age_seconds=10 * 60 - 1), _config(), NOW)
    assert decision.refresh is False
    assert decision.reason == "fresh"
    assert decision.age_seconds == 599


def test_pause_time_comes_from_config() -> None:
    snapshot = _snapshot(age_seconds=5 * 60)
    assert should_refresh(snapshot, _config(pause_time_minutes=4), NOW) is True
    assert should_refresh(snapshot, _config(pause_time_minutes=6), NOW) is False


@pytest.mark.parametrize(
    ("latitude", "longitude", "expected"),
    [
        (10.0, 20.000001, False),
        (10.0000005, 20.0, False),
        (10.0, 20.01, True),
        (10.01, 20.0, True),
        (-10.0, 20.0, True),
    ],
)
def test_coordinate_change_uses_epsilon(
    latitude: float, longitude: float, expected: bool
) -> None:
    config = _config(latitude=latitude, longitude=longitude)
    decision = evaluate_refresh(_snapshot(age_seconds=60), config, NOW)
    assert decision.refresh is expected
    if expected:
        assert decision.reason == "coordinates_changed"
