"""Decides whether a cached snapshot must be refreshed from upstream."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from .weather.models import WeatherSnapshot
from .widget_config import WidgetConfig

# Absolute per-axis tolerance for serialization round-trip jitter.
COORDINATE_EPSILON = 1e-6

RefreshReason = Literal["no_cache", "stale", "coordinates_changed", "fresh"]


class RefreshDecision(BaseModel):
    """Outcome of a refresh check, with the trigger that fired."""

    refresh: bool
    reason: RefreshReason
    age_seconds: float | None = None


def evaluate_refresh(
    cached: WeatherSnapshot | None,
    config: WidgetConfig,
    now: datetime,
) -> RefreshDecision:
    """Apply the time trigger, then the coordinate trigger; either forces a refresh."""
    if cached is None:
        return RefreshDecision(refresh=True, reason="no_cache")

    age_seconds = (now - cached.fetched_at).total_seconds()
    if age_seconds >= config.pause_time_seconds:
        return RefreshDecision(refresh=True, reason="stale", age_seconds=age_seconds)

    if _axis_changed(cached.coordinates.lat, config.latitude) or _axis_changed(
        cached.coordinates.lon, config.longitude
    ):
        return RefreshDecision(
            refresh=True, reason="coordinates_changed", age_seconds=age_seconds
        )

    return RefreshDecision(refresh=False, reason="fresh", age_seconds=age_seconds)


def should_refresh(cached: WeatherSnapshot | None, config: WidgetConfig, now: datetime) -> bool:
    return evaluate_refresh(cached, config, now).refresh


def _axis_changed(cached: float, configured: float) -> bool:
    # Rounded so float error in the subtraction itself cannot cross the epsilon.
    return round(abs(cached - configured), 9) > COORDINATE_EPSILON
