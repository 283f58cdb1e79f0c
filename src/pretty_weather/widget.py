"""Per-request orchestration: cache lookup, refresh, fetch, save, render."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .cache import WeatherCache
from .exceptions import CacheError, ConfigError
from .refresh import RefreshReason, evaluate_refresh
from .render import render_content
from .weather.client import WeatherClient
from .weather.models import FetchFailure, WeatherSnapshot
from .widget_config import WidgetConfig


class DebugInfo(BaseModel):
    """Diagnostics surfaced alongside the render when debug mode is on."""

    location_name: str | None = None
    temp: float | None = None
    feels_like: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    fetched_at: datetime | None = None
    refresh_reason: RefreshReason
    failure: FetchFailure | None = None
    notices: list[str] = Field(default_factory=list)


class RenderResult(BaseModel):
    """Rendered HTML (``None`` means render nothing) plus run metadata."""

    html: str | None = None
    refreshed: bool = False
    degraded: bool = False
    debug: DebugInfo | None = None


class WeatherWidget:
    """Runs one widget instance to completion for a single request.

    Only ``ConfigError`` escapes ``run``; upstream and cache failures fall back
    to the last cached snapshot, or to rendering nothing.
    """

    def __init__(
        self,
        client: WeatherClient,
        cache: WeatherCache,
        logger: logging.Logger,
    ) -> None:
        self.client = client
        self.cache = cache
        self.logger = logger

    def run(self, config: WidgetConfig, now: datetime) -> RenderResult:
        if not config.provider or not config.api_key:
            raise ConfigError(f"No Provider and/or API Key set for widget {config.instance_id!r}.")
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)

        notices: list[str] = []
        cached = self.cache.load(config.instance_id)
        decision = evaluate_refresh(cached, config, now)
        self.logger.info(
            "Refresh decision for widget %s: refresh=%s reason=%s",
            config.instance_id, decision.refresh, decision.reason,
            extra={"instance_id": config.instance_id, "refresh_reason": decision.reason},
        )

        snapshot: WeatherSnapshot | None = cached
        failure: FetchFailure | None = None
        refreshed = False
        degraded = False

        if decision.refresh:
            result = self.client.fetch(
                provider=config.provider,
                api_key=config.api_key,
                latitude=config.latitude,
                longitude=config.longitude,
                units=config.units,
                now=now,
            )
            if result.ok and result.snapshot is not None:
                snapshot = result.snapshot
                refreshed = True
                try:
                    self.cache.save(config.instance_id, snapshot)
                except CacheError as exc:
                    self.logger.warning("%s", exc, extra={"instance_id": config.instance_id})
                    notices.append(str(exc))
            else:
                failure = result.failure
                degraded = cached is not None
                if failure is not None:
                    notices.append(self._describe_failure(failure))
                self.logger.warning(
                    "Widget %s keeps %s after failed refresh",
                    config.instance_id,
                    "cached snapshot" if cached is not None else "no data",
                    extra={"instance_id": config.instance_id},
                )

        html = render_content(config, snapshot, self.logger)
        debug = None
        if config.debug:
            debug = self._debug_info(snapshot, decision.reason, failure, notices)
        return RenderResult(html=html, refreshed=refreshed, degraded=degraded, debug=debug)

    @staticmethod
    def _describe_failure(failure: FetchFailure) -> str:
        if failure.status_code is not None:
            return f"Weather fetch failed with status {failure.status_code}: {failure.message}"
        return f"Weather fetch failed ({failure.kind}): {failure.message}"

    @staticmethod
    def _debug_info(
        snapshot: WeatherSnapshot | None,
        reason: RefreshReason,
        failure: FetchFailure | None,
        notices: list[str],
    ) -> DebugInfo:
        if snapshot is None:
            return DebugInfo(refresh_reason=reason, failure=failure, notices=notices)
        return DebugInfo(
            location_name=snapshot.location_name,
            temp=snapshot.main.temp,
            feels_like=snapshot.main.feels_like,
            temp_min=snapshot.main.temp_min,
            temp_max=snapshot.main.temp_max,
            fetched_at=snapshot.fetched_at,
            refresh_reason=reason,
            failure=failure,
            notices=notices,
        )
