"""OpenWeatherMap current-weather provider implementation."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from ..config import MAX_WEATHER_TIMEOUT_SECONDS, Settings
from ..exceptions import WeatherProviderError
from ..redaction import sanitize_text
from .base import WeatherProvider
from .models import Coordinates, MainReadings, WeatherSnapshot

REQUIRED_MAIN_FIELDS = ("temp", "feels_like", "temp_min", "temp_max")


class OpenWeatherMapProvider(WeatherProvider):
    """Fetches the current conditions from the OpenWeatherMap weather endpoint.

    Exactly one GET is issued per call. There are no retries: the next
    scheduled refresh check is the retry boundary.

    httpx applies its timeout to each phase (connect, each read) separately,
    so the body is streamed and checked against one overall deadline as well.
    """

    name = "openweathermap"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.base_url = str(settings.openweathermap_base_url)
        self.timeout_seconds = min(
            float(settings.weather_timeout_seconds), MAX_WEATHER_TIMEOUT_SECONDS
        )
        self._clock = clock
        self._client = httpx.Client(
            timeout=self.timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.weather_user_agent,
            },
            transport=transport,
        )

    def __enter__(self) -> OpenWeatherMapProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch_current(
        self,
        *,
        api_key: str,
        lat: float,
        lon: float,
        units: str,
        now: datetime,
    ) -> WeatherSnapshot:
        params = {
            "lat": lat,
            "lon": lon,
            "exclude": "",
            "appid": api_key,
            "units": units,
        }
        payload = self._request_json(params)
        return self._normalize_snapshot(payload, lat=lat, lon=lon, now=now)

    def _request_json(self, params: dict[str, Any]) -> dict[str, Any]:
        self.logger.info(
            "OpenWeatherMap request lat=%s lon=%s units=%s",
            params["lat"], params["lon"], params["units"],
        )
        deadline = self._clock() + self.timeout_seconds
        try:
            with self._client.stream("GET", self.base_url, params=params) as response:
                self._check_deadline(deadline)
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    self._check_deadline(deadline)
                status_code = response.status_code
        except httpx.HTTPError as exc:
            raise WeatherProviderError(
                f"OpenWeatherMap request failed ({type(exc).__name__}): "
                f"{sanitize_text(str(exc))}",
                kind="transport",
            ) from exc
        body = b"".join(chunks)

        if status_code != 200:
            text = body[:300].decode("utf-8", errors="replace")
            raise WeatherProviderError(
                f"OpenWeatherMap returned status {status_code}: {sanitize_text(text)}",
                kind="upstream_status",
                status_code=status_code,
            )

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise WeatherProviderError(
                "OpenWeatherMap returned a non-JSON response.",
                kind="malformed_payload",
            ) from exc

        if not isinstance(payload, dict):
            raise WeatherProviderError(
                f"OpenWeatherMap returned unexpected payload type {type(payload).__name__}.",
                kind="malformed_payload",
            )
        return payload

    def _check_deadline(self, deadline: float) -> None:
        if self._clock() > deadline:
            raise WeatherProviderError(
                f"OpenWeatherMap request exceeded {self.timeout_seconds:g}s overall deadline.",
                kind="transport",
            )

    def _normalize_snapshot(
        self,
        payload: dict[str, Any],
        *,
        lat: float,
        lon: float,
        now: datetime,
    ) -> WeatherSnapshot:
        name = payload.get("name")
        if not isinstance(name, str):
            raise WeatherProviderError(
                "OpenWeatherMap payload missing 'name'.",
                kind="malformed_payload",
            )

        main = payload.get("main")
        if not isinstance(main, dict):
            raise WeatherProviderError(
                "OpenWeatherMap payload missing 'main' object.",
                kind="malformed_payload",
            )

        readings: dict[str, float] = {}
        for key in REQUIRED_MAIN_FIELDS:
            value = self._as_float(main.get(key))
            if value is None:
                raise WeatherProviderError(
                    f"OpenWeatherMap payload missing numeric 'main.{key}'.",
                    kind="malformed_payload",
                )
            readings[key] = value

        # Record the configured coordinates rather than the upstream 'coord',
        # which is rounded and would never match the configuration again.
        return WeatherSnapshot(
            location_name=name,
            main=MainReadings(**readings),
            coordinates=Coordinates(lat=lat, lon=lon),
            fetched_at=now,
        )

    @staticmethod
    def _as_float(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return float(value)
        return None
