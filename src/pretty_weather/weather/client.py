"""Provider dispatch and failure normalization for upstream weather fetches."""

from __future__ import annotations

import logging
from datetime import datetime

from ..exceptions import WeatherProviderError
from .base import WeatherProvider
from .models import FetchFailure, WeatherFetchResult


class WeatherClient:
    """Validates fetch parameters and turns provider errors into ``FetchFailure`` results.

    Nothing raised by the provider escapes ``fetch``; callers branch on
    ``WeatherFetchResult.ok`` instead.
    """

    def __init__(self, provider: WeatherProvider, logger: logging.Logger) -> None:
        self.provider = provider
        self.logger = logger

    def __enter__(self) -> WeatherClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.provider.close()

    def fetch(
        self,
        *,
        provider: str | None,
        api_key: str | None,
        latitude: float | None,
        longitude: float | None,
        units: str,
        now: datetime,
    ) -> WeatherFetchResult:
        """Fetch one snapshot for the given coordinates or report why it failed."""
        if not provider or provider.strip().lower() != self.provider.name:
            return self._failure(
                "unsupported_provider",
                f"Unsupported weather provider {provider!r}; expected {self.provider.name!r}.",
            )
        if not api_key or latitude is None or longitude is None:
            return self._failure(
                "invalid_parameters",
                "API key, latitude and longitude are required for a weather fetch.",
            )

        try:
            snapshot = self.provider.fetch_current(
                api_key=api_key,
                lat=latitude,
                lon=longitude,
                units=units,
                now=now,
            )
        except WeatherProviderError as exc:
            return self._failure(exc.kind, str(exc), status_code=exc.status_code)

        self.logger.info(
            "Weather fetch succeeded for %s (temp=%g)",
            snapshot.location_name, snapshot.main.temp,
        )
        return WeatherFetchResult(snapshot=snapshot)

    def _failure(
        self,
        kind: str,
        message: str,
        status_code: int | None = None,
    ) -> WeatherFetchResult:
        self.logger.warning(
            "Weather fetch failed (%s): %s",
            kind,
            message,
            extra={"failure_kind": kind, "status_code": status_code},
        )
        return WeatherFetchResult(
            failure=FetchFailure(kind=kind, message=message, status_code=status_code)
        )
