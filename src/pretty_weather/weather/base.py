"""Provider-agnostic current-weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .models import WeatherSnapshot


class WeatherProvider(ABC):
    """Base contract for current-weather providers."""

    name: str

    @abstractmethod
    def fetch_current(
        self,
        *,
        api_key: str,
        lat: float,
        lon: float,
        units: str,
        now: datetime,
    ) -> WeatherSnapshot:
        """Fetch and validate a snapshot, raising WeatherProviderError on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""
