"""Current-weather provider integrations."""

from .base import WeatherProvider
from .client import WeatherClient
from .models import (
    Coordinates,
    FetchFailure,
    MainReadings,
    WeatherFetchResult,
    WeatherSnapshot,
)
from .openweathermap import OpenWeatherMapProvider

__all__ = [
    "Coordinates",
    "FetchFailure",
    "MainReadings",
    "OpenWeatherMapProvider",
    "WeatherClient",
    "WeatherFetchResult",
    "WeatherProvider",
    "WeatherSnapshot",
]
