"""Typed models for validated weather snapshots and fetch outcomes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

FailureKind = Literal[
    "unsupported_provider",
    "invalid_parameters",
    "upstream_status",
    "transport",
    "malformed_payload",
]


class MainReadings(BaseModel):
    """Temperature block; all four readings are required."""

    model_config = ConfigDict(frozen=True)

    temp: float
    feels_like: float
    temp_min: float
    temp_max: float


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class WeatherSnapshot(BaseModel):
    """One fetched-and-validated weather payload.

    ``fetched_at`` and ``coordinates`` double as cache metadata: they record
    when and for which configured location the snapshot was retrieved.
    """

    model_config = ConfigDict(frozen=True)

    location_name: str
    main: MainReadings
    coordinates: Coordinates
    fetched_at: datetime

    def to_cache_payload(self) -> dict[str, Any]:
        """Serialize to the on-disk cache shape (upstream field names, unix ``dt``)."""
        return {
            "name": self.location_name,
            "main": self.main.model_dump(),
            "coord": self.coordinates.model_dump(),
            "dt": int(self.fetched_at.timestamp()),
        }

    @classmethod
    def from_cache_payload(cls, payload: dict[str, Any]) -> WeatherSnapshot:
        """Rebuild a snapshot from the cache shape; raises ValueError if incomplete."""
        if not isinstance(payload, dict):
            raise ValueError("cache payload must be an object")
        dt = payload.get("dt")
        if isinstance(dt, bool) or not isinstance(dt, int | float):
            raise ValueError("cache payload missing numeric 'dt'")
        return cls.model_validate(
            {
                "location_name": payload.get("name"),
                "main": payload.get("main"),
                "coordinates": payload.get("coord"),
                "fetched_at": datetime.fromtimestamp(dt, tz=UTC),
            }
        )


class FetchFailure(BaseModel):
    """Explicit failure outcome of a single upstream fetch."""

    kind: FailureKind
    message: str
    status_code: int | None = None


class WeatherFetchResult(BaseModel):
    """Either a validated snapshot or an explicit failure."""

    snapshot: WeatherSnapshot | None = None
    failure: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None and self.failure is None
