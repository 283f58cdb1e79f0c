"""Typed per-instance widget configuration parsed from host params blobs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigError

SUPPORTED_PROVIDER = "openweathermap"
DEFAULT_PAUSE_TIME_MINUTES = 10

# Host spellings accepted for each canonical operator.
OPERATOR_TOKENS: dict[str, str] = {
    "gt": "gt",
    ">": "gt",
    "gte": "gte",
    ">=": "gte",
    "lt": "lt",
    "<": "lt",
    "lte": "lte",
    "<=": "lte",
    "eq": "eq",
    "=": "eq",
    "==": "eq",
    "neq": "neq",
    "!=": "neq",
    "<>": "neq",
}


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _as_entry_list(value: Any) -> list[Any]:
    """Accept both JSON lists and host subform dicts (``{"rules0": {...}}``)."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, list | tuple):
        return list(value)
    return []


class Rule(BaseModel):
    """One field/operator/threshold comparison.

    Parsing never fails: anything unusable is stored as ``None`` (or the raw
    unknown token) so the rule evaluates as failing instead of raising.
    """

    model_config = ConfigDict(frozen=True)

    field: str | None = Field(default=None, validation_alias=AliasChoices("field", "type"))
    operator: str | None = None
    threshold: float | None = Field(
        default=None,
        validation_alias=AliasChoices("threshold", "value"),
    )

    @field_validator("field", mode="before")
    @classmethod
    def normalize_field(cls, value: Any) -> str | None:
        value = _blank_to_none(value)
        return value if isinstance(value, str) else None

    @field_validator("operator", mode="before")
    @classmethod
    def normalize_operator(cls, value: Any) -> str | None:
        value = _blank_to_none(value)
        if not isinstance(value, str):
            return None
        return OPERATOR_TOKENS.get(value.lower(), value)

    @field_validator("threshold", mode="before")
    @classmethod
    def coerce_threshold(cls, value: Any) -> float | None:
        value = _blank_to_none(value)
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None


class ContentBlock(BaseModel):
    """Templated content gated by AND-combined rules."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    rules: list[Rule] = Field(default_factory=list)

    @field_validator("content", mode="before")
    @classmethod
    def content_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("rules", mode="before")
    @classmethod
    def rules_to_list(cls, value: Any) -> list[Any]:
        return [item if isinstance(item, Mapping) else {} for item in _as_entry_list(value)]


class WidgetConfig(BaseModel):
    """Validated settings for one widget instance."""

    model_config = ConfigDict(frozen=True)

    instance_id: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    units: Literal["metric", "imperial", "standard"] = "metric"
    pause_time_minutes: int = Field(default=DEFAULT_PAUSE_TIME_MINUTES, gt=0)
    debug: bool = False
    default_content: str = ""
    conditional_blocks: list[ContentBlock] = Field(default_factory=list)

    @field_validator("units", mode="before")
    @classmethod
    def default_units(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return "metric" if value is None else str(value).lower()

    @field_validator("pause_time_minutes", mode="before")
    @classmethod
    def default_pause_time(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        # Zero means "not set" in host params, like an empty field.
        if value is None or value == 0 or value == "0":
            return DEFAULT_PAUSE_TIME_MINUTES
        return value

    @field_validator("debug", mode="before")
    @classmethod
    def default_debug(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return False if value is None else value

    @field_validator("default_content", mode="before")
    @classmethod
    def default_content_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("conditional_blocks", mode="before")
    @classmethod
    def blocks_to_list(cls, value: Any) -> list[Any]:
        return [item for item in _as_entry_list(value) if isinstance(item, Mapping)]

    @property
    def pause_time_seconds(self) -> int:
        return self.pause_time_minutes * 60

    def safe_summary(self) -> dict[str, Any]:
        """Return a credential-free summary for logs and debug output."""
        return {
            "instance_id": self.instance_id,
            "provider": self.provider,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "units": self.units,
            "pause_time_minutes": self.pause_time_minutes,
            "debug": self.debug,
            "conditional_block_count": len(self.conditional_blocks),
        }


def parse_widget_config(instance_id: str, params: Mapping[str, Any]) -> WidgetConfig:
    """Build a ``WidgetConfig`` from a host params blob, raising ConfigError on failure."""
    provider = _blank_to_none(params.get("provider"))
    api_key = _blank_to_none(params.get("apikey", params.get("api_key")))
    if provider is None or api_key is None:
        raise ConfigError(f"No Provider and/or API Key set for widget {instance_id!r}.")

    payload = {
        "instance_id": instance_id,
        "provider": provider,
        "api_key": api_key,
        "latitude": _blank_to_none(params.get("latitude")),
        "longitude": _blank_to_none(params.get("longitude")),
        "units": params.get("units"),
        "pause_time_minutes": params.get("pausetime", params.get("pause_time_minutes")),
        "debug": params.get("debug"),
        "default_content": params.get("default_content"),
        "conditional_blocks": params.get(
            "conditional_content", params.get("conditional_blocks")
        ),
    }
    try:
        return WidgetConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration for widget {instance_id!r}: {exc}") from exc
