"""File-backed lookup of widget instances by identifier."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .widget_config import WidgetConfig, parse_widget_config

MODULE_NAME = "mod_prettyweather"


class WidgetRegistry:
    """Holds raw widget entries and parses one into a ``WidgetConfig`` on lookup.

    Expected file shape::

        {"widgets": [{"id": "12", "module": "mod_prettyweather", "params": {...}}]}
    """

    def __init__(self, entries: Mapping[str, Mapping[str, Any]]) -> None:
        self._entries = dict(entries)

    @classmethod
    def from_file(cls, path: Path) -> WidgetRegistry:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Failed reading widgets file {path}: {exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"Widgets file {path} is not valid JSON: {exc}") from exc
        return cls.from_payload(payload)

    @classmethod
    def from_payload(cls, payload: Any) -> WidgetRegistry:
        widgets = payload.get("widgets") if isinstance(payload, dict) else None
        if not isinstance(widgets, list):
            raise ConfigError("Widgets file must contain a 'widgets' list.")

        entries: dict[str, Mapping[str, Any]] = {}
        for item in widgets:
            if not isinstance(item, dict) or item.get("id") in (None, ""):
                raise ConfigError("Every widget entry needs an 'id'.")
            entries[str(item["id"])] = item
        return cls(entries)

    def instance_ids(self) -> list[str]:
        return sorted(self._entries)

    def get(self, instance_id: str) -> WidgetConfig:
        """Return the parsed config for ``instance_id``; raises ConfigError if absent."""
        entry = self._entries.get(instance_id)
        if entry is None or entry.get("module", MODULE_NAME) != MODULE_NAME:
            raise ConfigError(f"Module not found: {instance_id!r}.")

        params = entry.get("params") or {}
        if isinstance(params, str):
            # Hosts commonly store params as an encoded JSON string.
            try:
                params = json.loads(params)
            except ValueError as exc:
                raise ConfigError(
                    f"Params for widget {instance_id!r} are not valid JSON: {exc}"
                ) from exc
        if not isinstance(params, dict):
            raise ConfigError(f"Params for widget {instance_id!r} must be an object.")
        return parse_widget_config(instance_id, params)
