"""Selects passing content blocks and fills in weather placeholders."""

from __future__ import annotations

import html
import logging
import re

from .rules import evaluate_rules
from .weather.models import WeatherSnapshot
from .widget_config import WidgetConfig

WRAPPER_TEMPLATE = (
    '<div class="prettyWeatherWrapper">'
    '<div class="prettyWeather mod-{instance_id}">{body}</div>'
    "</div>"
)

_PLACEHOLDER_RE = re.compile(r"\{(?:temp|feels_like|temp_min|temp_max|name)\}")


def format_number(value: float) -> str:
    """Render a reading as a plain number (``18`` rather than ``18.0``)."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def placeholder_map(snapshot: WeatherSnapshot) -> dict[str, str]:
    return {
        "{temp}": format_number(snapshot.main.temp),
        "{feels_like}": format_number(snapshot.main.feels_like),
        "{temp_min}": format_number(snapshot.main.temp_min),
        "{temp_max}": format_number(snapshot.main.temp_max),
        "{name}": html.escape(snapshot.location_name),
    }


def substitute_placeholders(content: str, snapshot: WeatherSnapshot) -> str:
    """Replace ``{temp}``, ``{feels_like}``, ``{temp_min}``, ``{temp_max}`` and ``{name}``.

    When both ``{temp}`` and ``{name}`` would come out empty the content is
    returned untouched. Replacement is single-pass, so substituted values are
    never themselves re-scanned for tokens.
    """
    values = placeholder_map(snapshot)
    if values["{temp}"] == "" and values["{name}"] == "":
        return content

    return _PLACEHOLDER_RE.sub(lambda match: values[match.group(0)], content)


def render_content(
    config: WidgetConfig,
    snapshot: WeatherSnapshot | None,
    logger: logging.Logger | None = None,
) -> str | None:
    """Return the newline-joined HTML for this widget, or None when nothing renders.

    Default content is an unconditional prelude emitted before any
    conditional block.
    """
    if snapshot is None:
        return None

    parts: list[str] = []
    if config.default_content:
        parts.append(substitute_placeholders(config.default_content, snapshot))

    for block in config.conditional_blocks:
        if not block.content:
            continue
        if not evaluate_rules(block.rules, snapshot, logger):
            continue
        parts.append(substitute_placeholders(block.content, snapshot))

    if not parts:
        return None
    return "\n".join(parts)


def wrap_html(instance_id: str, body: str) -> str:
    """Embed rendered content in the host wrapper element for the instance."""
    return WRAPPER_TEMPLATE.format(instance_id=html.escape(instance_id, quote=True), body=body)
