"""CLI: render one widget instance, refreshing its weather cache when needed."""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from .cache import WeatherCache
from .config import Settings, load_settings
from .exceptions import ConfigError
from .log_setup import setup_logger
from .redaction import sanitize_for_logging
from .registry import WidgetRegistry
from .render import wrap_html
from .weather.client import WeatherClient
from .weather.openweathermap import OpenWeatherMapProvider
from .widget import DebugInfo, WeatherWidget
from .widget_config import WidgetConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse widget CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Render a weather widget instance from cached or freshly fetched data."
    )
    parser.add_argument("--widget", required=True, help="Widget instance identifier.")
    parser.add_argument(
        "--widgets-file",
        type=Path,
        default=None,
        help="Override PRETTYWEATHER_WIDGETS_FILE.",
    )
    parser.add_argument(
        "--wrap",
        action="store_true",
        help="Embed the output in the instance wrapper element.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Force debug mode and print diagnostics.",
    )
    return parser.parse_args(argv)


def _startup_summary(settings: Settings, config: WidgetConfig) -> dict[str, Any]:
    """Credential-free settings and widget summary logged at startup."""
    return sanitize_for_logging(
        {"settings": settings.safe_summary(), "widget": config.safe_summary()}
    )


def _print_debug(console: Console, debug: DebugInfo) -> None:
    table = Table(title="Weather Widget Debug")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")

    def _fmt(value: float | None) -> str:
        return f"{value:g}" if value is not None else "-"

    table.add_row("refresh_reason", debug.refresh_reason)
    table.add_row("location", debug.location_name or "-")
    table.add_row("temp", _fmt(debug.temp))
    table.add_row("feels_like", _fmt(debug.feels_like))
    table.add_row("temp_min", _fmt(debug.temp_min))
    table.add_row("temp_max", _fmt(debug.temp_max))
    table.add_row(
        "fetched_at",
        debug.fetched_at.astimezone(UTC).isoformat() if debug.fetched_at else "-",
    )
    if debug.failure is not None:
        table.add_row("failure", f"{debug.failure.kind}: {debug.failure.message}")
    for notice in debug.notices:
        table.add_row("notice", notice)
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Run a single widget render."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
        logger.setLevel(settings.log_level)
        registry = WidgetRegistry.from_file(args.widgets_file or settings.widgets_file)
        config = registry.get(args.widget)
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    if args.debug:
        config = config.model_copy(update={"debug": True})
    logger.info(
        "Rendering widget %s: %s", config.instance_id, _startup_summary(settings, config)
    )

    try:
        provider = OpenWeatherMapProvider(settings=settings, logger=logger)
        with WeatherClient(provider=provider, logger=logger) as client:
            widget = WeatherWidget(
                client=client,
                cache=WeatherCache(settings.cache_dir, logger=logger),
                logger=logger,
            )
            result = widget.run(config, now=datetime.now(UTC))
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        logger.exception("Unexpected widget failure: %s", exc)
        return 99

    if result.html is None:
        console.print("No content.")
    else:
        output = wrap_html(config.instance_id, result.html) if args.wrap else result.html
        console.print(output, markup=False, highlight=False, emoji=False, soft_wrap=True)

    if result.debug is not None:
        _print_debug(console, result.debug)
    return 0


if __name__ == "__main__":
    sys.exit(main())
