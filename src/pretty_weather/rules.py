"""AND-chained numeric threshold rules evaluated against a weather snapshot."""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Sequence

from .weather.models import WeatherSnapshot
from .widget_config import Rule

_default_logger = logging.getLogger("pretty_weather.rules")

# Values compare as floats; neither side is truncated to an integer.
OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
    "eq": operator.eq,
    "neq": operator.ne,
}

FIELD_ALIASES: dict[str, str] = {
    "temp": "temp",
    "feels_like": "feels_like",
    "feelsLike": "feels_like",
    "temp_min": "temp_min",
    "tempMin": "temp_min",
    "temp_max": "temp_max",
    "tempMax": "temp_max",
}


def resolve_field(field: str | None, snapshot: WeatherSnapshot) -> float | None:
    """Return the snapshot reading a rule refers to, or None if unsupported."""
    if field is None:
        return None
    name = FIELD_ALIASES.get(field)
    if name is None:
        return None
    return getattr(snapshot.main, name)


def evaluate_rule(
    rule: Rule,
    snapshot: WeatherSnapshot,
    logger: logging.Logger | None = None,
) -> bool:
    log = logger or _default_logger
    compare = OPERATORS.get(rule.operator or "")
    if compare is None or rule.threshold is None:
        log.debug("Rule %r is incomplete or uses an unknown operator", rule)
        return False
    left = resolve_field(rule.field, snapshot)
    if left is None:
        log.debug("Rule %r references an unsupported field", rule)
        return False
    return compare(left, rule.threshold)


def evaluate_rules(
    rules: Sequence[Rule],
    snapshot: WeatherSnapshot,
    logger: logging.Logger | None = None,
) -> bool:
    """True when every rule passes; an empty sequence always passes.

    Stops at the first failing rule. Skipped rules are logged at debug level
    on ``logger``, or on the module logger when none is given.
    """
    return all(evaluate_rule(rule, snapshot, logger) for rule in rules)
