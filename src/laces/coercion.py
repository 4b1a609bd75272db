"""Typed writes — coercers applied by `set(key, value, type=...)`.

Coercion never raises. Numeric types parse the leading numeric prefix of
the value's string form and fall back to NaN, so a bad value from an input
field ends up as NaN in the model instead of an exception in the view.

Extra types are registered once at start-up:

    laces.register_type("upper", lambda v: str(v).upper())
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable

logger = logging.getLogger(__name__)

Coercer = Callable[[Any], Any]

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _to_boolean(value: Any) -> bool:
    return bool(value)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else math.nan


def _to_integer(value: Any) -> int | float:
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else math.nan
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else math.nan


def _to_string(value: Any) -> str:
    return str(value)


_coercers: dict[str, Coercer] = {
    "boolean": _to_boolean,
    "float": _to_float,
    "number": _to_float,
    "integer": _to_integer,
    "string": _to_string,
}


def register_type(name: str, coercer: Coercer) -> None:
    """Make `type=name` available to every container."""
    _coercers[name] = coercer


def unregister_type(name: str) -> bool:
    return _coercers.pop(name, None) is not None


def get_coercer(name: str | None) -> Coercer | None:
    """Coercer for name, or None for untyped storage (including unknown names)."""
    if name is None:
        return None
    coercer = _coercers.get(name)
    if coercer is None:
        logger.debug("Unknown type %r, storing untyped", name)
    return coercer
