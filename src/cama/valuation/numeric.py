"""Numeric parsing and rounding helpers for assessment arithmetic."""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)

# Leading decimal number, optionally signed, with optional exponent.
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def to_number(
    value: Any,
    default: float | None = 0.0,
    *,
    strict: bool = False,
    field: str | None = None,
) -> float | None:
    """Parse a loosely typed numeric field.

    ``None`` and blank strings are treated as absent and yield ``default``.
    Strings are parsed by their leading number (``"12.5 AC"`` -> 12.5) unless
    ``strict`` is set, in which case the whole string must be numeric.

    Malformed input (booleans, non-finite numbers, unparseable strings) is
    coerced to ``default`` with a warning, or raises ``ValueError`` in strict
    mode.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return _malformed(value, default, strict, field)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        if not math.isfinite(number):
            return _malformed(value, default, strict, field)
        return number
    if isinstance(value, str):
        if not value.strip():
            return default
        match = _NUMBER_PREFIX.match(value)
        if match is None or (strict and match.end() != len(value.rstrip())):
            return _malformed(value, default, strict, field)
        return float(match.group(1))
    return _malformed(value, default, strict, field)


def _malformed(value: Any, default: float | None, strict: bool, field: str | None) -> float | None:
    label = field or "value"
    if strict:
        raise ValueError(f"{label} is not numeric: {value!r}")
    logger.warning("Non-numeric %s %r coerced to %r", label, value, default)
    return default


def round_dollars(value: float) -> int:
    """Round half up to a whole dollar."""
    return math.floor(value + 0.5)


def round_to_nearest(value: float, increment: int) -> int:
    """Round half up to the nearest multiple of ``increment``."""
    return math.floor(value / increment + 0.5) * increment


def round_half_up(value: float, ndigits: int) -> float:
    scale = 10**ndigits
    return math.floor(value * scale + 0.5) / scale
