"""Exact rate arithmetic.

Rates are fractions.Fraction values in units per second. Everything past the
entry boundary stays exact; to_rate() is the one place a float is
approximated.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from typing import Union

RateLike = Union[Fraction, int, str, float, Decimal]

# Best-approximation bound for float inputs
MAX_DENOMINATOR = 1_000_000

# Seconds per time unit accepted at the CLI/MCP boundary
TIME_UNITS: dict[str, int] = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
}


def to_rate(value: RateLike, max_denominator: int = MAX_DENOMINATOR) -> Fraction:
    """Convert a number or numeric string into an exact Fraction.

    Integers, Fractions, Decimals and strings such as ``"5/60"`` or
    ``"0.25"`` convert exactly. Floats are replaced by the closest fraction
    whose denominator does not exceed ``max_denominator``.

    Raises:
        TypeError: If the value is not a supported numeric type
        ValueError: If the value is not finite or the string does not parse
    """
    if isinstance(value, bool):
        raise TypeError("Rate must be a number, got: bool")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Rate must be finite, got: {value}")
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Rate must be finite, got: {value}")
        return Fraction(value).limit_denominator(max_denominator)
    if isinstance(value, str):
        try:
            return Fraction(value.strip())
        except (ValueError, ZeroDivisionError):
            raise ValueError(f"Invalid rate: {value!r}") from None
    raise TypeError(f"Rate must be a number, got: {type(value).__name__}")


def per_second(value: RateLike, unit: str = "second") -> Fraction:
    """Convert a rate expressed per ``unit`` into units per second.

    Raises:
        ValueError: If ``unit`` is not one of TIME_UNITS
    """
    try:
        seconds = TIME_UNITS[unit]
    except KeyError:
        raise ValueError(
            f"Unknown time unit {unit!r}; expected one of {sorted(TIME_UNITS)}"
        ) from None
    return to_rate(value) / seconds


def fractional_part(value: Fraction) -> Fraction:
    """``value - floor(value)``, always in [0, 1)."""
    return value - math.floor(value)


def ceil_int(value: Fraction) -> int:
    return math.ceil(value)


def format_rate(value: Fraction) -> str:
    """Render a rate as ``"n/d"`` or ``"n"`` for whole numbers."""
    return str(value)
