"""Decimal helpers for money and length values

Money and lengths are exchanged with exactly two fractional digits.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """Convert to Decimal without rounding. Raises ValueError on garbage input."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a decimal value: {value!r}") from e


def quantize(value: Any) -> Decimal:
    """Round to two fractional digits (half up)"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_non_negative_finite(value: Any) -> bool:
    try:
        number = to_decimal(value)
    except ValueError:
        return False
    return number.is_finite() and number >= 0


def is_positive_finite(value: Any) -> bool:
    """Finite and still greater than zero once rounded to two fractional digits"""
    return is_non_negative_finite(value) and quantize(value) > ZERO
