"""Utility functions for the loan schedule calculator.

Helpers for turning user input into ``Decimal`` values and for rounding the
way browsers and spreadsheets do (half away from zero) rather than Python's
default banker's rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[Decimal, int, float, str]


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace and handles
    both integer and float-like strings. It raises ``ValueError`` if
    conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_decimal(value: Number) -> Decimal:
    """Return ``value`` as a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, int):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(str(value))
    return decimal_from_str(value)


def round_half_up(value: Decimal, places: int = 2) -> Decimal:
    """Round ``value`` to ``places`` decimals, halves away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)
