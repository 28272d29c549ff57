"""
Shopdesk Money Primitive — Exact Decimal Arithmetic
====================================================
Engine: Core Primitives

RULES (NON-NEGOTIABLE):
- All monetary values are decimal.Decimal, never float
- Stored and reported amounts carry exactly 2 decimal places
- Rounding is ROUND_HALF_UP wherever a value is quantized
- Percentages are expressed on a 0-100 scale (20 means 20%)

This file contains NO persistence logic.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

MoneyLike = Union[Decimal, int, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: MoneyLike, *, field_name: str = "amount") -> Decimal:
    """Coerce int / str / Decimal into Decimal. Floats are refused."""
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"{field_name} must be Decimal, int or str, "
            f"got {type(value).__name__}. Floats drift."
        )
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"{field_name} is not a valid decimal: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite, got {value!r}.")
    return result


def quantize(value: MoneyLike) -> Decimal:
    """Round half-up to 2 decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(base: Decimal, percent: MoneyLike) -> Decimal:
    """base × percent / 100, rounded half-up to 2 places."""
    return quantize(to_decimal(base) * to_decimal(percent, field_name="percent") / HUNDRED)


def sum_money(values: Iterable[MoneyLike]) -> Decimal:
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return quantize(total)
