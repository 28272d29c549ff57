"""
Shopdesk Core Primitives — Public API
=====================================
Exact decimal money helpers shared by pricing and settlement.
"""

from core.primitives.money import (
    CENT,
    HUNDRED,
    ZERO,
    percent_of,
    quantize,
    sum_money,
    to_decimal,
)

__all__ = [
    "CENT",
    "HUNDRED",
    "ZERO",
    "percent_of",
    "quantize",
    "sum_money",
    "to_decimal",
]
