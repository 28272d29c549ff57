"""
Shopdesk Coupon Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.errors import ValidationError
from core.primitives.money import HUNDRED, to_decimal


def _percentage(value) -> Decimal:
    try:
        pct = to_decimal(value, field_name="discount_percentage")
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc
    if not 0 <= pct <= HUNDRED:
        raise ValidationError(
            f"discount_percentage must be between 0 and 100, got {pct}."
        )
    return pct


@dataclass(frozen=True)
class CouponCreateRequest:
    code: str
    discount_percentage: Decimal

    def __post_init__(self):
        if not isinstance(self.code, str) or not self.code.strip():
            raise ValidationError("code must be a non-empty string.")
        object.__setattr__(self, "code", self.code.strip())
        object.__setattr__(
            self, "discount_percentage", _percentage(self.discount_percentage),
        )


@dataclass(frozen=True)
class CouponUpdateRequest:
    coupon_id: int
    code: Optional[str] = None
    discount_percentage: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.coupon_id, int) or self.coupon_id <= 0:
            raise ValidationError("coupon_id must be a positive integer.")
        if self.code is not None:
            if not isinstance(self.code, str) or not self.code.strip():
                raise ValidationError("code must be a non-empty string.")
            object.__setattr__(self, "code", self.code.strip())
        if self.discount_percentage is not None:
            object.__setattr__(
                self, "discount_percentage", _percentage(self.discount_percentage),
            )
