"""
Shopdesk Orders Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from core.errors import ValidationError


def _positive_int(value, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer.")


@dataclass(frozen=True)
class OrderItemRequest:
    product_id: int
    quantity: int

    def __post_init__(self):
        _positive_int(self.product_id, "product_id")
        _positive_int(self.quantity, "quantity")


@dataclass(frozen=True)
class CreateOrderRequest:
    customer_id: int
    items: Tuple[OrderItemRequest, ...]
    coupon_code: Optional[str] = None

    def __post_init__(self):
        _positive_int(self.customer_id, "customer_id")
        items = tuple(self.items or ())
        if not items:
            raise ValidationError("Order must contain at least one item.")
        for item in items:
            if not isinstance(item, OrderItemRequest):
                raise ValidationError("items must be OrderItemRequest instances.")
        object.__setattr__(self, "items", items)
        if self.coupon_code is not None:
            code = str(self.coupon_code).strip()
            object.__setattr__(self, "coupon_code", code or None)
