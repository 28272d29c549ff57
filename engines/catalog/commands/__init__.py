"""
Shopdesk Catalog Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.errors import ValidationError
from core.primitives.money import quantize, to_decimal


def _price(value) -> Decimal:
    try:
        price = quantize(to_decimal(value, field_name="unit_price"))
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc
    if price < 0:
        raise ValidationError("unit_price must be non-negative.")
    return price


def _quantity(value, name: str, *, allow_zero: bool) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer.")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(
            f"{name} must be {'non-negative' if allow_zero else 'positive'}."
        )


@dataclass(frozen=True)
class ProductCreateRequest:
    sku: str
    name: str
    unit_price: Decimal
    stock: int = 0

    def __post_init__(self):
        if not isinstance(self.sku, str) or not self.sku.strip():
            raise ValidationError("sku must be a non-empty string.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("name must be a non-empty string.")
        object.__setattr__(self, "sku", self.sku.strip())
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "unit_price", _price(self.unit_price))
        _quantity(self.stock, "stock", allow_zero=True)


@dataclass(frozen=True)
class ProductUpdateRequest:
    product_id: int
    name: Optional[str] = None
    unit_price: Optional[Decimal] = None

    def __post_init__(self):
        _quantity(self.product_id, "product_id", allow_zero=False)
        if self.name is not None:
            if not isinstance(self.name, str) or not self.name.strip():
                raise ValidationError("name must be a non-empty string.")
            object.__setattr__(self, "name", self.name.strip())
        if self.unit_price is not None:
            object.__setattr__(self, "unit_price", _price(self.unit_price))


@dataclass(frozen=True)
class RestockRequest:
    product_id: int
    quantity: int

    def __post_init__(self):
        _quantity(self.product_id, "product_id", allow_zero=False)
        _quantity(self.quantity, "quantity", allow_zero=False)
