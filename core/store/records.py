"""
Shopdesk Store — Records
========================
Plain record types exchanged between the engines and a ShopStore.

Records are storage-neutral: the in-memory store keeps them as-is,
the Django store maps them to / from ORM rows. Identifiers are
positive integers assigned by the store on first save (None before).

Money fields are Decimal with 2 places (core.primitives.money).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from core.primitives.money import ZERO


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class CustomerTier(Enum):
    """Loyalty tier. Totally ordered: BASIC < SILVER < GOLD < PLATINUM."""
    BASIC = "BASIC"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


TIER_ORDER = (
    CustomerTier.BASIC,
    CustomerTier.SILVER,
    CustomerTier.GOLD,
    CustomerTier.PLATINUM,
)


class OrderStatus(Enum):
    """Order lifecycle. PENDING is initial, everything else is terminal."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"


class PaymentMethod(Enum):
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    OTHER = "OTHER"


class PaymentStatus(Enum):
    """Collection status of a payment instrument (administrative only)."""
    PENDING = "PENDING"
    COLLECTED = "COLLECTED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════
# RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass
class Customer:
    name: str
    email: str = ""
    loyalty_tier: CustomerTier = CustomerTier.BASIC
    created_at: Optional[datetime] = None
    customer_id: Optional[int] = None


@dataclass
class Product:
    sku: str
    name: str
    unit_price: Decimal
    stock: int = 0
    deleted: bool = False
    product_id: Optional[int] = None


@dataclass
class Coupon:
    code: str
    discount_percentage: Decimal
    consumed: bool = False
    created_at: Optional[datetime] = None
    coupon_id: Optional[int] = None


@dataclass
class OrderLine:
    """Snapshot of a product at order-creation time. Never updated."""
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    line_id: Optional[int] = None


@dataclass
class Order:
    customer_id: int
    created_at: datetime
    subtotal: Decimal
    total: Decimal
    remaining: Decimal
    status: OrderStatus = OrderStatus.PENDING
    loyalty_discount: Decimal = ZERO
    coupon_discount: Decimal = ZERO
    total_discount: Decimal = ZERO
    amount_after_discount: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax: Decimal = ZERO
    coupon_id: Optional[int] = None
    lines: List[OrderLine] = field(default_factory=list)
    order_id: Optional[int] = None

    @property
    def amount_paid(self) -> Decimal:
        return self.total - self.remaining

    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def required_quantities(self) -> dict:
        """product_id → total quantity across all lines."""
        required: dict = {}
        for line in self.lines:
            required[line.product_id] = required.get(line.product_id, 0) + line.quantity
        return required


@dataclass
class Payment:
    order_id: int
    payment_number: int
    amount: Decimal
    method: PaymentMethod
    reference: str
    payment_date: date
    status: PaymentStatus = PaymentStatus.PENDING
    bank_name: Optional[str] = None
    due_date: Optional[date] = None
    collection_date: Optional[date] = None
    created_at: Optional[datetime] = None
    payment_id: Optional[int] = None


# Fields an administrator may correct after a payment is recorded.
PAYMENT_CORRECTABLE_FIELDS = frozenset({
    "status",
    "reference",
    "bank_name",
    "payment_date",
    "due_date",
    "collection_date",
})
