"""
Shopdesk Store — Public API
===========================
Records, the ShopStore protocol, and the in-memory provider.
"""

from core.store.memory import InMemoryShopStore
from core.store.protocol import ShopStore
from core.store.records import (
    PAYMENT_CORRECTABLE_FIELDS,
    TIER_ORDER,
    Coupon,
    Customer,
    CustomerTier,
    Order,
    OrderLine,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Product,
)

__all__ = [
    "ShopStore",
    "InMemoryShopStore",
    "Customer",
    "CustomerTier",
    "TIER_ORDER",
    "Product",
    "Coupon",
    "Order",
    "OrderLine",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PAYMENT_CORRECTABLE_FIELDS",
]
