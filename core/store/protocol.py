"""
Shopdesk Store — Provider Protocol
==================================
The persistence collaborator the settlement engines depend on.

Contract:
- get_* return None when the row does not exist (engines decide
  which NotFoundError to raise)
- save_* inserts when the record id is None, updates otherwise,
  and returns the stored record with its id populated
- records returned are detached copies: mutating them has no effect
  until they are saved
- unit_of_work() makes every write inside it commit or roll back
  together; it may be nested (inner blocks join the outer one)
- lock_*() must be called inside a unit of work and hold the row
  until the unit of work ends (SELECT ... FOR UPDATE in the DB store);
  lock_order(skip_locked=True) returns None instead of waiting when
  another unit of work holds the order
- save_payment() raises ConflictError when the order already has a
  payment with the same payment_number
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Protocol

from core.errors import ConflictError, ReasonCode
from core.store.records import (
    Coupon,
    Customer,
    Order,
    OrderStatus,
    Payment,
    Product,
)


def payment_number_taken(order_id: int, payment_number: int) -> ConflictError:
    """Error for two payments racing for the same number on one order."""
    return ConflictError(
        f"Order {order_id} already has payment #{payment_number}; retry the payment.",
        code=ReasonCode.PAYMENT_NUMBER_TAKEN,
        details={"order_id": order_id, "payment_number": payment_number},
    )


class ShopStore(Protocol):
    def unit_of_work(self) -> AbstractContextManager:
        ...

    # ── customers ─────────────────────────────────────────────
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        ...

    def lock_customer(self, customer_id: int) -> Optional[Customer]:
        ...

    def list_customers(self) -> list[Customer]:
        ...

    def save_customer(self, customer: Customer) -> Customer:
        ...

    def delete_customer(self, customer_id: int) -> None:
        ...

    # ── products ──────────────────────────────────────────────
    def get_product(self, product_id: int) -> Optional[Product]:
        ...

    def lock_product(self, product_id: int) -> Optional[Product]:
        ...

    def find_product_by_sku(self, sku: str) -> Optional[Product]:
        ...

    def list_products(self, *, include_deleted: bool = False) -> list[Product]:
        ...

    def save_product(self, product: Product) -> Product:
        ...

    # ── coupons ───────────────────────────────────────────────
    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        ...

    def lock_coupon(self, coupon_id: int) -> Optional[Coupon]:
        ...

    def find_coupon_by_code(self, code: str) -> Optional[Coupon]:
        ...

    def list_coupons(self) -> list[Coupon]:
        ...

    def save_coupon(self, coupon: Coupon) -> Coupon:
        ...

    def delete_coupon(self, coupon_id: int) -> None:
        ...

    # ── orders ────────────────────────────────────────────────
    def get_order(self, order_id: int) -> Optional[Order]:
        ...

    def lock_order(self, order_id: int, *, skip_locked: bool = False) -> Optional[Order]:
        ...

    def list_orders(
        self,
        *,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
    ) -> list[Order]:
        ...

    def save_order(self, order: Order) -> Order:
        ...

    # ── payments ──────────────────────────────────────────────
    def get_payment(self, payment_id: int) -> Optional[Payment]:
        ...

    def list_payments(self, *, order_id: Optional[int] = None) -> list[Payment]:
        ...

    def count_payments(self, order_id: int) -> int:
        ...

    def save_payment(self, payment: Payment) -> Payment:
        ...

    def delete_payment(self, payment_id: int) -> None:
        ...
