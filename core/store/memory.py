"""
Shopdesk Store — In-Memory Provider
===================================
Deterministic in-memory ShopStore used for bootstrap and tests.

Atomicity: the outermost unit_of_work() snapshots every table and
restores the snapshot if the block raises. A re-entrant lock is held
for the whole unit of work, which serializes writers the way row
locks do in the DB-backed store.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from core.store.protocol import payment_number_taken
from core.store.records import (
    Coupon,
    Customer,
    Order,
    OrderStatus,
    Payment,
    Product,
)

_TABLES = ("customers", "products", "coupons", "orders", "payments")


class InMemoryShopStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self._customers: Dict[int, Customer] = {}
        self._products: Dict[int, Product] = {}
        self._coupons: Dict[int, Coupon] = {}
        self._orders: Dict[int, Order] = {}
        self._payments: Dict[int, Payment] = {}
        self._sequences: Dict[str, int] = {name: 0 for name in _TABLES}
        self._line_sequence = 0

    # ── transactions ──────────────────────────────────────────

    @contextmanager
    def unit_of_work(self) -> Iterator["InMemoryShopStore"]:
        with self._lock:
            snapshot = self._snapshot() if self._depth == 0 else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    @property
    def in_unit_of_work(self) -> bool:
        return self._depth > 0

    def _require_unit_of_work(self, operation: str) -> None:
        if not self.in_unit_of_work:
            raise RuntimeError(f"{operation}() requires an active unit of work.")

    def _snapshot(self) -> dict:
        return copy.deepcopy({
            "customers": self._customers,
            "products": self._products,
            "coupons": self._coupons,
            "orders": self._orders,
            "payments": self._payments,
            "sequences": self._sequences,
            "line_sequence": self._line_sequence,
        })

    def _restore(self, snapshot: dict) -> None:
        self._customers = snapshot["customers"]
        self._products = snapshot["products"]
        self._coupons = snapshot["coupons"]
        self._orders = snapshot["orders"]
        self._payments = snapshot["payments"]
        self._sequences = snapshot["sequences"]
        self._line_sequence = snapshot["line_sequence"]

    def _next_id(self, table: str) -> int:
        self._sequences[table] += 1
        return self._sequences[table]

    # ── customers ─────────────────────────────────────────────

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return copy.deepcopy(self._customers.get(customer_id))

    def lock_customer(self, customer_id: int) -> Optional[Customer]:
        self._require_unit_of_work("lock_customer")
        return self.get_customer(customer_id)

    def list_customers(self) -> list[Customer]:
        return [copy.deepcopy(c) for _, c in sorted(self._customers.items())]

    def save_customer(self, customer: Customer) -> Customer:
        with self._lock:
            if customer.customer_id is None:
                customer.customer_id = self._next_id("customers")
            self._customers[customer.customer_id] = copy.deepcopy(customer)
        return copy.deepcopy(customer)

    def delete_customer(self, customer_id: int) -> None:
        with self._lock:
            self._customers.pop(customer_id, None)

    # ── products ──────────────────────────────────────────────

    def get_product(self, product_id: int) -> Optional[Product]:
        return copy.deepcopy(self._products.get(product_id))

    def lock_product(self, product_id: int) -> Optional[Product]:
        self._require_unit_of_work("lock_product")
        return self.get_product(product_id)

    def find_product_by_sku(self, sku: str) -> Optional[Product]:
        for product in self._products.values():
            if product.sku == sku:
                return copy.deepcopy(product)
        return None

    def list_products(self, *, include_deleted: bool = False) -> list[Product]:
        return [
            copy.deepcopy(p)
            for _, p in sorted(self._products.items())
            if include_deleted or not p.deleted
        ]

    def save_product(self, product: Product) -> Product:
        with self._lock:
            if product.product_id is None:
                product.product_id = self._next_id("products")
            self._products[product.product_id] = copy.deepcopy(product)
        return copy.deepcopy(product)

    # ── coupons ───────────────────────────────────────────────

    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        return copy.deepcopy(self._coupons.get(coupon_id))

    def lock_coupon(self, coupon_id: int) -> Optional[Coupon]:
        self._require_unit_of_work("lock_coupon")
        return self.get_coupon(coupon_id)

    def find_coupon_by_code(self, code: str) -> Optional[Coupon]:
        for coupon in self._coupons.values():
            if coupon.code == code:
                return copy.deepcopy(coupon)
        return None

    def list_coupons(self) -> list[Coupon]:
        return [copy.deepcopy(c) for _, c in sorted(self._coupons.items())]

    def save_coupon(self, coupon: Coupon) -> Coupon:
        with self._lock:
            if coupon.coupon_id is None:
                coupon.coupon_id = self._next_id("coupons")
            self._coupons[coupon.coupon_id] = copy.deepcopy(coupon)
        return copy.deepcopy(coupon)

    def delete_coupon(self, coupon_id: int) -> None:
        with self._lock:
            self._coupons.pop(coupon_id, None)

    # ── orders ────────────────────────────────────────────────

    def get_order(self, order_id: int) -> Optional[Order]:
        return copy.deepcopy(self._orders.get(order_id))

    def lock_order(self, order_id: int, *, skip_locked: bool = False) -> Optional[Order]:
        self._require_unit_of_work("lock_order")
        return self.get_order(order_id)

    def list_orders(
        self,
        *,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
    ) -> list[Order]:
        return [
            copy.deepcopy(o)
            for _, o in sorted(self._orders.items())
            if (customer_id is None or o.customer_id == customer_id)
            and (status is None or o.status == status)
        ]

    def save_order(self, order: Order) -> Order:
        with self._lock:
            if order.order_id is None:
                order.order_id = self._next_id("orders")
                for line in order.lines:
                    self._line_sequence += 1
                    line.line_id = self._line_sequence
            else:
                # Lines are written once, with the order.
                existing = self._orders.get(order.order_id)
                if existing is not None:
                    order.lines = copy.deepcopy(existing.lines)
            self._orders[order.order_id] = copy.deepcopy(order)
        return copy.deepcopy(order)

    # ── payments ──────────────────────────────────────────────

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return copy.deepcopy(self._payments.get(payment_id))

    def list_payments(self, *, order_id: Optional[int] = None) -> list[Payment]:
        rows = [
            p for p in self._payments.values()
            if order_id is None or p.order_id == order_id
        ]
        rows.sort(key=lambda p: (p.order_id, p.payment_number, p.payment_id))
        return [copy.deepcopy(p) for p in rows]

    def count_payments(self, order_id: int) -> int:
        return sum(1 for p in self._payments.values() if p.order_id == order_id)

    def save_payment(self, payment: Payment) -> Payment:
        with self._lock:
            for other in self._payments.values():
                if (
                    other.order_id == payment.order_id
                    and other.payment_number == payment.payment_number
                    and other.payment_id != payment.payment_id
                ):
                    raise payment_number_taken(payment.order_id, payment.payment_number)
            if payment.payment_id is None:
                payment.payment_id = self._next_id("payments")
            self._payments[payment.payment_id] = copy.deepcopy(payment)
        return copy.deepcopy(payment)

    def delete_payment(self, payment_id: int) -> None:
        with self._lock:
            self._payments.pop(payment_id, None)
