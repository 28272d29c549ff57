"""
Shopdesk Payments Engine — Pending-Order Reconciler
===================================================
Runs inside the first-payment unit of work, after stock has been
deducted. Every other PENDING order that has no payment yet is
re-checked against live stock and REJECTED when it can no longer be
fulfilled.

RULES (NON-NEGOTIABLE):
- Orders with at least one payment are never touched
- Quantities of the same product across lines are summed
- A line whose product row is gone makes the order unsatisfiable
- Shortfalls become REJECTED transitions; nothing is raised for them
- An order is re-read under its row lock before it is rejected
"""

from __future__ import annotations

import logging
from typing import Optional

from core.store.protocol import ShopStore
from core.store.records import Order, OrderStatus
from engines.orders.services import OrderLifecycleService

logger = logging.getLogger("shopdesk.payments")


def order_shortfall(store: ShopStore, order: Order) -> Optional[str]:
    """Describe the first unsatisfiable line of `order`, or None."""
    for product_id, required in sorted(order.required_quantities().items()):
        product = store.get_product(product_id)
        if product is None:
            return f"product {product_id} no longer exists"
        if product.stock < required:
            return (
                f"product {product.name} (ID: {product_id}) "
                f"requires {required}, available {product.stock}"
            )
    return None


class PendingOrderReconciler:
    def __init__(self, *, store: ShopStore, orders: OrderLifecycleService):
        self._store = store
        self._orders = orders

    def run(self, *, exclude_order_id: Optional[int] = None) -> list[int]:
        """Reject every unpaid PENDING order stock can no longer cover."""
        rejected: list[int] = []
        with self._store.unit_of_work():
            for order in self._store.list_orders(status=OrderStatus.PENDING):
                if order.order_id == exclude_order_id:
                    continue
                if self._store.count_payments(order.order_id) > 0:
                    logger.debug("Skipping pending order %s: already paid into", order.order_id)
                    continue
                if order_shortfall(self._store, order) is None:
                    continue
                # Re-read under lock; an order held elsewhere is being paid or moved.
                order = self._store.lock_order(order.order_id, skip_locked=True)
                if (
                    order is None
                    or not order.is_pending()
                    or self._store.count_payments(order.order_id) > 0
                ):
                    continue
                shortfall = order_shortfall(self._store, order)
                if shortfall is None:
                    continue
                logger.info(
                    "Insufficient stock for pending order %s: %s",
                    order.order_id, shortfall,
                )
                self._orders.reject_order(order)
                rejected.append(order.order_id)
        return rejected
