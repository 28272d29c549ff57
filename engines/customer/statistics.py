"""
Shopdesk Customer Engine — Client Statistics
============================================
Read-only purchase summary of one customer.

total_spent sums every payment on every order of the customer, the
same figure the loyalty tier is computed from. total_remaining only
counts orders that are still owed (PENDING or CONFIRMED).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from core.primitives.money import sum_money
from core.store.protocol import ShopStore
from core.store.records import Customer, CustomerTier, OrderStatus

RECENT_ORDER_COUNT = 5
OWED_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


@dataclass(frozen=True)
class OrderSummary:
    order_id: int
    created_at: datetime
    total: Decimal
    status: OrderStatus


@dataclass(frozen=True)
class ClientStatistics:
    customer_id: int
    name: str
    email: str
    loyalty_tier: CustomerTier
    total_orders: int
    total_spent: Decimal
    total_remaining: Decimal
    first_order_date: Optional[datetime]
    last_order_date: Optional[datetime]
    orders_by_status: Dict[OrderStatus, int]
    recent_orders: Tuple[OrderSummary, ...]


def compute_client_statistics(store: ShopStore, customer: Customer) -> ClientStatistics:
    orders = store.list_orders(customer_id=customer.customer_id)

    by_status: Dict[OrderStatus, int] = {status: 0 for status in OrderStatus}
    for order in orders:
        by_status[order.status] += 1

    total_spent = sum_money(
        payment.amount
        for order in orders
        for payment in store.list_payments(order_id=order.order_id)
    )
    total_remaining = sum_money(o.remaining for o in orders if o.status in OWED_STATUSES)

    dates = sorted(o.created_at for o in orders)
    recent = sorted(orders, key=lambda o: (o.created_at, o.order_id), reverse=True)

    return ClientStatistics(
        customer_id=customer.customer_id,
        name=customer.name,
        email=customer.email,
        loyalty_tier=customer.loyalty_tier,
        total_orders=len(orders),
        total_spent=total_spent,
        total_remaining=total_remaining,
        first_order_date=dates[0] if dates else None,
        last_order_date=dates[-1] if dates else None,
        orders_by_status=by_status,
        recent_orders=tuple(
            OrderSummary(o.order_id, o.created_at, o.total, o.status)
            for o in recent[:RECENT_ORDER_COUNT]
        ),
    )
