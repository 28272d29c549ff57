"""
Shopdesk Customer Engine — Policies
"""

from __future__ import annotations

from typing import Optional, Sequence

from core.errors import ReasonCode, RejectionReason
from core.store.records import Order


def customer_must_have_no_orders_policy(
    customer_id: int, orders: Sequence[Order],
) -> Optional[RejectionReason]:
    """Orders keep a reference to their customer; such customers stay."""
    if orders:
        return RejectionReason(
            code=ReasonCode.CUSTOMER_HAS_ORDERS,
            message=(
                f"Customer {customer_id} has {len(orders)} order(s) "
                f"and cannot be deleted."
            ),
            policy_name="customer_must_have_no_orders_policy",
        )
    return None
