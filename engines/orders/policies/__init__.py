"""
Shopdesk Orders Engine — Policies

Payment presence is read from the order itself: an order has been
paid into iff remaining < total.
"""

from __future__ import annotations

from typing import Optional

from core.errors import ReasonCode, RejectionReason
from core.store.records import Order


def order_must_be_pending_policy(order: Order) -> Optional[RejectionReason]:
    if not order.is_pending():
        return RejectionReason(
            code=ReasonCode.ORDER_NOT_PENDING,
            message=f"Order {order.order_id} is {order.status.value}, not PENDING.",
            policy_name="order_must_be_pending_policy",
        )
    return None


def order_must_have_payment_policy(order: Order) -> Optional[RejectionReason]:
    if order.remaining == order.total:
        return RejectionReason(
            code=ReasonCode.ORDER_NOT_PAID,
            message=f"Order {order.order_id} cannot be confirmed without a payment.",
            policy_name="order_must_have_payment_policy",
        )
    return None


def order_must_be_unpaid_policy(order: Order) -> Optional[RejectionReason]:
    if order.remaining != order.total:
        return RejectionReason(
            code=ReasonCode.ORDER_HAS_PAYMENTS,
            message=f"Order {order.order_id} has payments and cannot be canceled.",
            policy_name="order_must_be_unpaid_policy",
        )
    return None
