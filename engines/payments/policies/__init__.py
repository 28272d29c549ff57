"""
Shopdesk Payments Engine — Policies
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from core.errors import ReasonCode, RejectionReason
from core.store.records import Order, OrderStatus, Payment, PaymentMethod

PAYABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def payment_amount_must_be_positive_policy(amount: Decimal) -> Optional[RejectionReason]:
    if amount <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_AMOUNT,
            message="Payment amount must be positive.",
            policy_name="payment_amount_must_be_positive_policy",
        )
    return None


def cash_payment_ceiling_policy(
    method: PaymentMethod, amount: Decimal, ceiling: Decimal,
) -> Optional[RejectionReason]:
    """A single CASH payment may not exceed the legal ceiling."""
    if method == PaymentMethod.CASH and amount > ceiling:
        return RejectionReason(
            code=ReasonCode.CASH_CEILING_EXCEEDED,
            message=f"Cash payment cannot exceed {ceiling}.",
            policy_name="cash_payment_ceiling_policy",
        )
    return None


def payment_within_remaining_policy(order: Order, amount: Decimal) -> Optional[RejectionReason]:
    if amount > order.remaining:
        return RejectionReason(
            code=ReasonCode.AMOUNT_EXCEEDS_REMAINING,
            message=(
                f"Payment amount ({amount}) cannot exceed remaining amount "
                f"({order.remaining})"
            ),
            policy_name="payment_within_remaining_policy",
        )
    return None


def payment_must_be_removable_policy(
    payment: Payment, order: Order, payment_count: int,
) -> Optional[RejectionReason]:
    """
    Only the latest payment of a PENDING order can be removed, and
    never the first one: it carries the stock and coupon effects.
    """
    if not order.is_pending():
        message = f"Order {order.order_id} is {order.status.value}; its payments are final."
    elif payment.payment_number == 1:
        message = "The first payment of an order cannot be deleted."
    elif payment.payment_number != payment_count:
        message = (
            f"Only the latest payment (#{payment_count}) of order "
            f"{order.order_id} can be deleted."
        )
    else:
        return None
    return RejectionReason(
        code=ReasonCode.PAYMENT_NOT_REMOVABLE,
        message=message,
        policy_name="payment_must_be_removable_policy",
    )


def order_must_accept_payments_policy(order: Order) -> Optional[RejectionReason]:
    """PENDING and CONFIRMED orders take money; CANCELED and REJECTED do not."""
    if order.status in PAYABLE_STATUSES:
        return None
    return RejectionReason(
        code=ReasonCode.ORDER_CLOSED,
        message=f"Order {order.order_id} is {order.status.value} and accepts no payment.",
        policy_name="order_must_accept_payments_policy",
    )
