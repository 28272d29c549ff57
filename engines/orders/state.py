"""
Shopdesk Orders Engine — State Machine
======================================
PENDING is the only non-terminal state.

    PENDING ──confirm──▶ CONFIRMED   (≥ 1 payment)
    PENDING ──cancel───▶ CANCELED    (no payment)
    PENDING ──reject───▶ REJECTED    (no payment, reconciler only)
"""

from __future__ import annotations

from typing import FrozenSet, Mapping

from core.errors import ReasonCode, StateError
from core.store.records import OrderStatus

ORDER_TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.CANCELED,
        OrderStatus.REJECTED,
    }),
    OrderStatus.CONFIRMED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}

TERMINAL_STATES = frozenset(
    status for status, targets in ORDER_TRANSITIONS.items() if not targets
)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())


def assert_transition(order_id: int, current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise StateError(
            f"Order {order_id} cannot move from {current.value} to {target.value}.",
            code=ReasonCode.ORDER_NOT_PENDING,
            details={
                "order_id": order_id,
                "from": current.value,
                "to": target.value,
            },
        )
