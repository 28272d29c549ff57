"""
Shopdesk Payments Engine — Payment Settlement Service
=====================================================
Records payments against PENDING and CONFIRMED orders. A confirmed
order may still carry a balance; CANCELED and REJECTED orders are
closed to money.

create_payment() is one unit of work:
    1. lock the order row
    2. validate (amount > 0, cash ceiling, ≤ remaining, order open)
    3. persist payment #n, decrement order.remaining
    4. first payment only:
         deduct stock for every line (ascending product id)
         consume the order's coupon, if any
         reject unpaid PENDING orders stock can no longer cover
    5. re-evaluate the customer's loyalty tier
Any failure rolls every write back, including stock and coupon.

Payments never change order status; confirmation stays an explicit
operation of the order lifecycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from core.config.rules import DEFAULT_SETTLEMENT_RULES, SettlementRules
from core.context import Capability, OperatorContext, require_capability
from core.errors import (
    NotFoundError,
    StateError,
    ValidationError,
    raise_if_rejected,
)
from core.store.protocol import ShopStore
from core.store.records import Order, Payment
from core.time import Clock, SystemClock
from engines.coupon.services import CouponLedger
from engines.inventory.services import StockLedger
from engines.loyalty.services import LoyaltyService
from engines.orders.services import OrderLifecycleService
from engines.payments.commands import CreatePaymentRequest, PaymentCorrectionRequest
from engines.payments.policies import (
    cash_payment_ceiling_policy,
    order_must_accept_payments_policy,
    payment_amount_must_be_positive_policy,
    payment_must_be_removable_policy,
    payment_within_remaining_policy,
)
from engines.payments.reconciler import PendingOrderReconciler

logger = logging.getLogger("shopdesk.payments")


@dataclass(frozen=True)
class SettlementResult:
    payment: Payment
    order: Order
    first_payment: bool
    rejected_order_ids: Tuple[int, ...] = ()


class PaymentSettlementService:
    def __init__(
        self,
        *,
        store: ShopStore,
        rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
        clock: Optional[Clock] = None,
        stock: Optional[StockLedger] = None,
        coupons: Optional[CouponLedger] = None,
        loyalty: Optional[LoyaltyService] = None,
        orders: Optional[OrderLifecycleService] = None,
    ):
        self._store = store
        self._rules = rules
        self._clock = clock or SystemClock()
        self._stock = stock or StockLedger(store=store)
        self._coupons = coupons or CouponLedger(store=store, clock=self._clock)
        self._loyalty = loyalty or LoyaltyService(store=store, rules=rules)
        self._orders = orders or OrderLifecycleService(
            store=store, rules=rules, clock=self._clock,
            coupons=self._coupons, loyalty=self._loyalty,
        )
        self._reconciler = PendingOrderReconciler(store=store, orders=self._orders)

    # ══════════════════════════════════════════════════════════
    # CREATE
    # ══════════════════════════════════════════════════════════

    def create_payment(
        self,
        request: CreatePaymentRequest,
        *,
        context: Optional[OperatorContext] = None,
    ) -> SettlementResult:
        require_capability(context, Capability.PAYMENT_CREATE)

        with self._store.unit_of_work():
            order = self._lock_order(request.order_id)
            raise_if_rejected(
                payment_amount_must_be_positive_policy(request.amount), ValidationError,
            )
            raise_if_rejected(
                cash_payment_ceiling_policy(
                    request.method, request.amount, self._rules.cash_ceiling,
                ),
                ValidationError,
            )
            raise_if_rejected(
                payment_within_remaining_policy(order, request.amount), ValidationError,
            )
            raise_if_rejected(order_must_accept_payments_policy(order), StateError)

            prior_count = self._store.count_payments(order.order_id)
            first_payment = prior_count == 0

            payment = self._store.save_payment(Payment(
                order_id=order.order_id,
                payment_number=prior_count + 1,
                amount=request.amount,
                method=request.method,
                reference=request.reference,
                payment_date=request.payment_date or self._clock.today(),
                status=request.status,
                bank_name=request.bank_name,
                due_date=request.due_date,
                collection_date=request.collection_date,
                created_at=self._clock.now_utc(),
            ))
            logger.info(
                "Created payment #%s for order %s with amount: %s",
                payment.payment_number, order.order_id, payment.amount,
            )

            order.remaining = order.remaining - request.amount
            order = self._store.save_order(order)
            logger.info("Updated order %s remaining amount: %s", order.order_id, order.remaining)

            rejected: list[int] = []
            if first_payment:
                logger.info(
                    "First payment for order %s, deducting stock and consuming coupon",
                    order.order_id,
                )
                self._stock.deduct_lines(order.lines)
                if order.coupon_id is not None:
                    self._coupons.consume_by_id(order.coupon_id)
                rejected = self._reconciler.run(exclude_order_id=order.order_id)

            self._loyalty.upgrade_if_eligible(order.customer_id)

        return SettlementResult(
            payment=payment,
            order=order,
            first_payment=first_payment,
            rejected_order_ids=tuple(rejected),
        )

    # ══════════════════════════════════════════════════════════
    # CORRECT / DELETE
    # ══════════════════════════════════════════════════════════

    def update_payment(
        self,
        request: PaymentCorrectionRequest,
        *,
        context: Optional[OperatorContext] = None,
    ) -> Payment:
        """Correct non-financial fields. No stock, coupon or loyalty effects."""
        require_capability(context, Capability.PAYMENT_CORRECT)

        with self._store.unit_of_work():
            payment = self._load_payment(request.payment_id)
            updated = self._store.save_payment(replace(payment, **request.changes))
        logger.info("Updated payment %s: %s", updated.payment_id, sorted(request.changes))
        return updated

    def delete_payment(
        self, payment_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Order:
        require_capability(context, Capability.PAYMENT_CORRECT)

        with self._store.unit_of_work():
            payment = self._load_payment(payment_id)
            order = self._lock_order(payment.order_id)
            raise_if_rejected(
                payment_must_be_removable_policy(
                    payment, order, self._store.count_payments(order.order_id),
                ),
                StateError,
            )
            self._store.delete_payment(payment_id)
            order.remaining = order.remaining + payment.amount
            order = self._store.save_order(order)

        logger.info(
            "Deleted payment %s of order %s, remaining restored to %s",
            payment_id, order.order_id, order.remaining,
        )
        return order

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_payment(
        self, payment_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Payment:
        require_capability(context, Capability.PAYMENT_READ)
        payment = self._load_payment(payment_id)
        if context is not None and not context.is_admin:
            order = self._load_order(payment.order_id)
            require_capability(
                context, Capability.PAYMENT_READ, owner_customer_id=order.customer_id,
            )
        return payment

    def list_payments(
        self,
        *,
        order_id: Optional[int] = None,
        context: Optional[OperatorContext] = None,
    ) -> list[Payment]:
        require_capability(context, Capability.PAYMENT_READ)
        if context is not None and not context.is_admin:
            if order_id is None:
                own = {
                    o.order_id
                    for o in self._store.list_orders(customer_id=context.customer_id)
                }
                return [p for p in self._store.list_payments() if p.order_id in own]
            order = self._load_order(order_id)
            require_capability(
                context, Capability.PAYMENT_READ, owner_customer_id=order.customer_id,
            )
        return self._store.list_payments(order_id=order_id)

    def _load_order(self, order_id: int) -> Order:
        order = self._store.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def _load_payment(self, payment_id: int) -> Payment:
        payment = self._store.get_payment(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    def _lock_order(self, order_id: int) -> Order:
        order = self._store.lock_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order
