"""
Shopdesk Orders Engine — Order Lifecycle Service
================================================
Creates orders from a basket and moves them through their lifecycle.

Creation prices the basket against live stock and validates the
coupon, but reserves nothing and consumes nothing: stock and coupon
are only touched when the first payment lands (engines/payments).
Between creation and first payment another order may take the same
stock; that order is then rejected by the pending-order reconciler.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.config.rules import DEFAULT_SETTLEMENT_RULES, SettlementRules
from core.context import Capability, OperatorContext, require_capability
from core.errors import (
    AuthorizationError,
    NotFoundError,
    StateError,
    raise_if_rejected,
)
from core.store.protocol import ShopStore
from core.store.records import Order, OrderLine, OrderStatus
from core.time import Clock, SystemClock
from engines.coupon.services import CouponLedger
from engines.loyalty.services import LoyaltyService
from engines.orders.commands import CreateOrderRequest
from engines.orders.policies import (
    order_must_be_pending_policy,
    order_must_be_unpaid_policy,
    order_must_have_payment_policy,
)
from engines.orders.state import assert_transition
from engines.pricing.calculator import BasketLine, quote_order

logger = logging.getLogger("shopdesk.orders")


class OrderLifecycleService:
    def __init__(
        self,
        *,
        store: ShopStore,
        rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
        clock: Optional[Clock] = None,
        coupons: Optional[CouponLedger] = None,
        loyalty: Optional[LoyaltyService] = None,
    ):
        self._store = store
        self._rules = rules
        self._clock = clock or SystemClock()
        self._coupons = coupons or CouponLedger(store=store, clock=self._clock)
        self._loyalty = loyalty or LoyaltyService(store=store, rules=rules)

    # ══════════════════════════════════════════════════════════
    # CREATE
    # ══════════════════════════════════════════════════════════

    def create_order(
        self,
        request: CreateOrderRequest,
        *,
        context: Optional[OperatorContext] = None,
    ) -> Order:
        require_capability(context, Capability.ORDER_CREATE)

        with self._store.unit_of_work():
            customer = self._store.get_customer(request.customer_id)
            if customer is None:
                raise NotFoundError("Customer", request.customer_id)

            basket = []
            for item in request.items:
                product = self._store.get_product(item.product_id)
                if product is None or product.deleted:
                    raise NotFoundError("Product", item.product_id)
                basket.append(BasketLine(product=product, quantity=item.quantity))

            coupon = None
            if request.coupon_code:
                coupon = self._coupons.validate(request.coupon_code)
                logger.info(
                    "Applied coupon: %s (consumed on first payment)", coupon.code,
                )

            quote = quote_order(
                basket,
                customer.loyalty_tier,
                coupon.discount_percentage if coupon else None,
                self._rules,
            )

            order = self._store.save_order(Order(
                customer_id=customer.customer_id,
                created_at=self._clock.now_utc(),
                status=OrderStatus.PENDING,
                subtotal=quote.subtotal,
                loyalty_discount=quote.loyalty_discount,
                coupon_discount=quote.coupon_discount,
                total_discount=quote.total_discount,
                amount_after_discount=quote.amount_after_discount,
                tax_rate=quote.tax_rate_percent,
                tax=quote.tax,
                total=quote.total,
                remaining=quote.total,
                coupon_id=coupon.coupon_id if coupon else None,
                lines=[
                    OrderLine(
                        product_id=line.product_id,
                        product_name=line.product_name,
                        unit_price=line.unit_price,
                        quantity=line.quantity,
                        line_total=line.line_total,
                    )
                    for line in quote.lines
                ],
            ))

        logger.info(
            "Created order %s for customer %s. Subtotal: %s, Loyalty discount: %s, "
            "Coupon discount: %s, Total: %s",
            order.order_id, order.customer_id, order.subtotal,
            order.loyalty_discount, order.coupon_discount, order.total,
        )
        return order

    # ══════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════

    def confirm_order(
        self, order_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Order:
        require_capability(context, Capability.ORDER_CONFIRM)

        with self._store.unit_of_work():
            order = self._lock(order_id)
            raise_if_rejected(order_must_be_pending_policy(order), StateError)
            raise_if_rejected(order_must_have_payment_policy(order), StateError)
            order = self._transition(order, OrderStatus.CONFIRMED)
            self._loyalty.upgrade_if_eligible(order.customer_id)

        logger.info("Confirmed order %s", order_id)
        return order

    def cancel_order(
        self, order_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Order:
        require_capability(context, Capability.ORDER_CANCEL)

        with self._store.unit_of_work():
            order = self._lock(order_id)
            raise_if_rejected(order_must_be_pending_policy(order), StateError)
            raise_if_rejected(order_must_be_unpaid_policy(order), StateError)
            order = self._transition(order, OrderStatus.CANCELED)

        logger.info("Canceled order %s", order_id)
        return order

    def reject_order(self, order: Order) -> Order:
        """System-only transition, driven by the pending-order reconciler."""
        raise_if_rejected(order_must_be_pending_policy(order), StateError)
        raise_if_rejected(order_must_be_unpaid_policy(order), StateError)
        rejected = self._transition(order, OrderStatus.REJECTED)
        logger.info("Rejected pending order %s due to insufficient stock", order.order_id)
        return rejected

    def _transition(self, order: Order, target: OrderStatus) -> Order:
        assert_transition(order.order_id, order.status, target)
        order.status = target
        return self._store.save_order(order)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_order(
        self, order_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Order:
        require_capability(context, Capability.ORDER_READ)
        order = self._load(order_id)
        require_capability(
            context, Capability.ORDER_READ, owner_customer_id=order.customer_id,
        )
        return order

    def list_orders(
        self,
        *,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        context: Optional[OperatorContext] = None,
    ) -> list[Order]:
        require_capability(context, Capability.ORDER_READ)
        if context is not None and not context.is_admin:
            if customer_id not in (None, context.customer_id):
                raise AuthorizationError(
                    "Clients may only access their own records.",
                    code="NOT_RECORD_OWNER",
                    details={"actor_id": context.actor_id},
                )
            customer_id = context.customer_id
        return self._store.list_orders(customer_id=customer_id, status=status)

    def _load(self, order_id: int) -> Order:
        order = self._store.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def _lock(self, order_id: int) -> Order:
        order = self._store.lock_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order
