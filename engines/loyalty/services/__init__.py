"""
Shopdesk Loyalty Engine — Service Layer
=======================================
Recomputes a customer's tier from the store of record.

Lifetime spend is the sum of every payment recorded against any of
the customer's orders (whatever the order status). The confirmed
order count only includes CONFIRMED orders. The tier is persisted
only when it moves up; it is never downgraded.

upgrade_if_eligible() is idempotent and safe to call redundantly:
order confirmation and every payment both call it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from core.config.rules import DEFAULT_SETTLEMENT_RULES, SettlementRules
from core.errors import NotFoundError
from core.primitives.money import sum_money
from core.store.protocol import ShopStore
from core.store.records import CustomerTier, OrderStatus
from engines.loyalty.tiers import calculate_tier, needs_upgrade

logger = logging.getLogger("shopdesk.loyalty")


@dataclass(frozen=True)
class LoyaltySnapshot:
    customer_id: int
    lifetime_spend: Decimal
    confirmed_orders: int
    previous_tier: CustomerTier
    tier: CustomerTier

    @property
    def upgraded(self) -> bool:
        return self.tier != self.previous_tier


class LoyaltyService:
    """Loyalty tier evaluator bound to a store."""

    def __init__(
        self,
        *,
        store: ShopStore,
        rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
    ):
        self._store = store
        self._rules = rules

    def lifetime_spend(self, customer_id: int) -> Decimal:
        return sum_money(
            payment.amount
            for order in self._store.list_orders(customer_id=customer_id)
            for payment in self._store.list_payments(order_id=order.order_id)
        )

    def confirmed_order_count(self, customer_id: int) -> int:
        return len(self._store.list_orders(
            customer_id=customer_id, status=OrderStatus.CONFIRMED,
        ))

    def upgrade_if_eligible(self, customer_id: int) -> LoyaltySnapshot:
        with self._store.unit_of_work():
            customer = self._store.lock_customer(customer_id)
            if customer is None:
                raise NotFoundError("Customer", customer_id)

            spend = self.lifetime_spend(customer_id)
            confirmed = self.confirmed_order_count(customer_id)
            current = customer.loyalty_tier or CustomerTier.BASIC

            if not needs_upgrade(current, spend, confirmed, self._rules):
                return LoyaltySnapshot(customer_id, spend, confirmed, current, current)

            new_tier = calculate_tier(spend, confirmed, self._rules)
            customer.loyalty_tier = new_tier
            self._store.save_customer(customer)
            logger.info(
                "Upgraded customer %s from %s to %s. Lifetime spend: %s, confirmed orders: %s",
                customer_id, current.value, new_tier.value, spend, confirmed,
            )
            return LoyaltySnapshot(customer_id, spend, confirmed, current, new_tier)
