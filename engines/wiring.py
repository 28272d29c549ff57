"""
Shopdesk Engines — Service Wiring
=================================
Builds one consistent set of services over a single store, clock and
rule set. Rules default to settings.SHOPDESK_SETTLEMENT (through
core.config.load_settlement_rules), the store to the Django-backed
DbShopStore.

Every service shares the same coupon ledger and loyalty evaluator, so
settlement and order confirmation apply the same rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.config.rules import SettlementRules, load_settlement_rules
from core.store.protocol import ShopStore
from core.time import Clock, SystemClock
from engines.catalog.services import CatalogService
from engines.coupon.services import CouponLedger
from engines.customer.services import CustomerService
from engines.inventory.services import StockLedger
from engines.loyalty.services import LoyaltyService
from engines.orders.services import OrderLifecycleService
from engines.payments.services import PaymentSettlementService

logger = logging.getLogger("shopdesk.wiring")


@dataclass(frozen=True)
class ShopServices:
    store: ShopStore
    rules: SettlementRules
    catalog: CatalogService
    customers: CustomerService
    coupons: CouponLedger
    stock: StockLedger
    loyalty: LoyaltyService
    orders: OrderLifecycleService
    payments: PaymentSettlementService


def build_shop_services(
    store: Optional[ShopStore] = None,
    *,
    rules: Optional[SettlementRules] = None,
    clock: Optional[Clock] = None,
) -> ShopServices:
    if store is None:
        from core.shop_store.db_store import DbShopStore

        store = DbShopStore()
    rules = rules if rules is not None else load_settlement_rules()
    clock = clock or SystemClock()

    coupons = CouponLedger(store=store, clock=clock)
    stock = StockLedger(store=store)
    loyalty = LoyaltyService(store=store, rules=rules)
    orders = OrderLifecycleService(
        store=store, rules=rules, clock=clock, coupons=coupons, loyalty=loyalty,
    )
    payments = PaymentSettlementService(
        store=store, rules=rules, clock=clock,
        stock=stock, coupons=coupons, loyalty=loyalty, orders=orders,
    )
    logger.debug(
        "Wired services: tax %s%%, cash ceiling %s, tier match %s",
        rules.tax_rate_percent, rules.cash_ceiling, rules.tier_match_mode,
    )
    return ShopServices(
        store=store,
        rules=rules,
        catalog=CatalogService(store=store),
        customers=CustomerService(store=store, clock=clock),
        coupons=coupons,
        stock=stock,
        loyalty=loyalty,
        orders=orders,
        payments=payments,
    )
