"""
Shopdesk Loyalty Engine — Tier Rules
====================================
Pure mapping (lifetime spend, confirmed orders) → CustomerTier.

RULES (NON-NEGOTIABLE):
- Tiers are totally ordered: BASIC < SILVER < GOLD < PLATINUM
- Thresholds are checked highest tier first; the first match wins
- BASIC is the floor and needs no threshold
- An upgrade means a strictly higher rank; equal or lower is no upgrade
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from core.config.rules import DEFAULT_SETTLEMENT_RULES, SettlementRules
from core.primitives.money import ZERO, to_decimal
from core.store.records import CustomerTier


def calculate_tier(
    lifetime_spend: Optional[Decimal],
    confirmed_orders: int,
    rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
) -> CustomerTier:
    spend = ZERO if lifetime_spend is None else to_decimal(lifetime_spend)
    for threshold in rules.thresholds_highest_first():
        if threshold.is_met(spend, confirmed_orders, rules.tier_match_mode):
            return threshold.tier
    return CustomerTier.BASIC


def needs_upgrade(
    current: Optional[CustomerTier],
    lifetime_spend: Optional[Decimal],
    confirmed_orders: int,
    rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
) -> bool:
    current = current or CustomerTier.BASIC
    computed = calculate_tier(lifetime_spend, confirmed_orders, rules)
    return computed.rank > current.rank
