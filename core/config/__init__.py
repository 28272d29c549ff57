"""
Shopdesk Core Config — Public API
=================================
Settlement policy: tax, cash ceiling, loyalty discount and tier tables.
"""

from core.config.rules import (
    DEFAULT_SETTLEMENT_RULES,
    TIER_MATCH_ALL,
    TIER_MATCH_ANY,
    LoyaltyDiscountRule,
    SettlementRules,
    TierThreshold,
    load_settlement_rules,
    settlement_rules_from_mapping,
)

__all__ = [
    "LoyaltyDiscountRule",
    "TierThreshold",
    "SettlementRules",
    "DEFAULT_SETTLEMENT_RULES",
    "TIER_MATCH_ANY",
    "TIER_MATCH_ALL",
    "load_settlement_rules",
    "settlement_rules_from_mapping",
]
