"""
Tests for core.config — SettlementRules validation and loading.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.config.rules import (
    DEFAULT_SETTLEMENT_RULES,
    TIER_MATCH_ALL,
    LoyaltyDiscountRule,
    SettlementRules,
    TierThreshold,
    load_settlement_rules,
    settlement_rules_from_mapping,
)
from core.store.records import CustomerTier


class TestDefaults:
    def test_default_values(self):
        rules = DEFAULT_SETTLEMENT_RULES
        assert rules.tax_rate_percent == Decimal("20")
        assert rules.tax_rate == Decimal("0.2")
        assert rules.cash_ceiling == Decimal("20000")
        assert rules.tier_match_mode == "ANY"

    def test_discount_lookup(self):
        rule = DEFAULT_SETTLEMENT_RULES.discount_rule_for(CustomerTier.GOLD)
        assert rule.min_subtotal == Decimal("800")
        assert rule.percent == Decimal("10")
        assert DEFAULT_SETTLEMENT_RULES.discount_rule_for(CustomerTier.BASIC) is None

    def test_thresholds_highest_first(self):
        tiers = [t.tier for t in DEFAULT_SETTLEMENT_RULES.thresholds_highest_first()]
        assert tiers == [CustomerTier.PLATINUM, CustomerTier.GOLD, CustomerTier.SILVER]


class TestValidation:
    def test_rejects_tax_above_hundred(self):
        with pytest.raises(ValueError):
            SettlementRules(tax_rate_percent=Decimal("101"))

    def test_rejects_non_positive_ceiling(self):
        with pytest.raises(ValueError):
            SettlementRules(cash_ceiling=Decimal("0"))

    def test_rejects_unknown_match_mode(self):
        with pytest.raises(ValueError, match="tier_match_mode"):
            SettlementRules(tier_match_mode="SOME")

    def test_rejects_duplicate_discount_tier(self):
        rule = LoyaltyDiscountRule(CustomerTier.SILVER, Decimal("1"), Decimal("1"))
        with pytest.raises(ValueError, match="Duplicate"):
            SettlementRules(loyalty_discounts=(rule, rule))

    def test_rejects_basic_threshold(self):
        with pytest.raises(ValueError, match="BASIC"):
            SettlementRules(tier_thresholds=(TierThreshold(CustomerTier.BASIC, 0, Decimal("0")),))

    def test_rejects_float_percent(self):
        with pytest.raises(TypeError):
            LoyaltyDiscountRule(CustomerTier.GOLD, Decimal("1"), 10.0)

    def test_threshold_modes(self):
        threshold = TierThreshold(CustomerTier.SILVER, 3, Decimal("1000"))
        assert threshold.is_met(Decimal("1000"), 0, "ANY")
        assert not threshold.is_met(Decimal("1000"), 0, TIER_MATCH_ALL)
        assert threshold.is_met(Decimal("1000"), 3, TIER_MATCH_ALL)


class TestLoading:
    def test_empty_mapping_keeps_defaults(self):
        assert settlement_rules_from_mapping({}) is DEFAULT_SETTLEMENT_RULES

    def test_overrides(self):
        rules = settlement_rules_from_mapping({
            "TAX_RATE_PERCENT": "10",
            "CASH_CEILING": "5000",
            "TIER_MATCH_MODE": "all",
            "LOYALTY_DISCOUNTS": {"GOLD": ["100", "7.5"]},
            "TIER_THRESHOLDS": {"GOLD": [2, "300"]},
        })
        assert rules.tax_rate_percent == Decimal("10")
        assert rules.cash_ceiling == Decimal("5000")
        assert rules.tier_match_mode == TIER_MATCH_ALL
        assert rules.discount_rule_for(CustomerTier.SILVER) is None
        assert rules.discount_rule_for(CustomerTier.GOLD).percent == Decimal("7.5")
        assert rules.tier_thresholds == (TierThreshold(CustomerTier.GOLD, 2, Decimal("300")),)

    def test_unknown_tier_rejected(self):
        with pytest.raises(ValueError):
            settlement_rules_from_mapping({"LOYALTY_DISCOUNTS": {"DIAMOND": ["1", "1"]}})

    def test_load_from_django_settings(self, settings):
        settings.SHOPDESK_SETTLEMENT = {"CASH_CEILING": "15000"}
        rules = load_settlement_rules()
        assert rules.cash_ceiling == Decimal("15000")
        assert rules.tax_rate_percent == Decimal("20")
