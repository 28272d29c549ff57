"""
Shopdesk Core Config — Settlement Rules
=======================================
Doctrine: no tax rates, ceilings or tier thresholds hardcoded in
engine logic. Engines receive a SettlementRules instance; the
defaults below are the shop's configured policy and can be
overridden from Django settings (SHOPDESK_SETTLEMENT).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from core.primitives.money import HUNDRED, to_decimal
from core.store.records import CustomerTier


TIER_MATCH_ANY = "ANY"  # confirmed orders OR lifetime spend
TIER_MATCH_ALL = "ALL"  # confirmed orders AND lifetime spend
VALID_TIER_MATCH_MODES = frozenset({TIER_MATCH_ANY, TIER_MATCH_ALL})


# ══════════════════════════════════════════════════════════════
# LOYALTY DISCOUNT RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoyaltyDiscountRule:
    """
    Tier discount: `percent` of the subtotal, granted only when the
    subtotal reaches `min_subtotal`.
    """

    tier: CustomerTier
    min_subtotal: Decimal
    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_subtotal", to_decimal(self.min_subtotal))
        object.__setattr__(self, "percent", to_decimal(self.percent))
        if self.min_subtotal < 0:
            raise ValueError("min_subtotal must be non-negative.")
        if not 0 <= self.percent <= HUNDRED:
            raise ValueError(f"percent must be between 0 and 100, got {self.percent}.")


# ══════════════════════════════════════════════════════════════
# TIER THRESHOLD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TierThreshold:
    """Minimum confirmed orders / lifetime spend to reach a tier."""

    tier: CustomerTier
    min_confirmed_orders: int
    min_lifetime_spend: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "min_lifetime_spend", to_decimal(self.min_lifetime_spend),
        )
        if self.min_confirmed_orders < 0:
            raise ValueError("min_confirmed_orders must be non-negative.")
        if self.min_lifetime_spend < 0:
            raise ValueError("min_lifetime_spend must be non-negative.")

    def is_met(self, lifetime_spend: Decimal, confirmed_orders: int, mode: str) -> bool:
        by_orders = confirmed_orders >= self.min_confirmed_orders
        by_spend = lifetime_spend >= self.min_lifetime_spend
        if mode == TIER_MATCH_ALL:
            return by_orders and by_spend
        return by_orders or by_spend


# ══════════════════════════════════════════════════════════════
# SETTLEMENT RULES
# ══════════════════════════════════════════════════════════════

DEFAULT_LOYALTY_DISCOUNTS: Tuple[LoyaltyDiscountRule, ...] = (
    LoyaltyDiscountRule(CustomerTier.SILVER, Decimal("500"), Decimal("5")),
    LoyaltyDiscountRule(CustomerTier.GOLD, Decimal("800"), Decimal("10")),
    LoyaltyDiscountRule(CustomerTier.PLATINUM, Decimal("1200"), Decimal("15")),
)

DEFAULT_TIER_THRESHOLDS: Tuple[TierThreshold, ...] = (
    TierThreshold(CustomerTier.SILVER, 3, Decimal("1000")),
    TierThreshold(CustomerTier.GOLD, 10, Decimal("5000")),
    TierThreshold(CustomerTier.PLATINUM, 20, Decimal("15000")),
)


@dataclass(frozen=True)
class SettlementRules:
    """
    Pricing and settlement policy.

    tax_rate_percent:  VAT applied after discounts (20 means 20%).
    cash_ceiling:      Largest single CASH payment accepted.
    loyalty_discounts: One rule per tier; tiers without a rule get 0%.
    tier_thresholds:   Tier acquisition table.
    tier_match_mode:   ANY (orders OR spend) | ALL (orders AND spend).
    """

    tax_rate_percent: Decimal = Decimal("20")
    cash_ceiling: Decimal = Decimal("20000")
    loyalty_discounts: Tuple[LoyaltyDiscountRule, ...] = DEFAULT_LOYALTY_DISCOUNTS
    tier_thresholds: Tuple[TierThreshold, ...] = DEFAULT_TIER_THRESHOLDS
    tier_match_mode: str = TIER_MATCH_ANY
    _discount_index: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tax_rate_percent", to_decimal(self.tax_rate_percent))
        object.__setattr__(self, "cash_ceiling", to_decimal(self.cash_ceiling))

        if not 0 <= self.tax_rate_percent <= HUNDRED:
            raise ValueError(
                f"tax_rate_percent must be between 0 and 100, got {self.tax_rate_percent}."
            )
        if self.cash_ceiling <= 0:
            raise ValueError("cash_ceiling must be positive.")
        if self.tier_match_mode not in VALID_TIER_MATCH_MODES:
            raise ValueError(
                f"tier_match_mode '{self.tier_match_mode}' not valid. "
                f"Must be one of: {sorted(VALID_TIER_MATCH_MODES)}"
            )

        index = {}
        for rule in self.loyalty_discounts:
            if rule.tier in index:
                raise ValueError(f"Duplicate loyalty discount rule for {rule.tier.value}.")
            index[rule.tier] = rule
        object.__setattr__(self, "_discount_index", index)

        tiers = [t.tier for t in self.tier_thresholds]
        if len(set(tiers)) != len(tiers):
            raise ValueError("tier_thresholds must list each tier at most once.")
        if CustomerTier.BASIC in tiers:
            raise ValueError("BASIC is the floor tier and takes no threshold.")

    @property
    def tax_rate(self) -> Decimal:
        """Tax rate as a fraction (0.20 for 20%)."""
        return self.tax_rate_percent / HUNDRED

    def discount_rule_for(self, tier: CustomerTier) -> Optional[LoyaltyDiscountRule]:
        return self._discount_index.get(tier)

    def thresholds_highest_first(self) -> Tuple[TierThreshold, ...]:
        return tuple(sorted(self.tier_thresholds, key=lambda t: t.tier.rank, reverse=True))


DEFAULT_SETTLEMENT_RULES = SettlementRules()


# ══════════════════════════════════════════════════════════════
# LOADING
# ══════════════════════════════════════════════════════════════

def settlement_rules_from_mapping(overrides: Mapping[str, Any]) -> SettlementRules:
    """
    Build rules from a plain mapping, e.g.

        {
            "TAX_RATE_PERCENT": "20",
            "CASH_CEILING": "20000",
            "TIER_MATCH_MODE": "ANY",
            "LOYALTY_DISCOUNTS": {"SILVER": ["500", "5"], ...},
            "TIER_THRESHOLDS": {"SILVER": [3, "1000"], ...},
        }

    Keys not present keep their defaults.
    """
    rules = DEFAULT_SETTLEMENT_RULES
    changes: dict[str, Any] = {}

    if "TAX_RATE_PERCENT" in overrides:
        changes["tax_rate_percent"] = to_decimal(overrides["TAX_RATE_PERCENT"])
    if "CASH_CEILING" in overrides:
        changes["cash_ceiling"] = to_decimal(overrides["CASH_CEILING"])
    if "TIER_MATCH_MODE" in overrides:
        changes["tier_match_mode"] = str(overrides["TIER_MATCH_MODE"]).upper()
    if "LOYALTY_DISCOUNTS" in overrides:
        changes["loyalty_discounts"] = tuple(
            LoyaltyDiscountRule(CustomerTier(tier), min_subtotal, percent)
            for tier, (min_subtotal, percent) in sorted(
                overrides["LOYALTY_DISCOUNTS"].items()
            )
        )
    if "TIER_THRESHOLDS" in overrides:
        changes["tier_thresholds"] = tuple(
            TierThreshold(CustomerTier(tier), int(orders), spend)
            for tier, (orders, spend) in sorted(overrides["TIER_THRESHOLDS"].items())
        )

    return replace(rules, **changes) if changes else rules


def load_settlement_rules() -> SettlementRules:
    """Rules from Django settings when configured, defaults otherwise."""
    from django.conf import settings

    if not settings.configured:
        return DEFAULT_SETTLEMENT_RULES
    overrides = getattr(settings, "SHOPDESK_SETTLEMENT", None) or {}
    return settlement_rules_from_mapping(overrides)
