"""
Shopdesk Pricing Engine Test Suite
==================================
Tests verify:
- Subtotal, discount, tax and total arithmetic (Decimal, half-up)
- Loyalty discount thresholds per tier
- Coupon and loyalty discounts are additive, never compounded
- Basket validation (empty, quantity, soft-deleted, stock)
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.config.rules import SettlementRules
from core.errors import ReasonCode, ValidationError
from core.store.records import CustomerTier, Product
from engines.pricing.calculator import (
    BasketLine,
    basket_rejection,
    loyalty_discount_percent,
    quote_order,
)


def product(pid=1, price="100.00", stock=10, deleted=False, name=None):
    return Product(
        product_id=pid,
        sku=f"SKU-{pid}",
        name=name or f"Product {pid}",
        unit_price=Decimal(price),
        stock=stock,
        deleted=deleted,
    )


# ══════════════════════════════════════════════════════════════
# ARITHMETIC
# ══════════════════════════════════════════════════════════════

class TestQuoteArithmetic:
    def test_basic_order_two_units_of_hundred(self):
        quote = quote_order([BasketLine(product(), 2)], CustomerTier.BASIC)
        assert quote.subtotal == Decimal("200.00")
        assert quote.loyalty_discount == Decimal("0.00")
        assert quote.coupon_discount == Decimal("0.00")
        assert quote.total_discount == Decimal("0.00")
        assert quote.amount_after_discount == Decimal("200.00")
        assert quote.tax == Decimal("40.00")
        assert quote.total == Decimal("240.00")

    def test_lines_are_priced_individually(self):
        quote = quote_order(
            [BasketLine(product(1, "19.99"), 3), BasketLine(product(2, "5.50"), 2)],
            CustomerTier.BASIC,
        )
        assert [l.line_total for l in quote.lines] == [Decimal("59.97"), Decimal("11.00")]
        assert quote.subtotal == Decimal("70.97")
        assert quote.tax == Decimal("14.19")
        assert quote.total == Decimal("85.16")

    def test_tax_applies_after_discount(self):
        quote = quote_order(
            [BasketLine(product(price="300.00"), 2)],
            CustomerTier.SILVER,
        )
        assert quote.subtotal == Decimal("600.00")
        assert quote.loyalty_discount == Decimal("30.00")
        assert quote.amount_after_discount == Decimal("570.00")
        assert quote.tax == Decimal("114.00")
        assert quote.total == Decimal("684.00")

    def test_coupon_discount_rounds_half_up(self):
        quote = quote_order(
            [BasketLine(product(price="33.33"), 1)],
            CustomerTier.BASIC,
            coupon_percent=Decimal("15"),
        )
        # 33.33 × 15% = 4.9995
        assert quote.coupon_discount == Decimal("5.00")
        assert quote.amount_after_discount == Decimal("28.33")

    def test_custom_tax_rate(self):
        rules = SettlementRules(tax_rate_percent=Decimal("10"))
        quote = quote_order([BasketLine(product(), 1)], CustomerTier.BASIC, rules=rules)
        assert quote.tax_rate_percent == Decimal("10")
        assert quote.total == Decimal("110.00")

    def test_amounts_are_decimals(self):
        quote = quote_order([BasketLine(product(), 1)], CustomerTier.BASIC)
        for value in (quote.subtotal, quote.tax, quote.total, quote.total_discount):
            assert isinstance(value, Decimal)


# ══════════════════════════════════════════════════════════════
# DISCOUNTS
# ══════════════════════════════════════════════════════════════

class TestLoyaltyDiscount:
    @pytest.mark.parametrize("tier,subtotal,expected", [
        (CustomerTier.BASIC, "5000", "0"),
        (CustomerTier.SILVER, "499.99", "0"),
        (CustomerTier.SILVER, "500", "5"),
        (CustomerTier.GOLD, "799.99", "0"),
        (CustomerTier.GOLD, "800", "10"),
        (CustomerTier.PLATINUM, "1199.99", "0"),
        (CustomerTier.PLATINUM, "1200", "15"),
    ])
    def test_threshold_table(self, tier, subtotal, expected):
        assert loyalty_discount_percent(tier, Decimal(subtotal)) == Decimal(expected)

    def test_loyalty_and_coupon_are_additive(self):
        quote = quote_order(
            [BasketLine(product(price="500.00"), 2)],
            CustomerTier.GOLD,
            coupon_percent=Decimal("10"),
        )
        assert quote.loyalty_discount == Decimal("100.00")
        assert quote.coupon_discount == Decimal("100.00")
        assert quote.total_discount == Decimal("200.00")
        assert quote.amount_after_discount == Decimal("800.00")
        assert quote.total == Decimal("960.00")

    def test_total_discount_never_exceeds_subtotal(self):
        quote = quote_order(
            [BasketLine(product(price="1200.00"), 1)],
            CustomerTier.PLATINUM,
            coupon_percent=Decimal("100"),
        )
        assert quote.total_discount == Decimal("1200.00")
        assert quote.amount_after_discount == Decimal("0.00")
        assert quote.total == Decimal("0.00")


# ══════════════════════════════════════════════════════════════
# BASKET VALIDATION
# ══════════════════════════════════════════════════════════════

class TestBasketValidation:
    def test_empty_basket_rejected(self):
        with pytest.raises(ValidationError) as exc:
            quote_order([], CustomerTier.BASIC)
        assert exc.value.code == ReasonCode.EMPTY_ORDER

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantity_rejected(self, qty):
        with pytest.raises(ValidationError) as exc:
            quote_order([BasketLine(product(), qty)], CustomerTier.BASIC)
        assert exc.value.code == ReasonCode.INVALID_QUANTITY

    def test_soft_deleted_product_rejected(self):
        with pytest.raises(ValidationError) as exc:
            quote_order([BasketLine(product(deleted=True), 1)], CustomerTier.BASIC)
        assert exc.value.code == ReasonCode.PRODUCT_UNAVAILABLE

    def test_quantity_above_stock_rejected(self):
        with pytest.raises(ValidationError) as exc:
            quote_order([BasketLine(product(stock=1), 2)], CustomerTier.BASIC)
        assert exc.value.code == ReasonCode.INSUFFICIENT_STOCK
        assert exc.value.details["policy_name"] == "basket_rejection"

    def test_quantities_of_same_product_are_summed(self):
        p = product(stock=3)
        reason = basket_rejection([BasketLine(p, 2), BasketLine(p, 2)])
        assert reason is not None
        assert reason.code == ReasonCode.INSUFFICIENT_STOCK

    def test_exact_stock_is_enough(self):
        assert basket_rejection([BasketLine(product(stock=2), 2)]) is None
