"""
Shopdesk Pricing Engine — Order Price Calculator
================================================
Turns a basket of (product, quantity) lines, a customer tier and an
optional coupon rate into a priced quote.

RULES (NON-NEGOTIABLE):
- Pure: no store access, no clock, no side effects
- Decimal arithmetic only; every amount quantized half-up to 2 places
- Loyalty discount = tier % of subtotal, only at or above the tier's
  minimum subtotal; tiers without a rule get 0%
- Coupon discount = coupon % of subtotal
- Loyalty and coupon discounts are additive, never compounded
- Tax applies to (subtotal − total discount), never to the subtotal
- total = (subtotal − total discount) + tax

Stock is compared against the product's live stock at evaluation
time. Nothing is reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Sequence, Tuple

from core.config.rules import DEFAULT_SETTLEMENT_RULES, SettlementRules
from core.errors import ReasonCode, RejectionReason, ValidationError, raise_if_rejected
from core.primitives.money import ZERO, percent_of, quantize, to_decimal
from core.store.records import CustomerTier, Product


# ══════════════════════════════════════════════════════════════
# INPUT / OUTPUT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BasketLine:
    product: Product
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


@dataclass(frozen=True)
class PriceQuote:
    lines: Tuple[PricedLine, ...]
    subtotal: Decimal
    loyalty_percent: Decimal
    loyalty_discount: Decimal
    coupon_percent: Decimal
    coupon_discount: Decimal
    total_discount: Decimal
    amount_after_discount: Decimal
    tax_rate_percent: Decimal
    tax: Decimal
    total: Decimal


# ══════════════════════════════════════════════════════════════
# BASKET VALIDATION
# ══════════════════════════════════════════════════════════════

def basket_rejection(lines: Sequence[BasketLine]) -> Optional[RejectionReason]:
    """
    Reject an empty basket, non-positive quantities, soft-deleted
    products, or a requested quantity above live stock. Quantities of
    the same product on several lines are summed before the stock check.
    """
    if not lines:
        return RejectionReason(
            code=ReasonCode.EMPTY_ORDER,
            message="Order must contain at least one item.",
            policy_name="basket_rejection",
        )

    requested: Dict[int, int] = {}
    products: Dict[int, Product] = {}
    for line in lines:
        product = line.product
        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity <= 0:
            return RejectionReason(
                code=ReasonCode.INVALID_QUANTITY,
                message=f"Quantity for product {product.product_id} must be a positive integer.",
                policy_name="basket_rejection",
            )
        if product.deleted:
            return RejectionReason(
                code=ReasonCode.PRODUCT_UNAVAILABLE,
                message=f"Product {product.product_id} ({product.name}) is no longer sold.",
                policy_name="basket_rejection",
            )
        requested[product.product_id] = requested.get(product.product_id, 0) + line.quantity
        products[product.product_id] = product

    for product_id, quantity in requested.items():
        product = products[product_id]
        if product.stock < quantity:
            return RejectionReason(
                code=ReasonCode.INSUFFICIENT_STOCK,
                message=(
                    f"Insufficient stock for product: {product.name}. "
                    f"Available: {product.stock}, Requested: {quantity}"
                ),
                policy_name="basket_rejection",
            )
    return None


# ══════════════════════════════════════════════════════════════
# DISCOUNTS
# ══════════════════════════════════════════════════════════════

def loyalty_discount_percent(
    tier: CustomerTier,
    subtotal: Decimal,
    rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
) -> Decimal:
    """Percent (0-100) of the subtotal granted to `tier`."""
    rule = rules.discount_rule_for(tier)
    if rule is None or subtotal < rule.min_subtotal:
        return ZERO
    return rule.percent


def price_lines(lines: Sequence[BasketLine]) -> Tuple[PricedLine, ...]:
    priced = []
    for line in lines:
        unit_price = quantize(line.product.unit_price)
        priced.append(PricedLine(
            product_id=line.product.product_id,
            product_name=line.product.name,
            unit_price=unit_price,
            quantity=line.quantity,
            line_total=quantize(unit_price * line.quantity),
        ))
    return tuple(priced)


# ══════════════════════════════════════════════════════════════
# QUOTE
# ══════════════════════════════════════════════════════════════

def quote_order(
    lines: Sequence[BasketLine],
    tier: CustomerTier,
    coupon_percent: Optional[Decimal] = None,
    rules: SettlementRules = DEFAULT_SETTLEMENT_RULES,
) -> PriceQuote:
    """
    Price a basket.

    Raises ValidationError when the basket is empty, a quantity is not
    positive, a product is soft-deleted, or stock is short.
    """
    raise_if_rejected(basket_rejection(lines), ValidationError)

    priced = price_lines(lines)
    subtotal = quantize(sum((p.line_total for p in priced), ZERO))

    loyalty_percent = loyalty_discount_percent(tier, subtotal, rules)
    loyalty_discount = percent_of(subtotal, loyalty_percent)

    coupon_percent = ZERO if coupon_percent is None else to_decimal(coupon_percent)
    coupon_discount = percent_of(subtotal, coupon_percent)

    # Never discount below zero (e.g. 15% loyalty + 100% coupon).
    total_discount = min(loyalty_discount + coupon_discount, subtotal)
    amount_after_discount = subtotal - total_discount
    tax = percent_of(amount_after_discount, rules.tax_rate_percent)
    total = quantize(amount_after_discount + tax)

    return PriceQuote(
        lines=priced,
        subtotal=subtotal,
        loyalty_percent=loyalty_percent,
        loyalty_discount=loyalty_discount,
        coupon_percent=coupon_percent,
        coupon_discount=coupon_discount,
        total_discount=total_discount,
        amount_after_discount=amount_after_discount,
        tax_rate_percent=rules.tax_rate_percent,
        tax=tax,
        total=total,
    )
