"""
Shopdesk Core Errors — Rejection Model
======================================
Structured reasons produced by engine policies.

A policy inspects a request against current state and returns
either None (allowed) or a RejectionReason. The calling service
turns the reason into the matching ShopError.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Traceable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Type

from core.errors.exceptions import ShopError


@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a refused request.

    Fields:
        code:        Machine-readable rejection code (e.g. 'CASH_CEILING_EXCEEDED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that refused.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


def raise_if_rejected(
    reason: Optional[RejectionReason],
    error_type: Type[ShopError],
) -> None:
    """Raise `error_type` carrying the rejection, if there is one."""
    if reason is None:
        return
    raise error_type(
        reason.message,
        code=reason.code,
        details={"policy_name": reason.policy_name},
    )


class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Order basket ──────────────────────────────────────────
    EMPTY_ORDER = "EMPTY_ORDER"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"

    # ── Order state ───────────────────────────────────────────
    ORDER_NOT_PENDING = "ORDER_NOT_PENDING"
    ORDER_NOT_PAID = "ORDER_NOT_PAID"
    ORDER_HAS_PAYMENTS = "ORDER_HAS_PAYMENTS"
    ORDER_CLOSED = "ORDER_CLOSED"

    # ── Payment ───────────────────────────────────────────────
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CASH_CEILING_EXCEEDED = "CASH_CEILING_EXCEEDED"
    AMOUNT_EXCEEDS_REMAINING = "AMOUNT_EXCEEDS_REMAINING"
    FINANCIAL_FIELD_IMMUTABLE = "FINANCIAL_FIELD_IMMUTABLE"
    PAYMENT_NOT_REMOVABLE = "PAYMENT_NOT_REMOVABLE"
    PAYMENT_NUMBER_TAKEN = "PAYMENT_NUMBER_TAKEN"
    INVALID_PRECISION = "INVALID_PRECISION"

    # ── Coupon ────────────────────────────────────────────────
    COUPON_ALREADY_USED = "COUPON_ALREADY_USED"
    DUPLICATE_COUPON_CODE = "DUPLICATE_COUPON_CODE"
    COUPON_REFERENCED = "COUPON_REFERENCED"

    # ── Catalog / customers ───────────────────────────────────
    DUPLICATE_SKU = "DUPLICATE_SKU"
    CUSTOMER_HAS_ORDERS = "CUSTOMER_HAS_ORDERS"
