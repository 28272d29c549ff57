"""
Shopdesk Coupon Engine — Policies
"""

from __future__ import annotations

from typing import Optional

from core.errors import ReasonCode, RejectionReason
from core.store.records import Coupon


def coupon_must_be_available_policy(coupon: Coupon) -> Optional[RejectionReason]:
    if coupon.consumed:
        return RejectionReason(
            code=ReasonCode.COUPON_ALREADY_USED,
            message=f"Coupon '{coupon.code}' has already been used.",
            policy_name="coupon_must_be_available_policy",
        )
    return None


def coupon_code_must_be_unique_policy(
    code: str, existing: Optional[Coupon], *, coupon_id: Optional[int] = None,
) -> Optional[RejectionReason]:
    if existing is None or existing.coupon_id == coupon_id:
        return None
    return RejectionReason(
        code=ReasonCode.DUPLICATE_COUPON_CODE,
        message=f"Coupon code already exists: {code}",
        policy_name="coupon_code_must_be_unique_policy",
    )
