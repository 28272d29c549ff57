"""
Shopdesk Inventory Engine — Policies
"""

from __future__ import annotations

from typing import Optional

from core.errors import ReasonCode, RejectionReason
from core.store.records import Product


def stock_must_cover_quantity_policy(
    product: Product, quantity: int,
) -> Optional[RejectionReason]:
    if product.stock < quantity:
        return RejectionReason(
            code=ReasonCode.INSUFFICIENT_STOCK,
            message=(
                f"Insufficient stock for product: {product.name}. "
                f"Available: {product.stock}, Requested: {quantity}"
            ),
            policy_name="stock_must_cover_quantity_policy",
        )
    return None
