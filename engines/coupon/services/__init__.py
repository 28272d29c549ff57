"""
Shopdesk Coupon Engine — Coupon Ledger
======================================
Coupons are single-use. A coupon is only *validated* when an order
references it; it is *consumed* when that order receives its first
payment. Consumption sets the consumed flag; the row is kept so the
order keeps its reference and a second consume always fails.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.context import Capability, OperatorContext, require_capability
from core.errors import (
    ConflictError,
    NotFoundError,
    ReasonCode,
    raise_if_rejected,
)
from core.store.protocol import ShopStore
from core.store.records import Coupon
from core.time import Clock, SystemClock
from engines.coupon.commands import CouponCreateRequest, CouponUpdateRequest
from engines.coupon.policies import (
    coupon_code_must_be_unique_policy,
    coupon_must_be_available_policy,
)

logger = logging.getLogger("shopdesk.coupons")


class CouponLedger:
    def __init__(self, *, store: ShopStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()

    # ── settlement path ───────────────────────────────────────

    def validate(self, code: str) -> Coupon:
        """Return the coupon for `code` if it can still be used."""
        coupon = self._store.find_coupon_by_code(code)
        if coupon is None:
            raise NotFoundError("Coupon", code, field="code")
        raise_if_rejected(coupon_must_be_available_policy(coupon), ConflictError)
        return coupon

    def consume(self, code: str) -> Coupon:
        with self._store.unit_of_work():
            found = self._store.find_coupon_by_code(code)
            if found is None:
                raise NotFoundError("Coupon", code, field="code")
            return self.consume_by_id(found.coupon_id)

    def consume_by_id(self, coupon_id: int) -> Coupon:
        with self._store.unit_of_work():
            coupon = self._store.lock_coupon(coupon_id)
            if coupon is None:
                raise NotFoundError("Coupon", coupon_id)
            raise_if_rejected(coupon_must_be_available_policy(coupon), ConflictError)
            return self._mark_consumed(coupon)

    def use_coupon(
        self, code: str, *, context: Optional[OperatorContext] = None,
    ) -> Coupon:
        require_capability(context, Capability.COUPON_USE)
        return self.consume(code)

    def _mark_consumed(self, coupon: Coupon) -> Coupon:
        coupon.consumed = True
        saved = self._store.save_coupon(coupon)
        logger.info("Coupon %s consumed", saved.code)
        return saved

    # ── administration ────────────────────────────────────────

    def create_coupon(
        self, request: CouponCreateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Coupon:
        require_capability(context, Capability.COUPON_MANAGE)
        with self._store.unit_of_work():
            raise_if_rejected(
                coupon_code_must_be_unique_policy(
                    request.code, self._store.find_coupon_by_code(request.code),
                ),
                ConflictError,
            )
            coupon = self._store.save_coupon(Coupon(
                code=request.code,
                discount_percentage=request.discount_percentage,
                created_at=self._clock.now_utc(),
            ))
        logger.info(
            "Coupon %s created (%s%%)", coupon.code, coupon.discount_percentage,
        )
        return coupon

    def get_coupon(
        self, coupon_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Coupon:
        require_capability(context, Capability.COUPON_READ)
        coupon = self._store.get_coupon(coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_id)
        return coupon

    def get_coupon_by_code(
        self, code: str, *, context: Optional[OperatorContext] = None,
    ) -> Coupon:
        require_capability(context, Capability.COUPON_READ)
        coupon = self._store.find_coupon_by_code(code)
        if coupon is None:
            raise NotFoundError("Coupon", code, field="code")
        return coupon

    def list_coupons(self, *, context: Optional[OperatorContext] = None) -> list[Coupon]:
        require_capability(context, Capability.COUPON_READ)
        return self._store.list_coupons()

    def update_coupon(
        self, request: CouponUpdateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Coupon:
        require_capability(context, Capability.COUPON_MANAGE)
        with self._store.unit_of_work():
            coupon = self._store.lock_coupon(request.coupon_id)
            if coupon is None:
                raise NotFoundError("Coupon", request.coupon_id)
            if request.code is not None and request.code != coupon.code:
                raise_if_rejected(
                    coupon_code_must_be_unique_policy(
                        request.code,
                        self._store.find_coupon_by_code(request.code),
                        coupon_id=coupon.coupon_id,
                    ),
                    ConflictError,
                )
                coupon.code = request.code
            if request.discount_percentage is not None:
                coupon.discount_percentage = request.discount_percentage
            return self._store.save_coupon(coupon)

    def delete_coupon(
        self, coupon_id: int, *, context: Optional[OperatorContext] = None,
    ) -> None:
        require_capability(context, Capability.COUPON_MANAGE)
        with self._store.unit_of_work():
            if self._store.get_coupon(coupon_id) is None:
                raise NotFoundError("Coupon", coupon_id)
            if any(o.coupon_id == coupon_id for o in self._store.list_orders()):
                raise ConflictError(
                    f"Coupon {coupon_id} is referenced by an order and cannot be deleted.",
                    code=ReasonCode.COUPON_REFERENCED,
                )
            self._store.delete_coupon(coupon_id)
        logger.info("Coupon %s deleted", coupon_id)
