"""
Shopdesk Payments Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from core.errors import ReasonCode, ValidationError
from core.primitives.money import quantize, to_decimal
from core.store.records import (
    PAYMENT_CORRECTABLE_FIELDS,
    PaymentMethod,
    PaymentStatus,
)


def _enum(enum_type, value, name: str):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).upper())
    except ValueError:
        raise ValidationError(
            f"{name} '{value}' not valid. "
            f"Must be one of: {sorted(m.value for m in enum_type)}"
        ) from None


def _optional_date(value, name: str) -> None:
    if value is not None and not isinstance(value, date):
        raise ValidationError(f"{name} must be a date.")


@dataclass(frozen=True)
class CreatePaymentRequest:
    order_id: int
    amount: Decimal
    method: PaymentMethod
    reference: str = ""
    payment_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.PENDING
    bank_name: Optional[str] = None
    due_date: Optional[date] = None
    collection_date: Optional[date] = None

    def __post_init__(self):
        if not isinstance(self.order_id, int) or self.order_id <= 0:
            raise ValidationError("order_id must be a positive integer.")
        try:
            raw = to_decimal(self.amount)
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc), code=ReasonCode.INVALID_AMOUNT) from exc
        amount = quantize(raw)
        if amount != raw:
            raise ValidationError(
                f"Payment amount {raw} has fractions of a cent.",
                code=ReasonCode.INVALID_PRECISION,
            )
        if amount <= 0:
            raise ValidationError(
                "Payment amount must be positive.", code=ReasonCode.INVALID_AMOUNT,
            )
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "method", _enum(PaymentMethod, self.method, "method"))
        object.__setattr__(self, "status", _enum(PaymentStatus, self.status, "status"))
        for name in ("payment_date", "due_date", "collection_date"):
            _optional_date(getattr(self, name), name)


@dataclass(frozen=True)
class PaymentCorrectionRequest:
    """Administrative correction of non-financial payment fields."""

    payment_id: int
    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.payment_id, int) or self.payment_id <= 0:
            raise ValidationError("payment_id must be a positive integer.")
        changes = dict(self.changes)
        if not changes:
            raise ValidationError("No correction supplied.")
        locked = sorted(set(changes) - PAYMENT_CORRECTABLE_FIELDS)
        if locked:
            raise ValidationError(
                f"Payment fields cannot be corrected: {', '.join(locked)}.",
                code=ReasonCode.FINANCIAL_FIELD_IMMUTABLE,
                details={"fields": locked},
            )
        if "status" in changes:
            changes["status"] = _enum(PaymentStatus, changes["status"], "status")
        for name in ("payment_date", "due_date", "collection_date"):
            _optional_date(changes.get(name), name)
        if "payment_date" in changes and changes["payment_date"] is None:
            raise ValidationError("payment_date cannot be cleared.")
        object.__setattr__(self, "changes", changes)
