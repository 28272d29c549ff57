"""
Shopdesk Core Errors — Exceptions
=================================
Structured business errors raised by the settlement engines.

Every error carries:
- code:    machine-readable (SCREAMING_SNAKE_CASE)
- message: human-readable explanation
- details: optional context for audit / transport mapping

Errors surface to the caller unmodified. Nothing in the engines
retries or swallows them.
"""

from __future__ import annotations

from typing import Any, Optional


class ShopError(Exception):
    """Base error for all settlement engine failures."""

    default_code = "SHOP_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.details = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize for transport / audit payloads."""
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


class ValidationError(ShopError):
    """Malformed or insufficient input (empty basket, over-limit cash, ...)."""

    default_code = "VALIDATION_FAILED"


class NotFoundError(ShopError):
    """Referenced customer / product / order / coupon / payment is missing."""

    default_code = "NOT_FOUND"

    def __init__(self, resource: str, key: Any, *, field: str = "id"):
        self.resource = resource
        self.key = key
        super().__init__(
            f"{resource} not found with {field}: {key}",
            code=f"{resource.upper()}_NOT_FOUND",
            details={"resource": resource, field: key},
        )


class ConflictError(ShopError):
    """Request clashes with current state (duplicate code, stock gone, ...)."""

    default_code = "CONFLICT"


class StateError(ShopError):
    """Illegal order state transition."""

    default_code = "ILLEGAL_STATE_TRANSITION"


class AuthorizationError(ShopError):
    """Operator lacks the capability required for an operation."""

    default_code = "PERMISSION_DENIED"
