"""
Shopdesk Core Errors — Public API
=================================
Error taxonomy and rejection model shared by every settlement engine.
"""

from core.errors.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ShopError,
    StateError,
    ValidationError,
)
from core.errors.rejection import (
    ReasonCode,
    RejectionReason,
    raise_if_rejected,
)

__all__ = [
    "ShopError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StateError",
    "AuthorizationError",
    "ReasonCode",
    "RejectionReason",
    "raise_if_rejected",
]
