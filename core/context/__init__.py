"""
Shopdesk Context — Public API
=============================
Operator identity and capability checks.
"""

from core.context.operator_context import (
    ROLE_ADMIN,
    ROLE_CLIENT,
    Capability,
    OperatorContext,
    require_capability,
)

__all__ = [
    "OperatorContext",
    "Capability",
    "ROLE_ADMIN",
    "ROLE_CLIENT",
    "require_capability",
]
