"""
Shopdesk Context — OperatorContext
==================================
Explicit capability context passed into core operations.

Authentication happens upstream (transport layer). The engines only
see who is acting and in which role. When no context is passed the
caller is trusted: authorization was granted before the call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.errors import AuthorizationError


ROLE_ADMIN = "ADMIN"
ROLE_CLIENT = "CLIENT"
VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_CLIENT})


class Capability:
    """
    Atomic capability constants.

    Convention: engine.resource.action
    """

    ORDER_CREATE = "orders.order.create"
    ORDER_CONFIRM = "orders.order.confirm"
    ORDER_CANCEL = "orders.order.cancel"
    ORDER_READ = "orders.order.read"

    PAYMENT_CREATE = "payments.payment.create"
    PAYMENT_CORRECT = "payments.payment.correct"
    PAYMENT_READ = "payments.payment.read"

    COUPON_MANAGE = "coupon.coupon.manage"
    COUPON_USE = "coupon.coupon.use"
    COUPON_READ = "coupon.coupon.read"

    CATALOG_MANAGE = "catalog.product.manage"
    CATALOG_READ = "catalog.product.read"

    CUSTOMER_MANAGE = "customer.client.manage"
    CUSTOMER_READ = "customer.client.read"
    CUSTOMER_STATS = "customer.client.statistics"


ALL_CAPABILITIES = frozenset(
    value for name, value in vars(Capability).items() if name.isupper()
)

ROLE_CAPABILITIES = {
    ROLE_ADMIN: ALL_CAPABILITIES,
    ROLE_CLIENT: frozenset({
        Capability.ORDER_READ,
        Capability.PAYMENT_READ,
        Capability.CATALOG_READ,
        Capability.CUSTOMER_READ,
        Capability.CUSTOMER_STATS,
    }),
}


@dataclass(frozen=True)
class OperatorContext:
    """
    Who is acting.

    CLIENT operators are bound to their own customer record and may
    only read records owned by it.
    """

    actor_id: str
    role: str
    customer_id: Optional[int] = None

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if self.role not in VALID_ROLES:
            raise ValueError(
                f"role '{self.role}' not valid. Must be one of: {sorted(VALID_ROLES)}"
            )
        if self.role == ROLE_CLIENT and self.customer_id is None:
            raise ValueError("CLIENT operators must carry customer_id.")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def can(self, capability: str) -> bool:
        return capability in ROLE_CAPABILITIES[self.role]


def require_capability(
    context: Optional[OperatorContext],
    capability: str,
    *,
    owner_customer_id: Optional[int] = None,
) -> None:
    """Raise AuthorizationError unless `context` may perform `capability`."""
    if context is None:
        return

    if not context.can(capability):
        raise AuthorizationError(
            f"Role {context.role} may not perform '{capability}'.",
            details={"actor_id": context.actor_id, "capability": capability},
        )

    if (
        not context.is_admin
        and owner_customer_id is not None
        and context.customer_id != owner_customer_id
    ):
        raise AuthorizationError(
            "Clients may only access their own records.",
            code="NOT_RECORD_OWNER",
            details={"actor_id": context.actor_id, "capability": capability},
        )
