"""
Tests for core.context — OperatorContext and capability checks.
"""

from __future__ import annotations

import pytest

from core.context import (
    ROLE_ADMIN,
    ROLE_CLIENT,
    Capability,
    OperatorContext,
    require_capability,
)
from core.context.operator_context import ALL_CAPABILITIES
from core.errors import AuthorizationError


ADMIN = OperatorContext(actor_id="admin-1", role=ROLE_ADMIN)
CLIENT = OperatorContext(actor_id="client-7", role=ROLE_CLIENT, customer_id=7)


class TestOperatorContext:
    def test_rejects_unknown_role(self):
        with pytest.raises(ValueError, match="role"):
            OperatorContext(actor_id="x", role="ROOT")

    def test_rejects_empty_actor(self):
        with pytest.raises(ValueError):
            OperatorContext(actor_id="", role=ROLE_ADMIN)

    def test_client_requires_customer(self):
        with pytest.raises(ValueError, match="customer_id"):
            OperatorContext(actor_id="c", role=ROLE_CLIENT)

    def test_admin_holds_every_capability(self):
        assert all(ADMIN.can(cap) for cap in ALL_CAPABILITIES)

    def test_client_capabilities_are_reads(self):
        assert CLIENT.can(Capability.ORDER_READ)
        assert CLIENT.can(Capability.CUSTOMER_STATS)
        assert not CLIENT.can(Capability.ORDER_CREATE)
        assert not CLIENT.can(Capability.PAYMENT_CREATE)
        assert not CLIENT.can(Capability.COUPON_MANAGE)


class TestRequireCapability:
    def test_no_context_is_trusted(self):
        require_capability(None, Capability.PAYMENT_CORRECT)

    def test_missing_capability(self):
        with pytest.raises(AuthorizationError) as exc:
            require_capability(CLIENT, Capability.ORDER_CONFIRM)
        assert exc.value.code == "PERMISSION_DENIED"
        assert exc.value.details["capability"] == Capability.ORDER_CONFIRM

    def test_client_own_record(self):
        require_capability(CLIENT, Capability.ORDER_READ, owner_customer_id=7)

    def test_client_other_record(self):
        with pytest.raises(AuthorizationError) as exc:
            require_capability(CLIENT, Capability.ORDER_READ, owner_customer_id=8)
        assert exc.value.code == "NOT_RECORD_OWNER"

    def test_admin_any_record(self):
        require_capability(ADMIN, Capability.ORDER_READ, owner_customer_id=8)
