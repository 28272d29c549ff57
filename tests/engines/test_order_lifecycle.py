"""
Shopdesk Orders Engine Test Suite
=================================
Tests verify:
- Request validation
- create_order: pricing, coupon validation (not consumption), lines snapshot
- State machine: only PENDING transitions, terminal states stay terminal
- confirm requires a payment, cancel requires none
- Client read access limited to own orders
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.context import ROLE_ADMIN, ROLE_CLIENT, OperatorContext
from core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ReasonCode,
    StateError,
    ValidationError,
)
from core.store import (
    Coupon,
    Customer,
    CustomerTier,
    InMemoryShopStore,
    OrderStatus,
    Payment,
    PaymentMethod,
    Product,
)
from core.time import FixedClock
from engines.orders.commands import CreateOrderRequest, OrderItemRequest
from engines.orders.services import OrderLifecycleService
from engines.orders.state import (
    ORDER_TRANSITIONS,
    TERMINAL_STATES,
    assert_transition,
    can_transition,
)

NOW = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════
# TEST HELPERS
# ══════════════════════════════════════════════════════════════

class Shop:
    def __init__(self):
        self.store = InMemoryShopStore()
        self.orders = OrderLifecycleService(store=self.store, clock=FixedClock(NOW))

    def customer(self, tier=CustomerTier.BASIC, name="Amina") -> int:
        return self.store.save_customer(
            Customer(name=name, email=f"{name.lower()}@example.com", loyalty_tier=tier)
        ).customer_id

    def product(self, price="100.00", stock=10, sku="SKU-1", deleted=False) -> int:
        return self.store.save_product(Product(
            sku=sku, name=f"Item {sku}", unit_price=Decimal(price),
            stock=stock, deleted=deleted,
        )).product_id

    def coupon(self, code="SPRING10", pct="10", consumed=False) -> int:
        return self.store.save_coupon(
            Coupon(code=code, discount_percentage=Decimal(pct), consumed=consumed)
        ).coupon_id

    def order(self, customer_id, product_id, quantity=2, coupon_code=None):
        return self.orders.create_order(CreateOrderRequest(
            customer_id=customer_id,
            items=(OrderItemRequest(product_id, quantity),),
            coupon_code=coupon_code,
        ))

    def pay(self, order, amount):
        """Record a payment row directly; settlement is covered elsewhere."""
        amount = Decimal(amount)
        self.store.save_payment(Payment(
            order_id=order.order_id, payment_number=1, amount=amount,
            method=PaymentMethod.TRANSFER, reference="TRX", payment_date=date(2026, 3, 1),
        ))
        order.remaining -= amount
        return self.store.save_order(order)


class LockRecordingStore(InMemoryShopStore):
    def __init__(self):
        super().__init__()
        self.locked_orders = []

    def lock_order(self, order_id, *, skip_locked=False):
        self.locked_orders.append(order_id)
        return super().lock_order(order_id, skip_locked=skip_locked)


@pytest.fixture
def shop():
    return Shop()


# ══════════════════════════════════════════════════════════════
# COMMANDS
# ══════════════════════════════════════════════════════════════

class TestOrderCommands:
    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            CreateOrderRequest(customer_id=1, items=())

    @pytest.mark.parametrize("qty", [0, -2, True])
    def test_item_quantity_must_be_positive_int(self, qty):
        with pytest.raises(ValidationError):
            OrderItemRequest(product_id=1, quantity=qty)

    def test_blank_coupon_code_is_none(self):
        req = CreateOrderRequest(1, (OrderItemRequest(1, 1),), coupon_code="  ")
        assert req.coupon_code is None

    def test_items_list_becomes_tuple(self):
        req = CreateOrderRequest(1, [OrderItemRequest(1, 1)])
        assert isinstance(req.items, tuple)


# ══════════════════════════════════════════════════════════════
# STATE MACHINE
# ══════════════════════════════════════════════════════════════

class TestOrderStateMachine:
    def test_pending_reaches_every_terminal_state(self):
        assert ORDER_TRANSITIONS[OrderStatus.PENDING] == frozenset(TERMINAL_STATES)

    @pytest.mark.parametrize("terminal", [
        OrderStatus.CONFIRMED, OrderStatus.CANCELED, OrderStatus.REJECTED,
    ])
    def test_terminal_states_have_no_exit(self, terminal):
        for target in OrderStatus:
            assert not can_transition(terminal, target)

    def test_assert_transition_raises_state_error(self):
        with pytest.raises(StateError) as exc:
            assert_transition(5, OrderStatus.CANCELED, OrderStatus.CONFIRMED)
        assert exc.value.details["from"] == "CANCELED"


# ══════════════════════════════════════════════════════════════
# CREATE
# ══════════════════════════════════════════════════════════════

class TestCreateOrder:
    def test_basic_order_totals(self, shop):
        order = shop.order(shop.customer(), shop.product(), quantity=2)

        assert order.status == OrderStatus.PENDING
        assert order.subtotal == Decimal("200.00")
        assert order.total_discount == Decimal("0.00")
        assert order.tax == Decimal("40.00")
        assert order.total == Decimal("240.00")
        assert order.remaining == Decimal("240.00")
        assert order.tax_rate == Decimal("20")
        assert order.created_at == NOW

    def test_lines_snapshot_product(self, shop):
        pid = shop.product(price="19.99", sku="MUG")
        order = shop.order(shop.customer(), pid, quantity=3)

        [line] = order.lines
        assert line.product_id == pid
        assert line.product_name == "Item MUG"
        assert line.unit_price == Decimal("19.99")
        assert line.line_total == Decimal("59.97")
        assert line.line_id is not None

    def test_creation_does_not_touch_stock(self, shop):
        pid = shop.product(stock=2)
        shop.order(shop.customer(), pid, quantity=2)
        shop.order(shop.customer(name="Bilal"), pid, quantity=2)
        assert shop.store.get_product(pid).stock == 2

    def test_loyalty_tier_discount_applied(self, shop):
        order = shop.order(shop.customer(CustomerTier.SILVER), shop.product(price="300.00"))
        assert order.loyalty_discount == Decimal("30.00")
        assert order.total == Decimal("684.00")

    def test_coupon_applied_but_not_consumed(self, shop):
        coupon_id = shop.coupon()
        order = shop.order(shop.customer(), shop.product(), coupon_code="SPRING10")

        assert order.coupon_id == coupon_id
        assert order.coupon_discount == Decimal("20.00")
        assert order.total == Decimal("216.00")
        assert shop.store.get_coupon(coupon_id).consumed is False

    def test_consumed_coupon_rejected(self, shop):
        shop.coupon(consumed=True)
        with pytest.raises(ConflictError):
            shop.order(shop.customer(), shop.product(), coupon_code="SPRING10")
        assert shop.store.list_orders() == []

    def test_unknown_coupon(self, shop):
        with pytest.raises(NotFoundError):
            shop.order(shop.customer(), shop.product(), coupon_code="NOPE")

    def test_unknown_customer(self, shop):
        with pytest.raises(NotFoundError) as exc:
            shop.order(77, shop.product())
        assert exc.value.code == "CUSTOMER_NOT_FOUND"

    def test_unknown_product(self, shop):
        with pytest.raises(NotFoundError) as exc:
            shop.order(shop.customer(), 77)
        assert exc.value.code == "PRODUCT_NOT_FOUND"

    def test_soft_deleted_product_not_found(self, shop):
        with pytest.raises(NotFoundError):
            shop.order(shop.customer(), shop.product(deleted=True))

    def test_insufficient_stock(self, shop):
        with pytest.raises(ValidationError) as exc:
            shop.order(shop.customer(), shop.product(stock=1), quantity=2)
        assert exc.value.code == ReasonCode.INSUFFICIENT_STOCK


# ══════════════════════════════════════════════════════════════
# TRANSITIONS
# ══════════════════════════════════════════════════════════════

class TestConfirmAndCancel:
    def test_confirm_without_payment_fails(self, shop):
        order = shop.order(shop.customer(), shop.product())
        with pytest.raises(StateError) as exc:
            shop.orders.confirm_order(order.order_id)
        assert exc.value.code == ReasonCode.ORDER_NOT_PAID

    def test_confirm_with_partial_payment(self, shop):
        order = shop.pay(shop.order(shop.customer(), shop.product()), "50.00")
        confirmed = shop.orders.confirm_order(order.order_id)
        assert confirmed.status == OrderStatus.CONFIRMED
        assert confirmed.remaining == Decimal("190.00")

    def test_confirm_runs_loyalty_upgrade(self, shop):
        cid = shop.customer()
        pid = shop.product(price="1000.00")
        order = shop.pay(shop.order(cid, pid, quantity=1), "1200.00")

        shop.orders.confirm_order(order.order_id)

        assert shop.store.get_customer(cid).loyalty_tier == CustomerTier.SILVER

    def test_cancel_unpaid_order(self, shop):
        order = shop.order(shop.customer(), shop.product())
        assert shop.orders.cancel_order(order.order_id).status == OrderStatus.CANCELED

    def test_cancel_paid_order_fails(self, shop):
        order = shop.pay(shop.order(shop.customer(), shop.product()), "10.00")
        with pytest.raises(StateError) as exc:
            shop.orders.cancel_order(order.order_id)
        assert exc.value.code == ReasonCode.ORDER_HAS_PAYMENTS

    def test_terminal_order_cannot_move(self, shop):
        order = shop.order(shop.customer(), shop.product())
        shop.orders.cancel_order(order.order_id)

        with pytest.raises(StateError):
            shop.orders.cancel_order(order.order_id)
        with pytest.raises(StateError):
            shop.orders.confirm_order(order.order_id)

    def test_reject_order_only_when_unpaid(self, shop):
        paid = shop.pay(shop.order(shop.customer(), shop.product()), "10.00")
        with pytest.raises(StateError):
            shop.orders.reject_order(paid)

        unpaid = shop.order(shop.customer(), shop.product())
        assert shop.orders.reject_order(unpaid).status == OrderStatus.REJECTED

    def test_unknown_order(self, shop):
        with pytest.raises(NotFoundError):
            shop.orders.confirm_order(404)

    def test_confirm_and_cancel_lock_the_order_row(self):
        shop = Shop()
        shop.store = LockRecordingStore()
        shop.orders = OrderLifecycleService(store=shop.store, clock=FixedClock(NOW))
        paid = shop.pay(shop.order(shop.customer(), shop.product()), "50.00")
        unpaid = shop.order(shop.customer(name="Baraka"), shop.product(sku="SKU-2"))

        shop.orders.confirm_order(paid.order_id)
        shop.orders.cancel_order(unpaid.order_id)

        assert shop.store.locked_orders == [paid.order_id, unpaid.order_id]


# ══════════════════════════════════════════════════════════════
# READS & ACCESS
# ══════════════════════════════════════════════════════════════

class TestOrderReads:
    def test_list_filters(self, shop):
        a = shop.customer(name="Amina")
        b = shop.customer(name="Bilal")
        pid = shop.product()
        first = shop.order(a, pid)
        shop.order(b, pid)
        shop.orders.cancel_order(first.order_id)

        assert len(shop.orders.list_orders()) == 2
        assert [o.customer_id for o in shop.orders.list_orders(customer_id=b)] == [b]
        assert [o.order_id for o in shop.orders.list_orders(status=OrderStatus.CANCELED)] == [
            first.order_id,
        ]

    def test_client_sees_only_own_orders(self, shop):
        a = shop.customer(name="Amina")
        b = shop.customer(name="Bilal")
        pid = shop.product()
        own = shop.order(a, pid)
        other = shop.order(b, pid)
        client = OperatorContext(actor_id="amina", role=ROLE_CLIENT, customer_id=a)

        assert shop.orders.get_order(own.order_id, context=client).order_id == own.order_id
        assert [o.order_id for o in shop.orders.list_orders(context=client)] == [own.order_id]
        with pytest.raises(AuthorizationError):
            shop.orders.get_order(other.order_id, context=client)
        with pytest.raises(AuthorizationError):
            shop.orders.list_orders(customer_id=b, context=client)

    def test_client_cannot_create_or_confirm(self, shop):
        a = shop.customer()
        client = OperatorContext(actor_id="amina", role=ROLE_CLIENT, customer_id=a)
        with pytest.raises(AuthorizationError):
            shop.orders.create_order(
                CreateOrderRequest(a, (OrderItemRequest(shop.product(), 1),)),
                context=client,
            )

    def test_admin_context_allowed(self, shop):
        admin = OperatorContext(actor_id="admin", role=ROLE_ADMIN)
        order = shop.orders.create_order(
            CreateOrderRequest(shop.customer(), (OrderItemRequest(shop.product(), 1),)),
            context=admin,
        )
        assert shop.orders.cancel_order(order.order_id, context=admin).status == OrderStatus.CANCELED
