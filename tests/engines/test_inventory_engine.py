"""
Shopdesk Inventory Engine Test Suite
====================================
Tests verify:
- reserve_check is read-only
- deduct re-validates under lock and never goes negative
- deduct_lines sums quantities, locks in ascending id order, all or nothing
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.errors import ConflictError, NotFoundError, ReasonCode, ValidationError
from core.store import InMemoryShopStore, OrderLine, Product
from engines.inventory.services import StockLedger


def seed_product(store, stock, sku="SKU-1", name="Widget") -> int:
    return store.save_product(Product(
        sku=sku, name=name, unit_price=Decimal("10.00"), stock=stock,
    )).product_id


def line(product_id, quantity):
    return OrderLine(
        product_id=product_id,
        product_name=f"Product {product_id}",
        unit_price=Decimal("10.00"),
        quantity=quantity,
        line_total=Decimal("10.00") * quantity,
    )


class RecordingStore(InMemoryShopStore):
    def __init__(self):
        super().__init__()
        self.locked = []

    def lock_product(self, product_id):
        self.locked.append(product_id)
        return super().lock_product(product_id)


# ══════════════════════════════════════════════════════════════
# READS
# ══════════════════════════════════════════════════════════════

class TestStockReads:
    def test_reserve_check_does_not_hold_stock(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 3)
        ledger = StockLedger(store=store)

        assert ledger.reserve_check(pid, 3) is True
        assert ledger.reserve_check(pid, 3) is True
        assert ledger.reserve_check(pid, 4) is False
        assert ledger.available(pid) == 3

    def test_reserve_check_unknown_product(self):
        assert StockLedger(store=InMemoryShopStore()).reserve_check(9, 1) is False

    def test_available_unknown_product(self):
        with pytest.raises(NotFoundError):
            StockLedger(store=InMemoryShopStore()).available(9)


# ══════════════════════════════════════════════════════════════
# DEDUCTION
# ══════════════════════════════════════════════════════════════

class TestDeduct:
    def test_deduct_decrements(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 5)

        product = StockLedger(store=store).deduct(pid, 2)

        assert product.stock == 3
        assert store.get_product(pid).stock == 3

    def test_deduct_to_zero(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 2)
        assert StockLedger(store=store).deduct(pid, 2).stock == 0

    def test_deduct_below_zero_conflicts(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 1)

        with pytest.raises(ConflictError) as exc:
            StockLedger(store=store).deduct(pid, 2)

        assert exc.value.code == ReasonCode.INSUFFICIENT_STOCK
        assert store.get_product(pid).stock == 1

    def test_deduct_unknown_product(self):
        with pytest.raises(NotFoundError):
            StockLedger(store=InMemoryShopStore()).deduct(7, 1)

    def test_deduct_requires_positive_quantity(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 1)
        with pytest.raises(ValidationError):
            StockLedger(store=store).deduct(pid, 0)


class TestDeductLines:
    def test_locks_in_ascending_product_order(self):
        store = RecordingStore()
        first = seed_product(store, 5, sku="A")
        second = seed_product(store, 5, sku="B")

        StockLedger(store=store).deduct_lines([line(second, 1), line(first, 1)])

        assert store.locked == [first, second]

    def test_same_product_lines_are_summed(self):
        store = InMemoryShopStore()
        pid = seed_product(store, 5)

        StockLedger(store=store).deduct_lines([line(pid, 2), line(pid, 2)])

        assert store.get_product(pid).stock == 1

    def test_failure_rolls_back_every_line(self):
        store = InMemoryShopStore()
        plenty = seed_product(store, 10, sku="A")
        scarce = seed_product(store, 1, sku="B")

        with pytest.raises(ConflictError):
            StockLedger(store=store).deduct_lines([line(plenty, 4), line(scarce, 2)])

        assert store.get_product(plenty).stock == 10
        assert store.get_product(scarce).stock == 1
