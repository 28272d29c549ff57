"""
Shopdesk Inventory Engine — Stock Ledger
========================================
Owns decrements of Product.stock.

Stock is checked, not reserved, when an order is created. It is
deducted once, inside the first-payment unit of work, after the
product row has been locked and the quantity re-validated.

Products of one order are locked in ascending product id order so
two settlements touching the same products cannot deadlock.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from core.errors import ConflictError, NotFoundError, ValidationError, raise_if_rejected
from core.store.protocol import ShopStore
from core.store.records import OrderLine, Product
from engines.inventory.policies import stock_must_cover_quantity_policy

logger = logging.getLogger("shopdesk.inventory")


def _summed_quantities(lines: Iterable[OrderLine]) -> Mapping[int, int]:
    required: dict[int, int] = {}
    for line in lines:
        required[line.product_id] = required.get(line.product_id, 0) + line.quantity
    return required


class StockLedger:
    def __init__(self, *, store: ShopStore):
        self._store = store

    def available(self, product_id: int) -> int:
        product = self._store.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product.stock

    def reserve_check(self, product_id: int, quantity: int) -> bool:
        """True iff live stock covers `quantity`. Holds nothing."""
        product = self._store.get_product(product_id)
        if product is None:
            return False
        return stock_must_cover_quantity_policy(product, quantity) is None

    def deduct(self, product_id: int, quantity: int) -> Product:
        if not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("quantity must be a positive integer.")
        with self._store.unit_of_work():
            product = self._store.lock_product(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            raise_if_rejected(
                stock_must_cover_quantity_policy(product, quantity), ConflictError,
            )
            product.stock -= quantity
            saved = self._store.save_product(product)
        logger.info(
            "Deducted %s unit(s) of product %s, stock now %s",
            quantity, product_id, saved.stock,
        )
        return saved

    def deduct_lines(self, lines: Iterable[OrderLine]) -> list[Product]:
        """Deduct every line of an order; all or nothing."""
        required = _summed_quantities(lines)
        with self._store.unit_of_work():
            return [
                self.deduct(product_id, required[product_id])
                for product_id in sorted(required)
            ]
