"""
Shopdesk Catalog Engine — Service Layer
=======================================
Product administration. Products are soft-deleted: the row stays so
order lines and pending-order checks can still resolve it, but it is
hidden from the catalog and cannot be ordered again.

Price changes never touch existing orders; order lines keep the
price they were created with.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.context import Capability, OperatorContext, require_capability
from core.errors import ConflictError, NotFoundError, ReasonCode
from core.store.protocol import ShopStore
from core.store.records import Product
from engines.catalog.commands import (
    ProductCreateRequest,
    ProductUpdateRequest,
    RestockRequest,
)

logger = logging.getLogger("shopdesk.catalog")


class CatalogService:
    def __init__(self, *, store: ShopStore):
        self._store = store

    def create_product(
        self, request: ProductCreateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Product:
        require_capability(context, Capability.CATALOG_MANAGE)
        with self._store.unit_of_work():
            if self._store.find_product_by_sku(request.sku) is not None:
                raise ConflictError(
                    f"Product with SKU already exists: {request.sku}",
                    code=ReasonCode.DUPLICATE_SKU,
                )
            product = self._store.save_product(Product(
                sku=request.sku,
                name=request.name,
                unit_price=request.unit_price,
                stock=request.stock,
            ))
        logger.info("Created new product with SKU: %s", product.sku)
        return product

    def get_product(
        self, product_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Product:
        require_capability(context, Capability.CATALOG_READ)
        return self._load(product_id)

    def list_products(self, *, context: Optional[OperatorContext] = None) -> list[Product]:
        require_capability(context, Capability.CATALOG_READ)
        return self._store.list_products()

    def update_product(
        self, request: ProductUpdateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Product:
        require_capability(context, Capability.CATALOG_MANAGE)
        with self._store.unit_of_work():
            product = self._load(request.product_id)
            if request.name is not None:
                product.name = request.name
            if request.unit_price is not None:
                product.unit_price = request.unit_price
            product = self._store.save_product(product)
        logger.info("Updated product with id: %s", product.product_id)
        return product

    def restock(
        self, request: RestockRequest, *, context: Optional[OperatorContext] = None,
    ) -> Product:
        require_capability(context, Capability.CATALOG_MANAGE)
        with self._store.unit_of_work():
            product = self._store.lock_product(request.product_id)
            if product is None or product.deleted:
                raise NotFoundError("Product", request.product_id)
            product.stock += request.quantity
            product = self._store.save_product(product)
        logger.info(
            "Restocked product %s by %s, stock now %s",
            product.product_id, request.quantity, product.stock,
        )
        return product

    def delete_product(
        self, product_id: int, *, context: Optional[OperatorContext] = None,
    ) -> None:
        require_capability(context, Capability.CATALOG_MANAGE)
        with self._store.unit_of_work():
            product = self._load(product_id)
            product.deleted = True
            self._store.save_product(product)
        logger.info("Soft deleted product with id: %s", product_id)

    def _load(self, product_id: int) -> Product:
        product = self._store.get_product(product_id)
        if product is None or product.deleted:
            raise NotFoundError("Product", product_id)
        return product
