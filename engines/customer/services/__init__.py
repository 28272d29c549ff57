"""
Shopdesk Customer Engine — Service Layer
"""

from __future__ import annotations

import logging
from typing import Optional

from core.context import Capability, OperatorContext, require_capability
from core.errors import ConflictError, NotFoundError, raise_if_rejected
from core.store.protocol import ShopStore
from core.store.records import Customer, CustomerTier
from core.time import Clock, SystemClock
from engines.customer.commands import CustomerCreateRequest, CustomerUpdateRequest
from engines.customer.policies import customer_must_have_no_orders_policy
from engines.customer.statistics import ClientStatistics, compute_client_statistics

logger = logging.getLogger("shopdesk.customers")


class CustomerService:
    def __init__(self, *, store: ShopStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()

    def create_customer(
        self, request: CustomerCreateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Customer:
        require_capability(context, Capability.CUSTOMER_MANAGE)
        with self._store.unit_of_work():
            customer = self._store.save_customer(Customer(
                name=request.name,
                email=request.email,
                loyalty_tier=CustomerTier.BASIC,
                created_at=self._clock.now_utc(),
            ))
        logger.info("Created customer %s (%s)", customer.customer_id, customer.name)
        return customer

    def get_customer(
        self, customer_id: int, *, context: Optional[OperatorContext] = None,
    ) -> Customer:
        require_capability(
            context, Capability.CUSTOMER_READ, owner_customer_id=customer_id,
        )
        return self._load(customer_id)

    def list_customers(self, *, context: Optional[OperatorContext] = None) -> list[Customer]:
        require_capability(context, Capability.CUSTOMER_MANAGE)
        return self._store.list_customers()

    def update_customer(
        self, request: CustomerUpdateRequest, *, context: Optional[OperatorContext] = None,
    ) -> Customer:
        require_capability(context, Capability.CUSTOMER_MANAGE)
        with self._store.unit_of_work():
            customer = self._load(request.customer_id)
            if request.name is not None:
                customer.name = request.name
            if request.email is not None:
                customer.email = request.email
            customer = self._store.save_customer(customer)
        logger.info("Updated customer %s", customer.customer_id)
        return customer

    def delete_customer(
        self, customer_id: int, *, context: Optional[OperatorContext] = None,
    ) -> None:
        require_capability(context, Capability.CUSTOMER_MANAGE)
        with self._store.unit_of_work():
            self._load(customer_id)
            raise_if_rejected(
                customer_must_have_no_orders_policy(
                    customer_id, self._store.list_orders(customer_id=customer_id),
                ),
                ConflictError,
            )
            self._store.delete_customer(customer_id)
        logger.info("Deleted customer %s", customer_id)

    def client_statistics(
        self, customer_id: int, *, context: Optional[OperatorContext] = None,
    ) -> ClientStatistics:
        require_capability(
            context, Capability.CUSTOMER_STATS, owner_customer_id=customer_id,
        )
        return compute_client_statistics(self._store, self._load(customer_id))

    def _load(self, customer_id: int) -> Customer:
        customer = self._store.get_customer(customer_id)
        if customer is None:
            raise NotFoundError("Customer", customer_id)
        return customer
