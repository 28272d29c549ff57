"""
Shopdesk Shop Store - DB-backed Provider
========================================
ShopStore implementation over the core_shop_store Django models.

unit_of_work() is transaction.atomic(); nested blocks become
savepoints. lock_*() issue SELECT ... FOR UPDATE, so they must
run inside a unit of work.
"""

from __future__ import annotations

from typing import Optional

from django.db import IntegrityError, transaction

from core.store.protocol import payment_number_taken
from core.store.records import (
    Coupon,
    Customer,
    CustomerTier,
    Order,
    OrderLine,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Product,
)

_ORDER_HEADER_FIELDS = (
    "status",
    "subtotal",
    "loyalty_discount",
    "coupon_discount",
    "total_discount",
    "amount_after_discount",
    "tax_rate",
    "tax",
    "total",
    "remaining",
)


# ══════════════════════════════════════════════════════════════
# ROW → RECORD
# ══════════════════════════════════════════════════════════════

def _customer(row) -> Customer:
    return Customer(
        customer_id=row.id,
        name=row.name,
        email=row.email,
        loyalty_tier=CustomerTier(row.loyalty_tier),
        created_at=row.created_at,
    )


def _product(row) -> Product:
    return Product(
        product_id=row.id,
        sku=row.sku,
        name=row.name,
        unit_price=row.unit_price,
        stock=row.stock,
        deleted=row.deleted,
    )


def _coupon(row) -> Coupon:
    return Coupon(
        coupon_id=row.id,
        code=row.code,
        discount_percentage=row.discount_percentage,
        consumed=row.consumed,
        created_at=row.created_at,
    )


def _order(row) -> Order:
    return Order(
        order_id=row.id,
        customer_id=row.customer_id,
        created_at=row.created_at,
        status=OrderStatus(row.status),
        subtotal=row.subtotal,
        loyalty_discount=row.loyalty_discount,
        coupon_discount=row.coupon_discount,
        total_discount=row.total_discount,
        amount_after_discount=row.amount_after_discount,
        tax_rate=row.tax_rate,
        tax=row.tax,
        total=row.total,
        remaining=row.remaining,
        coupon_id=row.coupon_id,
        lines=[
            OrderLine(
                line_id=line.id,
                product_id=line.product_id,
                product_name=line.product_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in row.lines.all()
        ],
    )


def _payment(row) -> Payment:
    return Payment(
        payment_id=row.id,
        order_id=row.order_id,
        payment_number=row.payment_number,
        amount=row.amount,
        method=PaymentMethod(row.method),
        status=PaymentStatus(row.status),
        reference=row.reference,
        payment_date=row.payment_date,
        bank_name=row.bank_name,
        due_date=row.due_date,
        collection_date=row.collection_date,
        created_at=row.created_at,
    )


# ══════════════════════════════════════════════════════════════
# PROVIDER
# ══════════════════════════════════════════════════════════════

class DbShopStore:
    def __init__(self, using: str = "default"):
        self._using = using

    def unit_of_work(self):
        return transaction.atomic(using=self._using)

    @property
    def in_unit_of_work(self) -> bool:
        return transaction.get_connection(self._using).in_atomic_block

    def _select_for_update(self, model, pk: int, operation: str, *, skip_locked: bool = False):
        if not self.in_unit_of_work:
            raise RuntimeError(f"{operation}() requires an active unit of work.")
        rows = model.objects.using(self._using).select_for_update(skip_locked=skip_locked)
        return rows.filter(pk=pk).first()

    # ── customers ─────────────────────────────────────────────

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        from core.shop_store.models import Customer as CustomerRow

        row = CustomerRow.objects.using(self._using).filter(pk=customer_id).first()
        return _customer(row) if row is not None else None

    def lock_customer(self, customer_id: int) -> Optional[Customer]:
        from core.shop_store.models import Customer as CustomerRow

        row = self._select_for_update(CustomerRow, customer_id, "lock_customer")
        return _customer(row) if row is not None else None

    def list_customers(self) -> list[Customer]:
        from core.shop_store.models import Customer as CustomerRow

        return [_customer(row) for row in CustomerRow.objects.using(self._using).order_by("id")]

    def save_customer(self, customer: Customer) -> Customer:
        from core.shop_store.models import Customer as CustomerRow

        row = CustomerRow(
            id=customer.customer_id,
            name=customer.name,
            email=customer.email,
            loyalty_tier=customer.loyalty_tier.value,
            created_at=customer.created_at,
        )
        row.save(using=self._using)
        return _customer(row)

    def delete_customer(self, customer_id: int) -> None:
        from core.shop_store.models import Customer as CustomerRow

        CustomerRow.objects.using(self._using).filter(pk=customer_id).delete()

    # ── products ──────────────────────────────────────────────

    def get_product(self, product_id: int) -> Optional[Product]:
        from core.shop_store.models import Product as ProductRow

        row = ProductRow.objects.using(self._using).filter(pk=product_id).first()
        return _product(row) if row is not None else None

    def lock_product(self, product_id: int) -> Optional[Product]:
        from core.shop_store.models import Product as ProductRow

        row = self._select_for_update(ProductRow, product_id, "lock_product")
        return _product(row) if row is not None else None

    def find_product_by_sku(self, sku: str) -> Optional[Product]:
        from core.shop_store.models import Product as ProductRow

        row = ProductRow.objects.using(self._using).filter(sku=sku).first()
        return _product(row) if row is not None else None

    def list_products(self, *, include_deleted: bool = False) -> list[Product]:
        from core.shop_store.models import Product as ProductRow

        rows = ProductRow.objects.using(self._using).order_by("id")
        if not include_deleted:
            rows = rows.filter(deleted=False)
        return [_product(row) for row in rows]

    def save_product(self, product: Product) -> Product:
        from core.shop_store.models import Product as ProductRow

        row = ProductRow(
            id=product.product_id,
            sku=product.sku,
            name=product.name,
            unit_price=product.unit_price,
            stock=product.stock,
            deleted=product.deleted,
        )
        row.save(using=self._using)
        return _product(row)

    # ── coupons ───────────────────────────────────────────────

    def get_coupon(self, coupon_id: int) -> Optional[Coupon]:
        from core.shop_store.models import Coupon as CouponRow

        row = CouponRow.objects.using(self._using).filter(pk=coupon_id).first()
        return _coupon(row) if row is not None else None

    def lock_coupon(self, coupon_id: int) -> Optional[Coupon]:
        from core.shop_store.models import Coupon as CouponRow

        row = self._select_for_update(CouponRow, coupon_id, "lock_coupon")
        return _coupon(row) if row is not None else None

    def find_coupon_by_code(self, code: str) -> Optional[Coupon]:
        from core.shop_store.models import Coupon as CouponRow

        row = CouponRow.objects.using(self._using).filter(code=code).first()
        return _coupon(row) if row is not None else None

    def list_coupons(self) -> list[Coupon]:
        from core.shop_store.models import Coupon as CouponRow

        return [_coupon(row) for row in CouponRow.objects.using(self._using).order_by("id")]

    def save_coupon(self, coupon: Coupon) -> Coupon:
        from core.shop_store.models import Coupon as CouponRow

        row = CouponRow(
            id=coupon.coupon_id,
            code=coupon.code,
            discount_percentage=coupon.discount_percentage,
            consumed=coupon.consumed,
            created_at=coupon.created_at,
        )
        row.save(using=self._using)
        return _coupon(row)

    def delete_coupon(self, coupon_id: int) -> None:
        from core.shop_store.models import Coupon as CouponRow

        CouponRow.objects.using(self._using).filter(pk=coupon_id).delete()

    # ── orders ────────────────────────────────────────────────

    def get_order(self, order_id: int) -> Optional[Order]:
        from core.shop_store.models import Order as OrderRow

        row = OrderRow.objects.using(self._using).filter(pk=order_id).first()
        return _order(row) if row is not None else None

    def lock_order(self, order_id: int, *, skip_locked: bool = False) -> Optional[Order]:
        from core.shop_store.models import Order as OrderRow

        row = self._select_for_update(
            OrderRow, order_id, "lock_order", skip_locked=skip_locked,
        )
        return _order(row) if row is not None else None

    def list_orders(
        self,
        *,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
    ) -> list[Order]:
        from core.shop_store.models import Order as OrderRow

        rows = OrderRow.objects.using(self._using).order_by("id")
        if customer_id is not None:
            rows = rows.filter(customer_id=customer_id)
        if status is not None:
            rows = rows.filter(status=status.value)
        return [_order(row) for row in rows.prefetch_related("lines")]

    def save_order(self, order: Order) -> Order:
        from core.shop_store.models import Order as OrderRow
        from core.shop_store.models import OrderLine as OrderLineRow

        with transaction.atomic(using=self._using):
            if order.order_id is None:
                row = OrderRow(
                    customer_id=order.customer_id,
                    coupon_id=order.coupon_id,
                    created_at=order.created_at,
                    **{name: self._column(order, name) for name in _ORDER_HEADER_FIELDS},
                )
                row.save(using=self._using)
                OrderLineRow.objects.using(self._using).bulk_create([
                    OrderLineRow(
                        order=row,
                        product_id=line.product_id,
                        product_name=line.product_name,
                        unit_price=line.unit_price,
                        quantity=line.quantity,
                        line_total=line.line_total,
                    )
                    for line in order.lines
                ])
            else:
                # Lines are written once, with the order.
                OrderRow.objects.using(self._using).filter(pk=order.order_id).update(
                    **{name: self._column(order, name) for name in _ORDER_HEADER_FIELDS},
                )
                row = OrderRow.objects.using(self._using).get(pk=order.order_id)
        return _order(row)

    @staticmethod
    def _column(order: Order, name: str):
        value = getattr(order, name)
        return value.value if name == "status" else value

    # ── payments ──────────────────────────────────────────────

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        from core.shop_store.models import Payment as PaymentRow

        row = PaymentRow.objects.using(self._using).filter(pk=payment_id).first()
        return _payment(row) if row is not None else None

    def list_payments(self, *, order_id: Optional[int] = None) -> list[Payment]:
        from core.shop_store.models import Payment as PaymentRow

        rows = PaymentRow.objects.using(self._using).order_by(
            "order_id", "payment_number", "id",
        )
        if order_id is not None:
            rows = rows.filter(order_id=order_id)
        return [_payment(row) for row in rows]

    def count_payments(self, order_id: int) -> int:
        from core.shop_store.models import Payment as PaymentRow

        return PaymentRow.objects.using(self._using).filter(order_id=order_id).count()

    def save_payment(self, payment: Payment) -> Payment:
        from core.shop_store.models import Payment as PaymentRow

        row = PaymentRow(
            id=payment.payment_id,
            order_id=payment.order_id,
            payment_number=payment.payment_number,
            amount=payment.amount,
            method=payment.method.value,
            status=payment.status.value,
            reference=payment.reference,
            payment_date=payment.payment_date,
            bank_name=payment.bank_name,
            due_date=payment.due_date,
            collection_date=payment.collection_date,
            created_at=payment.created_at,
        )
        try:
            with transaction.atomic(using=self._using):
                row.save(using=self._using)
        except IntegrityError as exc:
            taken = (
                PaymentRow.objects.using(self._using)
                .filter(order_id=payment.order_id, payment_number=payment.payment_number)
                .exclude(pk=payment.payment_id)
                .exists()
            )
            if taken:
                raise payment_number_taken(payment.order_id, payment.payment_number) from exc
            raise
        return _payment(row)

    def delete_payment(self, payment_id: int) -> None:
        from core.shop_store.models import Payment as PaymentRow

        PaymentRow.objects.using(self._using).filter(pk=payment_id).delete()
