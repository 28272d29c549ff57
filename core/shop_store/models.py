"""
Shopdesk Shop Store - Relational Models
=======================================
Row layout behind DbShopStore. Money columns are DECIMAL(12, 2).
Order lines are written once with their order and never updated.
"""

from __future__ import annotations

from django.db import models


class CustomerTierChoice(models.TextChoices):
    BASIC = "BASIC", "Basic"
    SILVER = "SILVER", "Silver"
    GOLD = "GOLD", "Gold"
    PLATINUM = "PLATINUM", "Platinum"


class OrderStatusChoice(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    CANCELED = "CANCELED", "Canceled"
    REJECTED = "REJECTED", "Rejected"


class PaymentMethodChoice(models.TextChoices):
    CASH = "CASH", "Cash"
    TRANSFER = "TRANSFER", "Transfer"
    OTHER = "OTHER", "Other"


class PaymentStatusChoice(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COLLECTED = "COLLECTED", "Collected"
    REJECTED = "REJECTED", "Rejected"


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Customer(models.Model):
    name = models.CharField(max_length=255)
    email = models.CharField(max_length=255, blank=True, default="")
    loyalty_tier = models.CharField(
        max_length=16,
        choices=CustomerTierChoice.choices,
        default=CustomerTierChoice.BASIC,
    )
    created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "shopdesk_customers"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.id}:{self.name}"


class Product(models.Model):
    sku = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    unit_price = _money()
    stock = models.PositiveIntegerField(default=0)
    deleted = models.BooleanField(default=False)

    class Meta:
        db_table = "shopdesk_products"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["sku"], name="uq_product_sku"),
        ]

    def __str__(self) -> str:
        return f"{self.sku}:{self.name}"


class Coupon(models.Model):
    code = models.CharField(max_length=64)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    consumed = models.BooleanField(default=False)
    created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "shopdesk_coupons"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["code"], name="uq_coupon_code"),
        ]

    def __str__(self) -> str:
        return self.code


class Order(models.Model):
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="orders",
        db_column="customer_id",
    )
    coupon = models.ForeignKey(
        Coupon,
        on_delete=models.PROTECT,
        related_name="orders",
        db_column="coupon_id",
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=OrderStatusChoice.choices,
        default=OrderStatusChoice.PENDING,
    )
    subtotal = _money()
    loyalty_discount = _money(default=0)
    coupon_discount = _money(default=0)
    total_discount = _money(default=0)
    amount_after_discount = _money(default=0)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    tax = _money(default=0)
    total = _money()
    remaining = _money()

    class Meta:
        db_table = "shopdesk_orders"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["status"], name="idx_order_status"),
            models.Index(fields=["customer", "status"], name="idx_order_customer_status"),
        ]

    def __str__(self) -> str:
        return f"order:{self.id}:{self.status}"


class OrderLine(models.Model):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="lines",
        db_column="order_id",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="order_lines",
        db_column="product_id",
    )
    product_name = models.CharField(max_length=255)
    unit_price = _money()
    quantity = models.PositiveIntegerField()
    line_total = _money()

    class Meta:
        db_table = "shopdesk_order_lines"
        ordering = ["order_id", "id"]


class Payment(models.Model):
    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="payments",
        db_column="order_id",
    )
    payment_number = models.PositiveIntegerField()
    amount = _money()
    method = models.CharField(max_length=16, choices=PaymentMethodChoice.choices)
    status = models.CharField(
        max_length=16,
        choices=PaymentStatusChoice.choices,
        default=PaymentStatusChoice.PENDING,
    )
    reference = models.CharField(max_length=128, blank=True, default="")
    payment_date = models.DateField()
    bank_name = models.CharField(max_length=128, null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    collection_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "shopdesk_payments"
        ordering = ["order_id", "payment_number", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "payment_number"],
                name="uq_payment_order_number",
            ),
        ]

    def __str__(self) -> str:
        return f"payment:{self.order_id}#{self.payment_number}"
