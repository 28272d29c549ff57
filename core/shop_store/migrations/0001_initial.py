from django.db import migrations, models


def _id():
    return (
        "id",
        models.BigAutoField(
            auto_created=True,
            primary_key=True,
            serialize=False,
            verbose_name="ID",
        ),
    )


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                _id(),
                ("name", models.CharField(max_length=255)),
                ("email", models.CharField(blank=True, default="", max_length=255)),
                (
                    "loyalty_tier",
                    models.CharField(
                        choices=[
                            ("BASIC", "Basic"),
                            ("SILVER", "Silver"),
                            ("GOLD", "Gold"),
                            ("PLATINUM", "Platinum"),
                        ],
                        default="BASIC",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "shopdesk_customers",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                _id(),
                ("sku", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("unit_price", _money()),
                ("stock", models.PositiveIntegerField(default=0)),
                ("deleted", models.BooleanField(default=False)),
            ],
            options={
                "db_table": "shopdesk_products",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=("sku",), name="uq_product_sku"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Coupon",
            fields=[
                _id(),
                ("code", models.CharField(max_length=64)),
                (
                    "discount_percentage",
                    models.DecimalField(decimal_places=2, max_digits=5),
                ),
                ("consumed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "shopdesk_coupons",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=("code",), name="uq_coupon_code"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                _id(),
                ("created_at", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("CANCELED", "Canceled"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("subtotal", _money()),
                ("loyalty_discount", _money(default=0)),
                ("coupon_discount", _money(default=0)),
                ("total_discount", _money(default=0)),
                ("amount_after_discount", _money(default=0)),
                (
                    "tax_rate",
                    models.DecimalField(decimal_places=2, default=0, max_digits=5),
                ),
                ("tax", _money(default=0)),
                ("total", _money()),
                ("remaining", _money()),
                (
                    "customer",
                    models.ForeignKey(
                        db_column="customer_id",
                        on_delete=models.deletion.PROTECT,
                        related_name="orders",
                        to="core_shop_store.customer",
                    ),
                ),
                (
                    "coupon",
                    models.ForeignKey(
                        blank=True,
                        db_column="coupon_id",
                        null=True,
                        on_delete=models.deletion.PROTECT,
                        related_name="orders",
                        to="core_shop_store.coupon",
                    ),
                ),
            ],
            options={
                "db_table": "shopdesk_orders",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_order_status"),
                    models.Index(
                        fields=["customer", "status"],
                        name="idx_order_customer_status",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderLine",
            fields=[
                _id(),
                ("product_name", models.CharField(max_length=255)),
                ("unit_price", _money()),
                ("quantity", models.PositiveIntegerField()),
                ("line_total", _money()),
                (
                    "order",
                    models.ForeignKey(
                        db_column="order_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="lines",
                        to="core_shop_store.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        db_column="product_id",
                        on_delete=models.deletion.PROTECT,
                        related_name="order_lines",
                        to="core_shop_store.product",
                    ),
                ),
            ],
            options={
                "db_table": "shopdesk_order_lines",
                "ordering": ["order_id", "id"],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                _id(),
                ("payment_number", models.PositiveIntegerField()),
                ("amount", _money()),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("CASH", "Cash"),
                            ("TRANSFER", "Transfer"),
                            ("OTHER", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("COLLECTED", "Collected"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("reference", models.CharField(blank=True, default="", max_length=128)),
                ("payment_date", models.DateField()),
                ("bank_name", models.CharField(blank=True, max_length=128, null=True)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("collection_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        db_column="order_id",
                        on_delete=models.deletion.PROTECT,
                        related_name="payments",
                        to="core_shop_store.order",
                    ),
                ),
            ],
            options={
                "db_table": "shopdesk_payments",
                "ordering": ["order_id", "payment_number", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "payment_number"),
                        name="uq_payment_order_number",
                    ),
                ],
            },
        ),
    ]
