"""
Shopdesk Shop Store - App Configuration
=======================================
Relational storage for customers, catalog, coupons, orders and payments.
"""

from django.apps import AppConfig


class CoreShopStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.shop_store"
    label = "core_shop_store"
    verbose_name = "Shopdesk Shop Store"
