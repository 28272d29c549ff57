"""
Shopdesk – Django Settings (Infrastructure Only)
================================================
Django serves as the persistence container for Shopdesk.
The settlement engines do not depend on Django; only the
core.shop_store app and its DbShopStore do.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("SHOPDESK_SECRET_KEY", "shopdesk-dev-key-replace-before-deployment")

DEBUG = os.environ.get("SHOPDESK_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Shopdesk Modules ──────────────────────────────────
    "core.shop_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("SHOPDESK_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Settlement Rules ──────────────────────────────────────────
# Read by core.config.load_settlement_rules(), which
# engines.wiring.build_shop_services() calls when no rules are passed.
# Keys left out keep the defaults of core.config.rules.SettlementRules.
SHOPDESK_SETTLEMENT = {
    "TAX_RATE_PERCENT": "20",
    "CASH_CEILING": "20000",
    "TIER_MATCH_MODE": "ANY",
    "LOYALTY_DISCOUNTS": {
        "SILVER": ["500", "5"],
        "GOLD": ["800", "10"],
        "PLATINUM": ["1200", "15"],
    },
    "TIER_THRESHOLDS": {
        "SILVER": [3, "1000"],
        "GOLD": [10, "5000"],
        "PLATINUM": [20, "15000"],
    },
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "shopdesk": {
            "handlers": ["console"],
            "level": os.environ.get("SHOPDESK_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
