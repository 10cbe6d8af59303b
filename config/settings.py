"""
Pollo Control - Django Settings (Infrastructure Only)
=======================================================
Django serves as the persistence container for the ledger.
The ledger architecture is the authority; Django does not dictate
structure. Only the snapshot store app is registered.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("POLLO_SECRET_KEY", "pollo-dev-key-replace-before-deployment")

DEBUG = True

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Pollo Control Modules ─────────────────────────────
    "core.ledger_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("POLLO_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "es"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Ledger Policy ─────────────────────────────────────────────
# Read by core.config.load_policy_from_settings().
POLLO_CONTROL = {
    "DEFAULT_TARE_KG": 2.5,
    "SIMULATION_RANGE_KG": (10.0, 30.0),
    "DEFAULT_CHICKENS_PER_CRATE": 9,
    "PROVIDERS_KEY": "pollo_control.providers",
    "CONFIG_KEY": "pollo_control.app_config",
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
        "pollo": {
            "handlers": ["console"],
            "level": os.environ.get("POLLO_LOG_LEVEL", "INFO"),
        },
        "openai": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
