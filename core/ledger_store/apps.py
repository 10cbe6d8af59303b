"""
Pollo Control Ledger Store - App Configuration
================================================
Holds one row per storage key. Each row is a full JSON snapshot,
rewritten after every committed ledger mutation (last write wins).
"""

from django.apps import AppConfig


class LedgerStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.ledger_store"
    label = "ledger_store"
    verbose_name = "Pollo Control Ledger Store"
