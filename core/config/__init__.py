"""
Pollo Control Core Config - Public API
========================================
Policy constants (tare, simulation range, chickens per crate)
and persisted app configuration (logo, printer type).
"""

from core.config.rules import (
    DEFAULT_POLICY,
    AppConfig,
    ConfigStore,
    InMemoryConfigStore,
    LedgerPolicy,
    PrinterType,
    SnapshotConfigStore,
    load_policy_from_settings,
)

__all__ = [
    "DEFAULT_POLICY",
    "LedgerPolicy",
    "load_policy_from_settings",
    "PrinterType",
    "AppConfig",
    "ConfigStore",
    "InMemoryConfigStore",
    "SnapshotConfigStore",
]
