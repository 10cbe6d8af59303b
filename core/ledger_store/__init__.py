"""
Pollo Control Ledger Store - Public API
=========================================
Key-value snapshot persistence for the provider collection
and the app configuration.

The Django-backed store lives in core.ledger_store.repository and is
imported explicitly so this package stays importable without Django.
"""

from core.ledger_store.ports import (
    InMemorySnapshotStore,
    SnapshotStore,
    SnapshotStoreError,
)

__all__ = [
    "SnapshotStore",
    "SnapshotStoreError",
    "InMemorySnapshotStore",
]
