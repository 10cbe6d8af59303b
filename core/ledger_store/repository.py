"""
Pollo Control Ledger Store - Django Repository
================================================
Snapshot store backed by the LedgerSnapshot model.

Each save is an upsert of one row inside its own atomic block.
Database errors are wrapped in SnapshotStoreError so the ledger
store can log them without knowing about Django.
"""

from __future__ import annotations

from typing import Optional

from django.db import DatabaseError, transaction

from core.ledger_store.models import LedgerSnapshot
from core.ledger_store.ports import SnapshotStoreError


class DjangoSnapshotStore:
    """SnapshotStore implementation over the Django ORM."""

    def load(self, key: str) -> Optional[str]:
        try:
            row = LedgerSnapshot.objects.filter(key=key).first()
        except DatabaseError as exc:
            raise SnapshotStoreError(
                f"Snapshot read failed for key '{key}': {exc}", key=key,
            ) from exc
        return row.blob if row is not None else None

    def save(self, key: str, blob: str) -> None:
        try:
            with transaction.atomic():
                LedgerSnapshot.objects.update_or_create(
                    key=key, defaults={"blob": blob},
                )
        except DatabaseError as exc:
            raise SnapshotStoreError(
                f"Snapshot write failed for key '{key}': {exc}", key=key,
            ) from exc

    def delete(self, key: str) -> None:
        try:
            LedgerSnapshot.objects.filter(key=key).delete()
        except DatabaseError as exc:
            raise SnapshotStoreError(
                f"Snapshot delete failed for key '{key}': {exc}", key=key,
            ) from exc
