"""
Pollo Control Ledger Store - Snapshot Model
=============================================
One row per storage key. The blob is the complete serialized value
for that key (the provider collection, or the app configuration).

This file contains NO business logic.
The store persists blobs, it never interprets them.
"""

from django.db import models


class LedgerSnapshot(models.Model):
    key = models.CharField(
        max_length=128,
        primary_key=True,
    )
    blob = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "pollo_ledger_snapshots"

    def __str__(self) -> str:
        return f"LedgerSnapshot({self.key}, {len(self.blob)} chars)"
