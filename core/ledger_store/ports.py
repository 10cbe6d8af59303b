"""
Pollo Control Ledger Store - Persistence Port
===============================================
The ledger store depends only on this port. A snapshot store maps a
fixed storage key to one serialized blob. Writes replace the whole
blob; there is no partial update and no transaction spanning the
in-memory ledger and the stored copy.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class SnapshotStoreError(Exception):
    """Raised by a snapshot store when a blob cannot be read or written."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class SnapshotStore(Protocol):
    """Key-value blob storage."""

    def load(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None."""
        ...  # pragma: no cover

    def save(self, key: str, blob: str) -> None:
        """Replace the blob stored under key."""
        ...  # pragma: no cover

    def delete(self, key: str) -> None:
        """Remove the blob stored under key (no-op if missing)."""
        ...  # pragma: no cover


class InMemorySnapshotStore:
    """
    Dict-backed snapshot store for testing and development.

    fail_writes=True makes every save raise SnapshotStoreError,
    which lets tests exercise the persistence-failure path.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._blobs: Dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.write_count = 0

    def load(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        if self.fail_writes:
            raise SnapshotStoreError(f"Write refused for key '{key}'.", key=key)
        self._blobs[key] = blob
        self.write_count += 1

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._blobs)
