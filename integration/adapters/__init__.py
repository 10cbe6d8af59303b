"""
Pollo Control Integration - Device Adapter Utilities
======================================================
Shared infrastructure for the scale (inbound) and printer (outbound)
adapters.

Doctrine: Device failures are never fatal to the ledger.
Every device error is an IntegrationError, caught at the call site
and downgraded (simulated reading, fallback sink or failure notice).

The characteristic contracts describe what a connected transport
(e.g. a Bluetooth GATT characteristic) must offer. Discovery and
pairing happen outside this package.
"""

from __future__ import annotations

import hashlib
from enum import Enum
from typing import Callable, Protocol


# ══════════════════════════════════════════════════════════════
# ERROR HIERARCHY
# ══════════════════════════════════════════════════════════════

class IntegrationError(Exception):
    """Base error for all device failures."""

    def __init__(self, message: str, device_id: str = "", retryable: bool = False):
        super().__init__(message)
        self.device_id = device_id
        self.retryable = retryable


class DeviceUnavailableError(IntegrationError):
    """No connected device (never paired, or connection dropped)."""

    def __init__(self, message: str, device_id: str = ""):
        super().__init__(message, device_id=device_id, retryable=False)


class TransientError(IntegrationError):
    """Temporary transport failure; the operator may retry."""

    def __init__(self, message: str, device_id: str = ""):
        super().__init__(message, device_id=device_id, retryable=True)


# ══════════════════════════════════════════════════════════════
# DIRECTION ENUM
# ══════════════════════════════════════════════════════════════

class Direction(Enum):
    INBOUND = "INBOUND"      # scale -> ledger
    OUTBOUND = "OUTBOUND"    # ticket -> printer


# ══════════════════════════════════════════════════════════════
# CHARACTERISTIC CONTRACTS
# ══════════════════════════════════════════════════════════════

class ScaleCharacteristic(Protocol):
    """Notifying characteristic of a connected scale."""

    @property
    def is_connected(self) -> bool:
        ...  # pragma: no cover

    async def start_notifications(self, callback: Callable[[bytes], None]) -> None:
        """Invoke callback with every raw payload the scale sends."""
        ...  # pragma: no cover


class PrinterCharacteristic(Protocol):
    """Writable characteristic of a connected receipt printer."""

    @property
    def is_connected(self) -> bool:
        ...  # pragma: no cover

    async def write_value(self, data: bytes) -> None:
        """One logical write; chunking is the transport's concern."""
        ...  # pragma: no cover


def payload_hash(data: bytes) -> str:
    """Deterministic fingerprint of a device payload for the audit log."""
    return hashlib.sha256(data).hexdigest()
