"""
Pollo Control Integration - Device Audit Log
==============================================
Immutable audit trail for every device operation.
Append-only: no updates, no deletes.

Scale reads and ticket deliveries are recorded with the device,
the outcome, and the error (if any) for inspection after a failed
print or a suspicious reading.
"""

from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, List, Optional

from integration.adapters import Direction

STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
STATUS_FALLBACK = "FALLBACK"

DEFAULT_MAX_ENTRIES = 1000


# ══════════════════════════════════════════════════════════════
# AUDIT ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IntegrationAuditEntry:
    """
    Immutable record of one device operation.

    Never mutated after creation. Append-only log.
    """

    audit_id: uuid.UUID
    device_id: str
    direction: Direction
    operation: str          # e.g. "ticket.deliver", "scale.read"
    status: str             # SUCCESS | FAILED | FALLBACK
    occurred_at: datetime
    payload_hash: str = ""
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "audit_id": str(self.audit_id),
            "device_id": self.device_id,
            "direction": self.direction.value,
            "operation": self.operation,
            "status": self.status,
            "occurred_at": self.occurred_at.isoformat(),
            "payload_hash": self.payload_hash,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


# ══════════════════════════════════════════════════════════════
# AUDIT LOG (append-only store)
# ══════════════════════════════════════════════════════════════

class IntegrationAuditLog:
    """
    Append-only audit log for device operations.

    In-memory and bounded: once max_entries is reached the oldest
    entries are dropped, so a polled scale cannot grow it without limit.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self._entries: Deque[IntegrationAuditEntry] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen

    def record(
        self,
        *,
        device_id: str,
        direction: Direction,
        operation: str,
        status: str,
        occurred_at: datetime,
        payload_hash: str = "",
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> IntegrationAuditEntry:
        entry = IntegrationAuditEntry(
            audit_id=uuid.uuid4(),
            device_id=device_id,
            direction=direction,
            operation=operation,
            status=status,
            occurred_at=occurred_at,
            payload_hash=payload_hash,
            error_code=error_code,
            error_message=error_message,
        )
        self._entries.append(entry)
        return entry

    def query_by_device(self, device_id: str) -> List[IntegrationAuditEntry]:
        return [e for e in self._entries if e.device_id == device_id]

    def query_failures(self) -> List[IntegrationAuditEntry]:
        return [e for e in self._entries if e.status == STATUS_FAILED]

    @property
    def entries(self) -> List[IntegrationAuditEntry]:
        """Read-only access to all entries."""
        return list(self._entries)
