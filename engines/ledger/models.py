"""
Pollo Control Ledger Engine - Entity Model
============================================
Engine: Ledger
Ownership is a tree: ProviderStock -> SaleLedger -> Entry.

RULES:
- Entries are immutable once created (frozen dataclass).
- Entry kind is an explicit tag (FULL | EMPTY | MORTALITY) with a
  uniform {weight, count} payload. Nothing inspects field presence.
- A SaleLedger belongs to exactly one ProviderStock; an Entry belongs
  to exactly one SaleLedger. No sharing, no cycles.
- Only the validation guard appends entries; only the ledger store
  removes them.

This file contains NO persistence logic. to_dict/from_dict produce
JSON-safe structures; timestamps travel as epoch milliseconds.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from core.time.temporal import from_epoch_millis, to_epoch_millis


# ══════════════════════════════════════════════════════════════
# ENTRY KIND
# ══════════════════════════════════════════════════════════════

class EntryKind(Enum):
    """Which sequence of a sale an entry belongs to."""
    FULL = "FULL"             # crates sold, gross weight
    EMPTY = "EMPTY"           # crates returned, tare samples
    MORTALITY = "MORTALITY"   # dead birds, weighed apart


def new_record_id(created_at: datetime) -> str:
    """
    Creation-time derived identifier.

    13-digit epoch-millisecond prefix keeps lexical order aligned with
    creation order; the random suffix keeps ids unique within the
    same millisecond.
    """
    return f"{to_epoch_millis(created_at):013d}-{uuid.uuid4().hex[:8]}"


# ══════════════════════════════════════════════════════════════
# ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Entry:
    """
    Atomic weighing record.

    count is crates for FULL/EMPTY entries and dead birds for
    MORTALITY entries.
    """

    id: str
    kind: EntryKind
    weight: float
    count: int
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "weight": self.weight,
            "count": self.count,
            "timestamp": to_epoch_millis(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: EntryKind) -> Entry:
        return cls(
            id=str(data["id"]),
            kind=kind,
            weight=float(data["weight"]),
            count=int(data["count"]),
            timestamp=from_epoch_millis(data["timestamp"]),
        )


# ══════════════════════════════════════════════════════════════
# SALE LEDGER
# ══════════════════════════════════════════════════════════════

_SEQUENCE_KEYS = {
    EntryKind.FULL: "full_crates",
    EntryKind.EMPTY: "empty_crates",
    EntryKind.MORTALITY: "mortality",
}


@dataclass
class SaleLedger:
    """
    One client transaction.

    target_full_crates is the client's agreed crate limit, fixed at
    creation. is_completed=True locks all three sequences.
    """

    id: str
    client_name: str
    target_full_crates: int
    created_at: datetime
    full_crates: List[Entry] = field(default_factory=list)
    empty_crates: List[Entry] = field(default_factory=list)
    mortality: List[Entry] = field(default_factory=list)
    is_completed: bool = False

    def entries(self, kind: EntryKind) -> List[Entry]:
        """The live sequence for kind (callers must not mutate it)."""
        return getattr(self, _SEQUENCE_KEYS[kind])

    def count_of(self, kind: EntryKind) -> int:
        return sum(e.count for e in self.entries(kind))

    def weight_of(self, kind: EntryKind) -> float:
        return sum(e.weight for e in self.entries(kind))

    @property
    def full_count(self) -> int:
        return self.count_of(EntryKind.FULL)

    @property
    def empty_count(self) -> int:
        return self.count_of(EntryKind.EMPTY)

    @property
    def remaining_crates(self) -> int:
        """Crates this client may still take under its limit."""
        return max(0, self.target_full_crates - self.full_count)

    @property
    def entry_count(self) -> int:
        return len(self.full_crates) + len(self.empty_crates) + len(self.mortality)

    def find_entry(self, kind: EntryKind, entry_id: str) -> Optional[Entry]:
        for entry in self.entries(kind):
            if entry.id == entry_id:
                return entry
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_name": self.client_name,
            "target_full_crates": self.target_full_crates,
            "created_at": to_epoch_millis(self.created_at),
            "full_crates": [e.to_dict() for e in self.full_crates],
            "empty_crates": [e.to_dict() for e in self.empty_crates],
            "mortality": [e.to_dict() for e in self.mortality],
            "is_completed": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SaleLedger:
        return cls(
            id=str(data["id"]),
            client_name=data["client_name"],
            target_full_crates=int(data["target_full_crates"]),
            created_at=from_epoch_millis(data["created_at"]),
            full_crates=[
                Entry.from_dict(e, EntryKind.FULL)
                for e in data.get("full_crates", [])
            ],
            empty_crates=[
                Entry.from_dict(e, EntryKind.EMPTY)
                for e in data.get("empty_crates", [])
            ],
            mortality=[
                Entry.from_dict(e, EntryKind.MORTALITY)
                for e in data.get("mortality", [])
            ],
            is_completed=bool(data.get("is_completed", False)),
        )


# ══════════════════════════════════════════════════════════════
# PROVIDER STOCK
# ══════════════════════════════════════════════════════════════

@dataclass
class ProviderStock:
    """
    A provider's lot for the day and every sale drawn against it.

    Invariant (checked when full crates are added, never retroactively):
        sum of full crate counts over all sales <= initial_full_crates
    """

    id: str
    name: str
    initial_full_crates: int
    chickens_per_crate: int
    created_at: datetime
    sales: List[SaleLedger] = field(default_factory=list)
    logo: Optional[str] = None
    is_active: bool = True

    def total_sold(self) -> int:
        return sum(sale.full_count for sale in self.sales)

    def remaining_stock(self) -> int:
        """May be negative if initial stock was lowered after sales."""
        return self.initial_full_crates - self.total_sold()

    def get_sale(self, sale_id: str) -> Optional[SaleLedger]:
        for sale in self.sales:
            if sale.id == sale_id:
                return sale
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "logo": self.logo,
            "initial_full_crates": self.initial_full_crates,
            "chickens_per_crate": self.chickens_per_crate,
            "created_at": to_epoch_millis(self.created_at),
            "sales": [s.to_dict() for s in self.sales],
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProviderStock:
        return cls(
            id=str(data["id"]),
            name=data["name"],
            logo=data.get("logo"),
            initial_full_crates=int(data["initial_full_crates"]),
            chickens_per_crate=int(data["chickens_per_crate"]),
            created_at=from_epoch_millis(data["created_at"]),
            sales=[SaleLedger.from_dict(s) for s in data.get("sales", [])],
            is_active=bool(data.get("is_active", True)),
        )
