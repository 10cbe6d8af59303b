"""
Pollo Control Ledger Engine - Validation Guard
================================================
The only path by which entries enter a sale.

try_add_entry runs the entry policies in order, and on acceptance
appends a fresh Entry stamped by the injected clock. Rejections are
returned, never raised. delete_entry and toggle_lock complete the
set of sale mutations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from core.commands.rejection import RejectionReason
from core.time.clock import Clock, get_default_clock
from engines.ledger.commands import AddEntryRequest, Number
from engines.ledger.models import (
    Entry,
    EntryKind,
    ProviderStock,
    SaleLedger,
    new_record_id,
)
from engines.ledger.policies import ENTRY_POLICIES

logger = logging.getLogger("pollo.ledger")

EntryPolicy = Callable[
    [AddEntryRequest, ProviderStock, SaleLedger], Optional[RejectionReason]
]


@dataclass(frozen=True)
class EntryOutcome:
    """Either the accepted Entry or the RejectionReason, never both."""

    entry: Optional[Entry] = None
    reason: Optional[RejectionReason] = None

    def __post_init__(self) -> None:
        if (self.entry is None) == (self.reason is None):
            raise ValueError("EntryOutcome needs exactly one of entry/reason.")

    @property
    def accepted(self) -> bool:
        return self.entry is not None

    @classmethod
    def accept(cls, entry: Entry) -> EntryOutcome:
        return cls(entry=entry)

    @classmethod
    def reject(cls, reason: RejectionReason) -> EntryOutcome:
        return cls(reason=reason)


def evaluate_entry(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
    policies: Sequence[EntryPolicy] = ENTRY_POLICIES,
) -> Optional[RejectionReason]:
    """First rejection wins. None means the entry may be appended."""
    for policy in policies:
        rejection = policy(request, provider, sale)
        if rejection is not None:
            logger.info(
                f"Entry rejected by {rejection.policy_name} "
                f"[{rejection.code}] on sale {sale.id}: {rejection.message}"
            )
            return rejection
    return None


def try_add_entry(
    provider: ProviderStock,
    sale: SaleLedger,
    kind: EntryKind,
    weight: Number,
    count: Number,
    *,
    clock: Optional[Clock] = None,
    policies: Sequence[EntryPolicy] = ENTRY_POLICIES,
) -> EntryOutcome:
    request = AddEntryRequest(kind=kind, weight=weight, count=count)
    rejection = evaluate_entry(request, provider, sale, policies)
    if rejection is not None:
        return EntryOutcome.reject(rejection)

    now = (clock or get_default_clock()).now_utc()
    entry = Entry(
        id=new_record_id(now),
        kind=kind,
        weight=float(weight),
        count=int(count),
        timestamp=now,
    )
    sale.entries(kind).append(entry)
    logger.info(
        f"Entry {entry.id} accepted on sale {sale.id}: "
        f"{kind.value} {entry.weight:.2f} kg x {entry.count}"
    )
    return EntryOutcome.accept(entry)


def delete_entry(sale: SaleLedger, kind: EntryKind, entry_id: str) -> bool:
    """
    Remove one entry by id. Silent no-op on a closed sale or an
    unknown id. Returns True only when something was removed.
    """
    if sale.is_completed:
        logger.info(f"Delete ignored on closed sale {sale.id}.")
        return False

    sequence = sale.entries(kind)
    for index, entry in enumerate(sequence):
        if entry.id == entry_id:
            del sequence[index]
            logger.info(f"Entry {entry_id} removed from sale {sale.id}.")
            return True
    return False


def toggle_lock(sale: SaleLedger) -> bool:
    """Flip the closed flag. Always permitted. Returns the new state."""
    sale.is_completed = not sale.is_completed
    state = "closed" if sale.is_completed else "reopened"
    logger.info(f"Sale {sale.id} {state}.")
    return sale.is_completed
