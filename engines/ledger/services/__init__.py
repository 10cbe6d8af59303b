"""
Pollo Control Ledger Engine - Ledger Store
============================================
Owns the canonical in-memory tree of providers and performs every
mutation as one logical step: validate -> mutate -> snapshot write.

Persistence model:
- The whole provider collection is serialized to JSON and written
  under a single key after every committed mutation.
- Last write wins. A failed write is logged at WARNING on
  "pollo.persistence" and reported on the outcome; the in-memory
  mutation is NOT rolled back.

Destructive or state-flipping actions are two-phase: a propose_*
call describes the effect, commit() executes it. The store never
asks for confirmation itself.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import DEFAULT_POLICY, LedgerPolicy
from core.ledger_store.ports import SnapshotStore, SnapshotStoreError
from core.time.clock import Clock, get_default_clock
from engines.ledger import guard
from engines.ledger.commands import (
    CreateProviderRequest,
    CreateSaleRequest,
    Number,
    UpdateProviderRequest,
)
from engines.ledger.metrics import SaleMetrics, compute_metrics
from engines.ledger.models import (
    EntryKind,
    ProviderStock,
    SaleLedger,
    new_record_id,
)

logger = logging.getLogger("pollo.ledger")
persistence_logger = logging.getLogger("pollo.persistence")


# ══════════════════════════════════════════════════════════════
# OUTCOMES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MutationOutcome:
    """
    Result of a store operation.

    value holds the created/affected object on success (provider,
    sale, entry, or the new lock state). persistence_error is set when
    the mutation was applied in memory but the snapshot write failed.
    """

    success: bool
    value: Any = None
    reason: Optional[RejectionReason] = None
    persistence_error: Optional[str] = None

    @property
    def persisted(self) -> bool:
        return self.success and self.persistence_error is None

    @property
    def persistence_reason(self) -> Optional[RejectionReason]:
        """PERSISTENCE_FAILURE explanation when the snapshot write failed."""
        if self.persistence_error is None:
            return None
        return RejectionReason(
            code=ReasonCode.PERSISTENCE_FAILURE,
            message=f"Changes kept on screen but not saved: {self.persistence_error}",
            policy_name="ledger_store",
        )

    @classmethod
    def reject(cls, reason: RejectionReason) -> MutationOutcome:
        return cls(success=False, reason=reason)


class ChangeKind(Enum):
    DELETE_PROVIDER = "DELETE_PROVIDER"
    DELETE_SALE = "DELETE_SALE"
    DELETE_ENTRY = "DELETE_ENTRY"
    TOGGLE_LOCK = "TOGGLE_LOCK"
    RESET_ALL = "RESET_ALL"


@dataclass(frozen=True)
class ProposedChange:
    """
    Description of a pending change, shown to the operator before
    commit(). Counts describe what the commit would remove.
    """

    kind: ChangeKind
    description: str
    provider_id: Optional[str] = None
    sale_id: Optional[str] = None
    entry_kind: Optional[EntryKind] = None
    entry_id: Optional[str] = None
    affected_providers: int = 0
    affected_sales: int = 0
    affected_entries: int = 0
    lock_after: Optional[bool] = None
    no_op: bool = False


def _not_found(what: str, ident: str) -> RejectionReason:
    return RejectionReason(
        code=ReasonCode.NOT_FOUND,
        message=f"{what} '{ident}' not found.",
        policy_name="ledger_store",
        details={"id": ident},
    )


# ══════════════════════════════════════════════════════════════
# LEDGER STORE
# ══════════════════════════════════════════════════════════════

class LedgerStore:
    """Single mutator over the provider tree."""

    def __init__(
        self,
        snapshots: SnapshotStore,
        clock: Optional[Clock] = None,
        policy: LedgerPolicy = DEFAULT_POLICY,
        providers_key: Optional[str] = None,
    ) -> None:
        self._snapshots = snapshots
        self._clock = clock or get_default_clock()
        self._policy = policy
        self._key = providers_key or policy.providers_key
        self._providers: List[ProviderStock] = []

    # ── Loading / persistence ─────────────────────────────────

    def load(self) -> List[ProviderStock]:
        """
        Read the provider collection once at startup.

        A corrupt or unreadable blob is logged and the store starts
        empty. The bad blob stays in storage until the next write.
        """
        try:
            blob = self._snapshots.load(self._key)
        except SnapshotStoreError as exc:
            persistence_logger.warning(f"Snapshot load failed: {exc}")
            self._providers = []
            return self.providers

        if not blob:
            self._providers = []
            return self.providers

        try:
            data = json.loads(blob)
            self._providers = [ProviderStock.from_dict(p) for p in data]
        except (ValueError, TypeError, KeyError) as exc:
            persistence_logger.warning(
                f"Corrupt snapshot under '{self._key}', starting empty: {exc}"
            )
            self._providers = []
        logger.info(f"Loaded {len(self._providers)} providers.")
        return self.providers

    def serialize(self) -> str:
        return json.dumps([p.to_dict() for p in self._providers])

    def _persist(self) -> Optional[str]:
        try:
            self._snapshots.save(self._key, self.serialize())
        except SnapshotStoreError as exc:
            persistence_logger.warning(
                f"Snapshot write failed, in-memory state kept: {exc}"
            )
            return str(exc)
        return None

    def _committed(self, value: Any = None) -> MutationOutcome:
        return MutationOutcome(
            success=True, value=value, persistence_error=self._persist(),
        )

    # ── Queries ───────────────────────────────────────────────

    @property
    def providers(self) -> List[ProviderStock]:
        """Snapshot list of providers (the tree itself is shared)."""
        return list(self._providers)

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    def get_provider(self, provider_id: str) -> Optional[ProviderStock]:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    def get_sale(self, provider_id: str, sale_id: str) -> Optional[SaleLedger]:
        provider = self.get_provider(provider_id)
        return provider.get_sale(sale_id) if provider is not None else None

    def sale_metrics(
        self, provider: ProviderStock, sale: SaleLedger,
    ) -> SaleMetrics:
        return compute_metrics(
            sale, provider.chickens_per_crate, self._policy.default_tare_kg,
        )

    # ── Providers ─────────────────────────────────────────────

    def create_provider(
        self,
        name: str,
        initial_full_crates: int,
        chickens_per_crate: Optional[int] = None,
        logo: Optional[str] = None,
    ) -> MutationOutcome:
        try:
            request = CreateProviderRequest(
                name=name,
                initial_full_crates=initial_full_crates,
                chickens_per_crate=chickens_per_crate,
                logo=logo,
            )
        except ValueError as exc:
            return self._invalid_request("create_provider", exc)

        now = self._clock.now_utc()
        provider = ProviderStock(
            id=new_record_id(now),
            name=request.name.strip(),
            initial_full_crates=request.initial_full_crates,
            chickens_per_crate=(
                request.chickens_per_crate
                or self._policy.default_chickens_per_crate
            ),
            created_at=now,
            logo=request.logo,
        )
        # Newest first, as the provider list is shown.
        self._providers.insert(0, provider)
        logger.info(
            f"Provider {provider.id} created: {provider.name}, "
            f"{provider.initial_full_crates} crates."
        )
        return self._committed(provider)

    def update_provider(
        self,
        provider_id: str,
        *,
        name: Optional[str] = None,
        initial_full_crates: Optional[int] = None,
        chickens_per_crate: Optional[int] = None,
        logo: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> MutationOutcome:
        """Edit provider fields. Stock is not re-validated against sales."""
        try:
            request = UpdateProviderRequest(
                provider_id=provider_id,
                name=name,
                initial_full_crates=initial_full_crates,
                chickens_per_crate=chickens_per_crate,
                logo=logo,
                is_active=is_active,
            )
        except ValueError as exc:
            return self._invalid_request("update_provider", exc)

        provider = self.get_provider(provider_id)
        if provider is None:
            return MutationOutcome.reject(_not_found("Provider", provider_id))

        if request.name is not None:
            provider.name = request.name.strip()
        if request.initial_full_crates is not None:
            provider.initial_full_crates = request.initial_full_crates
        if request.chickens_per_crate is not None:
            provider.chickens_per_crate = request.chickens_per_crate
        if request.logo is not None:
            provider.logo = request.logo
        if request.is_active is not None:
            provider.is_active = request.is_active
        logger.info(f"Provider {provider_id} updated.")
        return self._committed(provider)

    # ── Sales ─────────────────────────────────────────────────

    def create_sale(
        self, provider_id: str, client_name: str, target_full_crates: int,
    ) -> MutationOutcome:
        try:
            request = CreateSaleRequest(
                provider_id=provider_id,
                client_name=client_name,
                target_full_crates=target_full_crates,
            )
        except ValueError as exc:
            return self._invalid_request("create_sale", exc)

        provider = self.get_provider(request.provider_id)
        if provider is None:
            return MutationOutcome.reject(_not_found("Provider", provider_id))

        now = self._clock.now_utc()
        sale = SaleLedger(
            id=new_record_id(now),
            client_name=request.client_name.strip(),
            target_full_crates=request.target_full_crates,
            created_at=now,
        )
        provider.sales.append(sale)
        logger.info(
            f"Sale {sale.id} opened for {sale.client_name} "
            f"({sale.target_full_crates} crates) on provider {provider_id}."
        )
        return self._committed(sale)

    # ── Entries ───────────────────────────────────────────────

    def add_entry(
        self,
        provider_id: str,
        sale_id: str,
        kind: EntryKind,
        weight: Number,
        count: Number,
    ) -> MutationOutcome:
        provider = self.get_provider(provider_id)
        if provider is None:
            return MutationOutcome.reject(_not_found("Provider", provider_id))
        sale = provider.get_sale(sale_id)
        if sale is None:
            return MutationOutcome.reject(_not_found("Sale", sale_id))

        outcome = guard.try_add_entry(
            provider, sale, kind, weight, count, clock=self._clock,
        )
        if not outcome.accepted:
            return MutationOutcome.reject(outcome.reason)
        return self._committed(outcome.entry)

    # ── Two-phase operations ──────────────────────────────────

    def propose_delete_provider(self, provider_id: str) -> Optional[ProposedChange]:
        provider = self.get_provider(provider_id)
        if provider is None:
            return None
        entries = sum(s.entry_count for s in provider.sales)
        return ProposedChange(
            kind=ChangeKind.DELETE_PROVIDER,
            description=(
                f"Delete provider {provider.name} with {len(provider.sales)} "
                f"sales and {entries} entries."
            ),
            provider_id=provider_id,
            affected_providers=1,
            affected_sales=len(provider.sales),
            affected_entries=entries,
        )

    def propose_delete_sale(
        self, provider_id: str, sale_id: str,
    ) -> Optional[ProposedChange]:
        sale = self.get_sale(provider_id, sale_id)
        if sale is None:
            return None
        return ProposedChange(
            kind=ChangeKind.DELETE_SALE,
            description=(
                f"Delete sale for {sale.client_name} with "
                f"{sale.entry_count} entries."
            ),
            provider_id=provider_id,
            sale_id=sale_id,
            affected_sales=1,
            affected_entries=sale.entry_count,
        )

    def propose_delete_entry(
        self, provider_id: str, sale_id: str, kind: EntryKind, entry_id: str,
    ) -> Optional[ProposedChange]:
        sale = self.get_sale(provider_id, sale_id)
        if sale is None:
            return None
        entry = sale.find_entry(kind, entry_id)
        if entry is None:
            return None
        locked = sale.is_completed
        description = (
            f"Sale for {sale.client_name} is closed; nothing will be removed."
            if locked
            else f"Delete {kind.value} entry {entry.weight:.2f} kg x {entry.count}."
        )
        return ProposedChange(
            kind=ChangeKind.DELETE_ENTRY,
            description=description,
            provider_id=provider_id,
            sale_id=sale_id,
            entry_kind=kind,
            entry_id=entry_id,
            affected_entries=0 if locked else 1,
            no_op=locked,
        )

    def propose_toggle_lock(
        self, provider_id: str, sale_id: str,
    ) -> Optional[ProposedChange]:
        sale = self.get_sale(provider_id, sale_id)
        if sale is None:
            return None
        lock_after = not sale.is_completed
        verb = "Close" if lock_after else "Reopen"
        return ProposedChange(
            kind=ChangeKind.TOGGLE_LOCK,
            description=f"{verb} sale for {sale.client_name}.",
            provider_id=provider_id,
            sale_id=sale_id,
            lock_after=lock_after,
        )

    def propose_reset(self) -> ProposedChange:
        sales = sum(len(p.sales) for p in self._providers)
        entries = sum(s.entry_count for p in self._providers for s in p.sales)
        return ProposedChange(
            kind=ChangeKind.RESET_ALL,
            description=(
                f"Erase all data: {len(self._providers)} providers, "
                f"{sales} sales, {entries} entries."
            ),
            affected_providers=len(self._providers),
            affected_sales=sales,
            affected_entries=entries,
        )

    def commit(self, change: ProposedChange) -> MutationOutcome:
        """Execute a proposed change against the current tree."""
        handler = {
            ChangeKind.DELETE_PROVIDER: self._commit_delete_provider,
            ChangeKind.DELETE_SALE: self._commit_delete_sale,
            ChangeKind.DELETE_ENTRY: self._commit_delete_entry,
            ChangeKind.TOGGLE_LOCK: self._commit_toggle_lock,
            ChangeKind.RESET_ALL: self._commit_reset,
        }[change.kind]
        return handler(change)

    def _commit_delete_provider(self, change: ProposedChange) -> MutationOutcome:
        provider = self.get_provider(change.provider_id)
        if provider is None:
            return MutationOutcome.reject(_not_found("Provider", change.provider_id))
        self._providers.remove(provider)
        logger.info(f"Provider {provider.id} deleted with {len(provider.sales)} sales.")
        return self._committed(provider)

    def _commit_delete_sale(self, change: ProposedChange) -> MutationOutcome:
        provider = self.get_provider(change.provider_id)
        sale = provider.get_sale(change.sale_id) if provider is not None else None
        if sale is None:
            return MutationOutcome.reject(_not_found("Sale", change.sale_id))
        provider.sales.remove(sale)
        logger.info(f"Sale {sale.id} deleted from provider {provider.id}.")
        return self._committed(sale)

    def _commit_delete_entry(self, change: ProposedChange) -> MutationOutcome:
        sale = self.get_sale(change.provider_id, change.sale_id)
        if sale is None:
            return MutationOutcome.reject(_not_found("Sale", change.sale_id))
        removed = guard.delete_entry(sale, change.entry_kind, change.entry_id)
        if not removed:
            return MutationOutcome(success=True, value=False)
        return self._committed(True)

    def _commit_toggle_lock(self, change: ProposedChange) -> MutationOutcome:
        sale = self.get_sale(change.provider_id, change.sale_id)
        if sale is None:
            return MutationOutcome.reject(_not_found("Sale", change.sale_id))
        if sale.is_completed == change.lock_after:
            # Already in the proposed state; nothing to write.
            return MutationOutcome(success=True, value=sale.is_completed)
        return self._committed(guard.toggle_lock(sale))

    def _commit_reset(self, change: ProposedChange) -> MutationOutcome:
        count = len(self._providers)
        self._providers = []
        logger.info(f"All data reset ({count} providers removed).")
        return self._committed(count)

    # ── Direct operations (caller already confirmed) ─────────

    def delete_provider(self, provider_id: str) -> MutationOutcome:
        change = self.propose_delete_provider(provider_id)
        if change is None:
            return MutationOutcome.reject(_not_found("Provider", provider_id))
        return self.commit(change)

    def delete_sale(self, provider_id: str, sale_id: str) -> MutationOutcome:
        change = self.propose_delete_sale(provider_id, sale_id)
        if change is None:
            return MutationOutcome.reject(_not_found("Sale", sale_id))
        return self.commit(change)

    def delete_entry(
        self, provider_id: str, sale_id: str, kind: EntryKind, entry_id: str,
    ) -> MutationOutcome:
        """Unknown entry ids are a silent no-op, like a closed sale."""
        sale = self.get_sale(provider_id, sale_id)
        if sale is None:
            return MutationOutcome.reject(_not_found("Sale", sale_id))
        change = self.propose_delete_entry(provider_id, sale_id, kind, entry_id)
        if change is None:
            return MutationOutcome(success=True, value=False)
        return self.commit(change)

    def toggle_lock(self, provider_id: str, sale_id: str) -> MutationOutcome:
        change = self.propose_toggle_lock(provider_id, sale_id)
        if change is None:
            return MutationOutcome.reject(_not_found("Sale", sale_id))
        return self.commit(change)

    # ── Internal ──────────────────────────────────────────────

    def _invalid_request(self, operation: str, exc: ValueError) -> MutationOutcome:
        logger.info(f"{operation} rejected: {exc}")
        return MutationOutcome.reject(RejectionReason(
            code=ReasonCode.INVALID_REQUEST,
            message=str(exc),
            policy_name=operation,
        ))
