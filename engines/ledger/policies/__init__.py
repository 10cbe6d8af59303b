"""
Pollo Control Ledger Engine - Policies
========================================
Engine-specific validation policies for entry additions.

Each policy reads the current ledger state and returns a
RejectionReason, or None to let the request through. Policies never
mutate anything. The guard runs them in ENTRY_POLICIES order and
stops at the first rejection.
"""

from __future__ import annotations

import math
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.ledger.commands import AddEntryRequest
from engines.ledger.models import EntryKind, ProviderStock, SaleLedger


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def entry_input_policy(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
) -> Optional[RejectionReason]:
    """Reject non-positive, non-finite or non-integral inputs."""
    weight, count = request.weight, request.count

    if not _is_number(weight) or not math.isfinite(weight) or weight <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message=f"Weight must be a positive finite number, got {weight!r}.",
            policy_name="entry_input_policy",
            details={"field": "weight"},
        )

    if (
        not _is_number(count)
        or not math.isfinite(count)
        or count <= 0
        or (isinstance(count, float) and not count.is_integer())
    ):
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message=f"Count must be a positive whole number, got {count!r}.",
            policy_name="entry_input_policy",
            details={"field": "count"},
        )

    return None


def sale_lock_policy(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
) -> Optional[RejectionReason]:
    """Reject any addition to a closed sale."""
    if sale.is_completed:
        return RejectionReason(
            code=ReasonCode.SALE_LOCKED,
            message=(
                f"Sale for {sale.client_name} is closed. "
                f"Reopen it before adding entries."
            ),
            policy_name="sale_lock_policy",
            details={"sale_id": sale.id},
        )
    return None


def provider_stock_policy(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
) -> Optional[RejectionReason]:
    """Full crates sold across all sales may not exceed provider stock."""
    if request.kind is not EntryKind.FULL:
        return None

    sold = provider.total_sold()
    count = int(request.count)
    if sold + count > provider.initial_full_crates:
        remaining = provider.initial_full_crates - sold
        return RejectionReason(
            code=ReasonCode.STOCK_EXCEEDED,
            message=(
                f"Insufficient stock: {remaining} crates remaining, "
                f"{count} requested."
            ),
            policy_name="provider_stock_policy",
            details={"remaining_stock": remaining, "requested": count},
        )
    return None


def client_limit_policy(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
) -> Optional[RejectionReason]:
    """Full crates for one sale may not exceed the client's agreed limit."""
    if request.kind is not EntryKind.FULL:
        return None

    current = sale.full_count
    count = int(request.count)
    if current + count > sale.target_full_crates:
        return RejectionReason(
            code=ReasonCode.CLIENT_LIMIT_EXCEEDED,
            message=(
                f"Limit for {sale.client_name} is {sale.target_full_crates} "
                f"crates, {current} already taken."
            ),
            policy_name="client_limit_policy",
            details={
                "target_full_crates": sale.target_full_crates,
                "current_full_count": current,
                "requested": count,
            },
        )
    return None


def empty_return_policy(
    request: AddEntryRequest,
    provider: ProviderStock,
    sale: SaleLedger,
) -> Optional[RejectionReason]:
    """Empty crates returned may not outnumber full crates sold to that client."""
    if request.kind is not EntryKind.EMPTY:
        return None

    full = sale.full_count
    after = sale.empty_count + int(request.count)
    if after > full:
        return RejectionReason(
            code=ReasonCode.EMPTY_EXCEEDS_FULL,
            message=(
                f"Cannot return {after} empty crates, only {full} "
                f"full crates were sold."
            ),
            policy_name="empty_return_policy",
            details={"empty_after": after, "full_count": full},
        )
    return None


ENTRY_POLICIES = (
    entry_input_policy,
    sale_lock_policy,
    provider_stock_policy,
    client_limit_policy,
    empty_return_policy,
)
