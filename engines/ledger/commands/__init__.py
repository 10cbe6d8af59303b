"""
Pollo Control Ledger Engine - Request Commands
================================================
Typed requests for ledger mutations.

Provider and sale creation requests validate themselves on
construction (ValueError). Entry requests do NOT: an invalid weight or
count is a guard rejection (INVALID_INPUT), not an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from engines.ledger.models import EntryKind

Number = Union[int, float]


def _require_text(value: Any, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be non-empty text.")


def _require_positive_int(value: Any, field_name: str) -> None:
    # bool is an int subclass; True is not a crate count.
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"{field_name} must be positive integer.")


# ══════════════════════════════════════════════════════════════
# PROVIDER REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CreateProviderRequest:
    """Register a provider lot for the day."""
    name: str
    initial_full_crates: int
    chickens_per_crate: Optional[int] = None
    logo: Optional[str] = None

    def __post_init__(self):
        _require_text(self.name, "name")
        _require_positive_int(self.initial_full_crates, "initial_full_crates")
        if self.chickens_per_crate is not None:
            _require_positive_int(self.chickens_per_crate, "chickens_per_crate")


@dataclass(frozen=True)
class UpdateProviderRequest:
    """
    Edit provider fields. None means "leave unchanged".

    Stock edits are not checked against crates already sold.
    """
    provider_id: str
    name: Optional[str] = None
    initial_full_crates: Optional[int] = None
    chickens_per_crate: Optional[int] = None
    logo: Optional[str] = None
    is_active: Optional[bool] = None

    def __post_init__(self):
        if not self.provider_id:
            raise ValueError("provider_id must be non-empty.")
        if self.name is not None:
            _require_text(self.name, "name")
        if self.initial_full_crates is not None:
            _require_positive_int(self.initial_full_crates, "initial_full_crates")
        if self.chickens_per_crate is not None:
            _require_positive_int(self.chickens_per_crate, "chickens_per_crate")
        if self.logo is not None and not isinstance(self.logo, str):
            raise ValueError("logo must be text.")
        if self.is_active is not None and not isinstance(self.is_active, bool):
            raise ValueError("is_active must be a boolean.")


# ══════════════════════════════════════════════════════════════
# SALE REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CreateSaleRequest:
    """Open a client transaction against a provider."""
    provider_id: str
    client_name: str
    target_full_crates: int

    def __post_init__(self):
        if not self.provider_id:
            raise ValueError("provider_id must be non-empty.")
        _require_text(self.client_name, "client_name")
        _require_positive_int(self.target_full_crates, "target_full_crates")


# ══════════════════════════════════════════════════════════════
# ENTRY REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AddEntryRequest:
    """Raw weighing input; validated by the entry policies."""
    kind: EntryKind
    weight: Number
    count: Number
