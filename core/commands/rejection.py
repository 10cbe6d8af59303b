"""
Pollo Control Command Layer - Rejection Model
===============================================
Structured rejection reasons for denied ledger mutations.

Every rejection must be:
- Deterministic (same ledger state + same input -> same rejection)
- Machine-readable (code)
- Human-readable (message, ready to show to the operator)
- Traceable to the policy that produced it (policy_name)

Rejections are returned to the caller, never raised past the guard.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a rejected operation.

    Fields:
        code:        Machine-readable rejection code (see ReasonCode).
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
        details:     Extra context for rendering (e.g. remaining stock).
    """

    code: str
    message: str
    policy_name: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
            "details": dict(self.details),
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Entry validation ──────────────────────────────────────
    INVALID_INPUT = "INVALID_INPUT"
    SALE_LOCKED = "SALE_LOCKED"
    STOCK_EXCEEDED = "STOCK_EXCEEDED"
    CLIENT_LIMIT_EXCEEDED = "CLIENT_LIMIT_EXCEEDED"
    EMPTY_EXCEEDS_FULL = "EMPTY_EXCEEDS_FULL"

    # ── Store / lookup ────────────────────────────────────────
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"

    # ── Infrastructure ────────────────────────────────────────
    DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
