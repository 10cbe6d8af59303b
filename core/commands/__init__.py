"""
Pollo Control Command Layer - Public API
==========================================
Every rejected ledger mutation is explained by a RejectionReason.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
