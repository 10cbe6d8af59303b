"""
Pollo Control Documents - Public API
======================================
"""

from core.documents.builder import Ticket, TicketBuilder
from core.documents.directives import (
    DIRECTIVE_CODES,
    Directive,
    strip_control,
)

__all__ = [
    "Directive",
    "DIRECTIVE_CODES",
    "strip_control",
    "Ticket",
    "TicketBuilder",
]
