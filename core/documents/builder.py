"""
Pollo Control Documents - Ticket Builder
==========================================
Accumulates text lines and printer directives into a Ticket.

The builder is sink-agnostic: it never talks to a device. A Ticket
is the finished stream, with a byte form for the printer and a
stripped preview for the screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from core.documents.directives import Directive, code_for, strip_control

TICKET_WIDTH = 32
LABEL_WIDTH = 19
FEED_LINES = 3


@dataclass(frozen=True)
class Ticket:
    """Encoded ticket: UTF-8 text with embedded directives."""

    text: str

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")

    def preview(self) -> str:
        return strip_control(self.text)


class TicketBuilder:
    """
    Fluent ticket assembly.

    Usage:
        ticket = (
            TicketBuilder()
            .init()
            .center().bold_line("POLLO CONTROL PRO")
            .separator()
            .left().field("Jabas Llenas", 10)
            .feed().cut()
            .build()
        )
    """

    def __init__(self, width: int = TICKET_WIDTH) -> None:
        self._width = width
        self._parts: List[str] = []

    def directive(self, directive: Directive) -> TicketBuilder:
        self._parts.append(code_for(directive))
        return self

    def init(self) -> TicketBuilder:
        return self.directive(Directive.INIT)

    def center(self) -> TicketBuilder:
        return self.directive(Directive.ALIGN_CENTER)

    def left(self) -> TicketBuilder:
        return self.directive(Directive.ALIGN_LEFT)

    def cut(self) -> TicketBuilder:
        return self.directive(Directive.CUT)

    def line(self, text: str = "") -> TicketBuilder:
        self._parts.append(f"{text}\n")
        return self

    def bold_line(self, text: str) -> TicketBuilder:
        self.directive(Directive.BOLD_ON)
        self._parts.append(text)
        self.directive(Directive.BOLD_OFF)
        self._parts.append("\n")
        return self

    def field(self, label: str, value: object, label_width: int = LABEL_WIDTH) -> TicketBuilder:
        return self.line(f"{label + ':':<{label_width}}{value}")

    def separator(self) -> TicketBuilder:
        return self.line("-" * self._width)

    def feed(self, lines: int = FEED_LINES) -> TicketBuilder:
        self._parts.append("\n" * lines)
        return self

    def build(self) -> Ticket:
        return Ticket(text="".join(self._parts))
