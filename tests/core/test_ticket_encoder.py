"""
Pollo Control - Ticket Encoder Tests
======================================
Printer directives, the ticket builder and the print HTML page.
"""

import pytest

from core.documents import DIRECTIVE_CODES, Directive, Ticket, TicketBuilder, strip_control
from core.documents.renderer import render_print_html

INIT = "\x1b@"
BOLD_ON = "\x1bE\x01"
BOLD_OFF = "\x1bE\x00"
CENTER = "\x1ba\x01"
LEFT = "\x1ba\x00"
CUT = "\x1dVA\x00"


# ══════════════════════════════════════════════════════════════
# DIRECTIVES
# ══════════════════════════════════════════════════════════════

class TestDirectives:
    def test_escpos_sequences(self):
        assert DIRECTIVE_CODES[Directive.INIT] == INIT
        assert DIRECTIVE_CODES[Directive.BOLD_ON] == BOLD_ON
        assert DIRECTIVE_CODES[Directive.BOLD_OFF] == BOLD_OFF
        assert DIRECTIVE_CODES[Directive.ALIGN_CENTER] == CENTER
        assert DIRECTIVE_CODES[Directive.ALIGN_LEFT] == LEFT
        assert DIRECTIVE_CODES[Directive.CUT] == CUT

    def test_every_directive_has_a_code(self):
        assert set(DIRECTIVE_CODES) == set(Directive)

    def test_strip_control_removes_directives(self):
        text = f"{INIT}{CENTER}{BOLD_ON}HOLA{BOLD_OFF}\nfin\t1{CUT}"
        assert strip_control(text) == "HOLA\nfin\t1"

    def test_strip_control_removes_stray_bytes(self):
        assert strip_control("a\x1bb\x07c\x7f") == "abc"


# ══════════════════════════════════════════════════════════════
# BUILDER
# ══════════════════════════════════════════════════════════════

class TestTicketBuilder:
    def test_directives_are_substituted_in_order(self):
        ticket = TicketBuilder().init().center().bold_line("X").left().cut().build()
        assert ticket.text == f"{INIT}{CENTER}{BOLD_ON}X{BOLD_OFF}\n{LEFT}{CUT}"

    def test_repeated_directives_are_kept(self):
        builder = TicketBuilder()
        builder.directive(Directive.BOLD_ON).directive(Directive.BOLD_ON)
        assert builder.build().text == BOLD_ON * 2

    def test_field_pads_label(self):
        ticket = TicketBuilder().field("Peso", "1.00 kg", 8).build()
        assert ticket.text == "Peso:   1.00 kg\n"

    def test_separator_uses_width(self):
        assert TicketBuilder(width=10).separator().build().text == "-" * 10 + "\n"

    def test_feed(self):
        assert TicketBuilder().feed().build().text == "\n\n\n"

    def test_bytes_are_utf8(self):
        ticket = Ticket(text="JABAS VACÍAS")
        assert ticket.to_bytes() == "JABAS VACÍAS".encode("utf-8")


# ══════════════════════════════════════════════════════════════
# PRINT HTML
# ══════════════════════════════════════════════════════════════

class TestPrintHtml:
    def test_document_shape(self):
        ticket = (
            TicketBuilder().init().center().bold_line("PESO NETO: 28.80 kg").cut().build()
        )
        page = render_print_html(ticket, title="Venta")
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Venta</title>" in page
        assert "@media print" in page
        assert "\x1b" not in page
        assert "PESO NETO: 28.80 kg" in page

    def test_content_is_escaped(self):
        page = render_print_html(Ticket(text="CLIENTE: <b>&Co</b>\n"))
        assert "&lt;b&gt;&amp;Co&lt;/b&gt;" in page
        assert "<b>" not in page

    def test_deterministic(self):
        ticket = Ticket(text="X\n")
        assert render_print_html(ticket) == render_print_html(ticket)

    def test_rejects_non_ticket(self):
        with pytest.raises(ValueError):
            render_print_html("plain text")
