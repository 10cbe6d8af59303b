"""
Pollo Control Documents - HTML Print Renderer
===============================================
Converts a Ticket into the HTML page handed to the system print path.

Doctrine:
- Control codes are stripped; only the preview text is rendered.
- All content is HTML-escaped (no injection from client names).
- Same ticket -> same HTML output (deterministic).
- No external dependencies (stdlib html.escape only).
"""

from __future__ import annotations

import html

from core.documents.builder import Ticket

_CSS = """
body { font-family: 'Courier New', Courier, monospace; margin: 0; padding: 8px; }
pre.ticket { font-size: 12px; line-height: 1.3; white-space: pre-wrap; width: 58mm; margin: 0; }
@media print {
  @page { margin: 0; size: 58mm auto; }
  body { padding: 0; }
}
"""


def render_print_html(ticket: Ticket, *, title: str = "Ticket") -> str:
    """Return a complete HTML document (DOCTYPE + html + head + body)."""
    if not isinstance(ticket, Ticket):
        raise ValueError("ticket must be a Ticket.")

    body = html.escape(ticket.preview(), quote=True)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title, quote=True)}</title>\n"
        f"<style>{_CSS}</style>\n"
        "</head>\n"
        "<body>\n"
        f'<pre class="ticket">{body}</pre>\n'
        "</body>\n"
        "</html>\n"
    )
