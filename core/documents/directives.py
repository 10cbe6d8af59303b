"""
Pollo Control Documents - Printer Directives
==============================================
Logical control directives for receipt-style thermal printers and
their ESC/POS byte sequences.

Doctrine:
- A directive is substituted verbatim where it is invoked.
- Directives are stateful and never de-duplicated (BOLD_ON twice is
  valid and means the same as once).
- Every directive sequence can be stripped back out, leaving a
  readable plain-text rendering.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict

ESC = "\x1b"
GS = "\x1d"


class Directive(Enum):
    INIT = "INIT"                    # reset device state
    BOLD_ON = "BOLD_ON"
    BOLD_OFF = "BOLD_OFF"
    ALIGN_CENTER = "ALIGN_CENTER"
    ALIGN_LEFT = "ALIGN_LEFT"
    CUT = "CUT"                      # finalize and cut paper


DIRECTIVE_CODES: Dict[Directive, str] = {
    Directive.INIT: ESC + "@",
    Directive.BOLD_ON: ESC + "E\x01",
    Directive.BOLD_OFF: ESC + "E\x00",
    Directive.ALIGN_CENTER: ESC + "a\x01",
    Directive.ALIGN_LEFT: ESC + "a\x00",
    Directive.CUT: GS + "VA\x00",
}


def code_for(directive: Directive) -> str:
    return DIRECTIVE_CODES[directive]


# Longest sequences first so "ESC E 1" is not consumed as a lone ESC.
_DIRECTIVE_RE = re.compile(
    "|".join(
        re.escape(code)
        for code in sorted(DIRECTIVE_CODES.values(), key=len, reverse=True)
    )
)
# Residual C0 controls and DEL. Newline and tab are layout, not control.
_RESIDUAL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def strip_control(text: str) -> str:
    """Remove every directive sequence, then any stray control byte."""
    return _RESIDUAL_RE.sub("", _DIRECTIVE_RE.sub("", text))
