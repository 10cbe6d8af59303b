"""
Pollo Control Documents - Renderer Public API
===============================================
"""

from core.documents.renderer.html_renderer import render_print_html

__all__ = [
    "render_print_html",
]
