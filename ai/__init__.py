"""
Pollo Control AI Module - Advisory Only
=========================================
AI components are advisory only. AI CANNOT mutate the ledger.
The daily report reads providers, builds a prompt and returns prose.
"""

from ai.reporting import (
    OpenAISummarizer,
    Summarizer,
    build_daily_report_prompt,
    generate_daily_report,
)

__all__ = [
    "Summarizer",
    "OpenAISummarizer",
    "build_daily_report_prompt",
    "generate_daily_report",
]
