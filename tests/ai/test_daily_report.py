"""
Tests for ai.reporting - End-of-day report prompt and summarizers.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from ai.reporting import (
    API_KEY_ENV,
    API_KEY_MISSING_MESSAGE,
    DEFAULT_MODEL,
    REPORT_FAILED_MESSAGE,
    OpenAISummarizer,
    build_daily_report_prompt,
    generate_daily_report,
)
from core.ledger_store.ports import InMemorySnapshotStore
from core.time.clock import TickingClock
from engines.ledger.models import EntryKind
from engines.ledger.services import LedgerStore

NOW = datetime(2026, 3, 2, 6, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def providers():
    store = LedgerStore(InMemorySnapshotStore(), clock=TickingClock(NOW))
    north = store.create_provider("Granja Norte", 100).value
    sale = store.create_sale(north.id, "Rosa", 20).value
    store.add_entry(north.id, sale.id, EntryKind.FULL, 50.0, 10)
    store.add_entry(north.id, sale.id, EntryKind.EMPTY, 20.0, 10)
    store.add_entry(north.id, sale.id, EntryKind.MORTALITY, 1.2, 2)
    return store.providers


class EchoSummarizer:
    def __init__(self):
        self.prompts = []

    def summarize(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return "Reporte OK"


class BrokenSummarizer:
    def summarize(self, prompt: str) -> str:
        raise ConnectionError("upstream timeout")


def _fake_client(content="Resumen del día", calls=None):
    def create(**kwargs):
        if calls is not None:
            calls.append(kwargs)
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


# ── Prompt Tests ─────────────────────────────────────────────

class TestDailyReportPrompt:
    def test_contains_stock_and_client_figures(self, providers):
        prompt = build_daily_report_prompt(providers)
        assert "Proveedor: Granja Norte" in prompt
        assert "- Stock Inicial Jabas: 100" in prompt
        assert "- Jabas Vendidas: 10" in prompt
        assert "- Stock Restante: 90" in prompt
        assert "  Cliente: Rosa" in prompt
        assert "  - Peso Bruto: 50.00 kg" in prompt
        assert "  - Tara Total: 20.00 kg" in prompt
        assert "  - Peso Muertos: 1.20 kg (2 und)" in prompt
        assert "  - Peso Neto Final: 28.80 kg" in prompt

    def test_asks_for_three_sections(self, providers):
        prompt = build_daily_report_prompt(providers)
        assert "Por favor provee:" in prompt
        for marker in ("1. ", "2. ", "3. "):
            assert marker in prompt

    def test_default_tare_is_applied(self):
        store = LedgerStore(InMemorySnapshotStore(), clock=TickingClock(NOW))
        p = store.create_provider("Sur", 10).value
        s = store.create_sale(p.id, "Ana", 5).value
        store.add_entry(p.id, s.id, EntryKind.FULL, 30.0, 4)
        prompt = build_daily_report_prompt(store.providers, default_tare_kg=3.0)
        assert "  - Tara Total: 12.00 kg" in prompt
        assert "  - Peso Neto Final: 18.00 kg" in prompt


# ── Report Generation ────────────────────────────────────────

class TestGenerateDailyReport:
    def test_returns_summarizer_text(self, providers):
        summarizer = EchoSummarizer()
        assert generate_daily_report(providers, summarizer) == "Reporte OK"
        assert "Granja Norte" in summarizer.prompts[0]

    def test_missing_summarizer(self, providers):
        assert generate_daily_report(providers, None) == API_KEY_MISSING_MESSAGE

    def test_failure_gives_apology(self, providers, caplog):
        assert generate_daily_report(providers, BrokenSummarizer()) == REPORT_FAILED_MESSAGE
        assert "upstream timeout" in caplog.text


# ── OpenAI Summarizer ────────────────────────────────────────

class TestOpenAISummarizer:
    def test_calls_chat_completions(self):
        calls = []
        summarizer = OpenAISummarizer(api_key="", client=_fake_client(calls=calls))
        assert summarizer.summarize("hola") == "Resumen del día"
        assert calls == [{"model": DEFAULT_MODEL, "messages": [{"role": "user", "content": "hola"}]}]

    def test_empty_content_becomes_empty_string(self):
        summarizer = OpenAISummarizer(api_key="k", client=_fake_client(content=None))
        assert summarizer.summarize("hola") == ""

    def test_requires_key_without_client(self):
        with pytest.raises(ValueError, match="api_key"):
            OpenAISummarizer(api_key="")

    def test_from_env_without_key(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        assert OpenAISummarizer.from_env() is None

    def test_from_env_with_key(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "sk-test")
        assert isinstance(OpenAISummarizer.from_env(), OpenAISummarizer)
