"""
Pollo Control AI - Daily Report
=================================
Builds the pre-aggregated prompt for the end-of-day executive report
and hands it to a pluggable summarizer.

AI is advisory only: the summarizer receives text and returns prose.
Nothing here reads or writes ledger state beyond the providers it is
given, and the response is never parsed.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Protocol

import openai

from core.config.rules import DEFAULT_POLICY
from engines.ledger.metrics import compute_metrics, sum_metrics
from engines.ledger.models import ProviderStock

logger = logging.getLogger("pollo.ai")

DEFAULT_MODEL = "gpt-4o-mini"
API_KEY_ENV = "OPENAI_API_KEY"

API_KEY_MISSING_MESSAGE = "Error: API Key no configurada."
REPORT_FAILED_MESSAGE = "No se pudo generar el reporte en este momento."


# ══════════════════════════════════════════════════════════════
# PROMPT
# ══════════════════════════════════════════════════════════════

def _provider_block(provider: ProviderStock, default_tare_kg: float) -> List[str]:
    per_sale = [
        compute_metrics(sale, provider.chickens_per_crate, default_tare_kg)
        for sale in provider.sales
    ]
    totals = sum_metrics(per_sale)
    lines = [
        f"Proveedor: {provider.name}",
        f"- Stock Inicial Jabas: {provider.initial_full_crates}",
        f"- Jabas Vendidas: {totals.full_count}",
        f"- Stock Restante: {provider.initial_full_crates - totals.full_count}",
        "",
    ]
    for sale, m in zip(provider.sales, per_sale):
        lines += [
            f"  Cliente: {sale.client_name}",
            f"  - Jabas Llevadas: {m.full_count}",
            f"  - Peso Bruto: {m.full_weight:.2f} kg",
            f"  - Tara Total: {m.total_tare:.2f} kg",
            f"  - Peso Muertos: {m.dead_weight:.2f} kg ({m.dead_count} und)",
            f"  - Peso Neto Final: {m.net_weight:.2f} kg",
            "",
        ]
    return lines


def build_daily_report_prompt(
    providers: Iterable[ProviderStock],
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> str:
    """Plain-text prompt with stock and per-client gross/tare/mortality/net."""
    data: List[str] = []
    for provider in providers:
        data += _provider_block(provider, default_tare_kg)

    return "\n".join([
        "Actúa como un experto en logística avícola. Genera un breve reporte "
        "ejecutivo en texto plano basado en los siguientes datos del día.",
        "",
        "Ventas (Nota: El Peso Neto ya tiene descontado la tara y el peso "
        "de los pollos muertos):",
        "",
        *data,
        "Por favor provee:",
        "1. Un resumen del total vendido (peso neto y cantidad de jabas) vs stock inicial.",
        "2. Análisis de mermas (pollos muertos y su impacto en el peso).",
        "3. Una conclusión breve sobre la eficiencia del día.",
        "Mantén el tono profesional.",
    ])


# ══════════════════════════════════════════════════════════════
# SUMMARIZER
# ══════════════════════════════════════════════════════════════

class Summarizer(Protocol):
    """Turns a prompt into prose. May raise; callers downgrade failures."""

    def summarize(self, prompt: str) -> str:
        ...  # pragma: no cover


class OpenAISummarizer:
    """Chat-completions backed summarizer."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        client: Optional[openai.OpenAI] = None,
    ) -> None:
        if not api_key and client is None:
            raise ValueError("api_key must be non-empty.")
        self._client = client or openai.OpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    @classmethod
    def from_env(cls, model: str = DEFAULT_MODEL) -> Optional[OpenAISummarizer]:
        """None when OPENAI_API_KEY is not set."""
        api_key = os.getenv(API_KEY_ENV)
        if not api_key:
            return None
        return cls(api_key=api_key, model=model)

    def summarize(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""


def generate_daily_report(
    providers: Iterable[ProviderStock],
    summarizer: Optional[Summarizer],
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> str:
    """
    Prose report for the day's providers.

    Never raises: a missing summarizer yields the configuration
    message, any summarizer failure yields the fixed apology.
    """
    if summarizer is None:
        logger.error("Daily report requested without a configured API key.")
        return API_KEY_MISSING_MESSAGE

    prompt = build_daily_report_prompt(providers, default_tare_kg)
    try:
        return summarizer.summarize(prompt)
    except Exception as exc:
        logger.error(f"Daily report generation failed: {exc}", exc_info=True)
        return REPORT_FAILED_MESSAGE
