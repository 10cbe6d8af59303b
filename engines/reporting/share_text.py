"""
Pollo Control Reporting Engine - Share Text
=============================================
Plain-text reports for pasting into messaging apps.

Asterisks mark bold in those apps. No printer control codes here;
tickets live in core.documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core.config.rules import DEFAULT_POLICY
from core.time.clock import get_default_clock
from engines.ledger.metrics import compute_metrics, sum_metrics
from engines.ledger.models import Entry, ProviderStock, SaleLedger

RULE = "-" * 32
WIDE_RULE = "-" * 35
CLIENT_COLUMN_WIDTH = 10


def format_date(dt: datetime) -> str:
    return dt.strftime("%d/%m/%Y")


def _entry_lines(entries: List[Entry], unit: str) -> List[str]:
    return [
        f"{i}. {e.weight:.2f} kg ({e.count}{unit})"
        for i, e in enumerate(entries, start=1)
    ]


def render_sale_detail_text(
    provider: ProviderStock,
    sale: SaleLedger,
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> str:
    """Every weighing of one sale, section by section, with the net total."""
    m = compute_metrics(sale, provider.chickens_per_crate, default_tare_kg)

    lines = [
        f"*📋 DETALLE DE PESAJE - {sale.client_name.upper()}*",
        f"Proveedor: {provider.name}",
        f"Fecha: {format_date(sale.created_at)}",
        RULE,
        f"📦 *JABAS LLENAS* ({m.full_count} und)",
        *_entry_lines(sale.full_crates, "j"),
        f"> Total Bruto: {m.full_weight:.2f} kg",
        "",
        f"♻️ *JABAS VACÍAS* ({m.empty_count} und)",
        *_entry_lines(sale.empty_crates, "j"),
        f"> Tara Prom: {m.avg_tare:.2f} kg",
        f"> Tara Total: {m.total_tare:.2f} kg",
        "",
        f"💀 *MORTALIDAD* ({m.dead_count} und)",
        *_entry_lines(sale.mortality, "u"),
        f"> Peso Muerto: {m.dead_weight:.2f} kg",
        RULE,
        f"*⚖️ PESO NETO FINAL: {m.net_weight:.2f} KG*",
    ]
    return "\n".join(lines)


def render_provider_report_text(
    provider: ProviderStock,
    report_date: Optional[datetime] = None,
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> str:
    """One row per client plus grand totals (rows at 1 decimal, totals at 2)."""
    report_date = report_date or get_default_clock().now_utc()

    lines = [
        f"*📊 REPORTE GENERAL - {provider.name.upper()}*",
        f"Fecha: {format_date(report_date)}",
        WIDE_RULE,
        "CLIENTE | BRUTO | TARA | MUERTOS | NETO",
        WIDE_RULE,
    ]

    per_sale = []
    for sale in provider.sales:
        m = compute_metrics(sale, provider.chickens_per_crate, default_tare_kg)
        per_sale.append(m)
        client = sale.client_name.ljust(CLIENT_COLUMN_WIDTH)[:CLIENT_COLUMN_WIDTH]
        lines.append(
            f"{client} | {m.full_weight:.1f} | {m.total_tare:.1f} | "
            f"{m.dead_weight:.1f} | *{m.net_weight:.1f}*"
        )

    totals = sum_metrics(per_sale)
    lines += [
        WIDE_RULE,
        "*TOTALES GENERALES*",
        f"Jabas Vendidas: {totals.full_count}",
        f"Peso Bruto:     {totals.full_weight:.2f} kg",
        f"Tara Total:     {totals.total_tare:.2f} kg",
        f"Peso Muertos:   {totals.dead_weight:.2f} kg",
        f"*PESO NETO:*    *{totals.net_weight:.2f} KG*",
    ]
    return "\n".join(lines)
