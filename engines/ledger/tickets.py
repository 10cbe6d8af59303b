"""
Pollo Control Ledger Engine - Sale and Provider Tickets
=========================================================
Encodes sale and provider snapshots as thermal-printer tickets.

Layout (both kinds):
    INIT -> centered header -> separator -> left-aligned fields
    -> bold net-weight footer -> feed -> CUT

Weights print with 2 decimals, the per-bird average with 3, counts
as integers. Provider totals are the field-by-field sum of the
per-sale metrics passed in, so the footer equals the sum of the
per-client lines.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from core.documents.builder import Ticket, TicketBuilder
from engines.ledger.metrics import SaleMetrics, sum_metrics
from engines.ledger.models import ProviderStock, SaleLedger

TITLE = "POLLO CONTROL PRO"
CLIENT_COLUMN_WIDTH = 14


def format_timestamp(dt: datetime) -> str:
    return dt.strftime("%d/%m/%Y %H:%M")


def encode_sale_ticket(
    provider: ProviderStock,
    sale: SaleLedger,
    metrics: SaleMetrics,
    *,
    printed_at: Optional[datetime] = None,
) -> Ticket:
    """Per-client ticket. Dated by printed_at, else by sale creation."""
    status = "(VENTA CERRADA)" if sale.is_completed else "(PENDIENTE)"
    m = metrics

    return (
        TicketBuilder()
        .init()
        .center()
        .bold_line(TITLE)
        .line(f"PROVEEDOR: {provider.name.upper()}")
        .separator()
        .line(f"CLIENTE: {sale.client_name.upper()}")
        .line(f"FECHA: {format_timestamp(printed_at or sale.created_at)}")
        .line(status)
        .separator()
        .left()
        .field("Jabas Solicitadas", sale.target_full_crates)
        .field("Jabas Llenas", m.full_count)
        .field("Peso Bruto", f"{m.full_weight:.2f} kg")
        .field("Jabas Vacias", m.empty_count)
        .field("Tara (Prom)", f"{m.avg_tare:.2f} kg")
        .field("Tara Total", f"{m.total_tare:.2f} kg")
        .field("Muertos", f"{m.dead_count} und")
        .field("Peso Muertos", f"{m.dead_weight:.2f} kg")
        .separator()
        .bold_line(f"PESO NETO: {m.net_weight:.2f} kg")
        .field("Prom. Pollo", f"{m.avg_weight_per_bird:.3f} kg")
        .separator()
        .feed()
        .cut()
        .build()
    )


def encode_provider_ticket(
    provider: ProviderStock,
    sale_metrics: Sequence[SaleMetrics],
    *,
    printed_at: datetime,
) -> Ticket:
    """
    Provider summary ticket.

    sale_metrics must be aligned with provider.sales (one per sale,
    same order).
    """
    if len(sale_metrics) != len(provider.sales):
        raise ValueError(
            f"Expected {len(provider.sales)} sale metrics, got {len(sale_metrics)}."
        )
    totals = sum_metrics(sale_metrics)

    builder = (
        TicketBuilder()
        .init()
        .center()
        .bold_line("RESUMEN DE PROVEEDOR")
        .line(provider.name.upper())
        .line(format_timestamp(printed_at))
        .separator()
        .left()
        .field("Total Ventas", len(provider.sales), 16)
        .field("Stock Inicial", f"{provider.initial_full_crates} Jabas", 16)
        .field("Jabas Vendidas", totals.full_count, 16)
        .field("Stock Actual", provider.initial_full_crates - totals.full_count, 16)
        .separator()
    )

    for sale, m in zip(provider.sales, sale_metrics):
        client = sale.client_name[:CLIENT_COLUMN_WIDTH]
        builder.line(
            f"{client:<{CLIENT_COLUMN_WIDTH}} {m.full_count:>3}j {m.net_weight:>9.2f}"
        )

    return (
        builder
        .separator()
        .field("Peso Bruto Tot", f"{totals.full_weight:.2f} kg", 16)
        .field("Tara Total", f"{totals.total_tare:.2f} kg", 16)
        .field("Muertos Total", f"{totals.dead_count} u / {totals.dead_weight:.2f} kg", 16)
        .separator()
        .bold_line(f"NETO TOTAL: {totals.net_weight:.2f} kg")
        .field("PROMEDIO POLLO", f"{totals.avg_weight_per_bird:.3f} kg", 16)
        .separator()
        .feed()
        .cut()
        .build()
    )
