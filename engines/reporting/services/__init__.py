"""
Pollo Control Reporting Engine - Summaries
============================================
Read-side aggregation over the provider tree.

This engine is READ ONLY:
- Nothing here mutates a provider, sale or entry.
- Every figure is derived from per-sale metrics, summed field by field.
- Calendar buckets use the sale's creation time in UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from core.config.rules import DEFAULT_POLICY
from core.time.temporal import day_key, month_key
from engines.ledger.metrics import MetricsTotals, SaleMetrics, compute_metrics, sum_metrics
from engines.ledger.models import ProviderStock

TOP_CLIENTS_LIMIT = 10


def provider_sale_metrics(
    provider: ProviderStock,
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> List[SaleMetrics]:
    """Metrics for each sale of provider, in sale order."""
    return [
        compute_metrics(sale, provider.chickens_per_crate, default_tare_kg)
        for sale in provider.sales
    ]


# ══════════════════════════════════════════════════════════════
# PROVIDER SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProviderSummary:
    provider_id: str
    name: str
    sale_count: int
    initial_stock: int
    sold: int
    remaining: int
    totals: MetricsTotals

    @property
    def avg_weight_per_bird(self) -> float:
        return self.totals.avg_weight_per_bird


def summarize_provider(
    provider: ProviderStock,
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> ProviderSummary:
    totals = sum_metrics(provider_sale_metrics(provider, default_tare_kg))
    return ProviderSummary(
        provider_id=provider.id,
        name=provider.name,
        sale_count=len(provider.sales),
        initial_stock=provider.initial_full_crates,
        sold=totals.full_count,
        remaining=provider.initial_full_crates - totals.full_count,
        totals=totals,
    )


# ══════════════════════════════════════════════════════════════
# GLOBAL SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass
class PeriodStats:
    """Crates sold, net weight and sale count in one calendar bucket."""
    key: str
    crates: int = 0
    net_weight: float = 0.0
    sale_count: int = 0


@dataclass(frozen=True)
class ProviderMortality:
    name: str
    dead_count: int
    dead_weight: float


@dataclass(frozen=True)
class GlobalSummary:
    """
    monthly is newest first, daily is oldest first (chart order).
    mortality_by_provider lists only providers with deaths.
    """

    provider_count: int
    total_stock: int
    total_sold: int
    total_net_weight: float
    total_dead: int
    monthly: List[PeriodStats] = field(default_factory=list)
    daily: List[PeriodStats] = field(default_factory=list)
    mortality_by_provider: List[ProviderMortality] = field(default_factory=list)
    top_clients: List[Tuple[str, float]] = field(default_factory=list)


def _bucket(buckets: Dict[str, PeriodStats], key: str, m: SaleMetrics) -> None:
    stats = buckets.setdefault(key, PeriodStats(key=key))
    stats.crates += m.full_count
    stats.net_weight += m.net_weight
    stats.sale_count += 1


def summarize_global(
    providers: Iterable[ProviderStock],
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> GlobalSummary:
    providers = list(providers)
    monthly: Dict[str, PeriodStats] = {}
    daily: Dict[str, PeriodStats] = {}
    mortality: List[ProviderMortality] = []
    clients: Dict[str, float] = {}
    total_sold = 0
    total_net = 0.0
    total_dead = 0

    for provider in providers:
        dead_count = 0
        dead_weight = 0.0
        for sale in provider.sales:
            m = compute_metrics(sale, provider.chickens_per_crate, default_tare_kg)
            _bucket(monthly, month_key(sale.created_at), m)
            _bucket(daily, day_key(sale.created_at), m)
            dead_count += m.dead_count
            dead_weight += m.dead_weight
            total_sold += m.full_count
            total_net += m.net_weight
            if m.net_weight > 0:
                clients[sale.client_name] = (
                    clients.get(sale.client_name, 0.0) + m.net_weight
                )
        total_dead += dead_count
        if dead_count > 0:
            mortality.append(ProviderMortality(provider.name, dead_count, dead_weight))

    top_clients = sorted(clients.items(), key=lambda kv: kv[1], reverse=True)

    return GlobalSummary(
        provider_count=len(providers),
        total_stock=sum(p.initial_full_crates for p in providers),
        total_sold=total_sold,
        total_net_weight=total_net,
        total_dead=total_dead,
        monthly=[monthly[k] for k in sorted(monthly, reverse=True)],
        daily=[daily[k] for k in sorted(daily)],
        mortality_by_provider=mortality,
        top_clients=top_clients[:TOP_CLIENTS_LIMIT],
    )
