"""
Pollo Control Ledger Engine - Metrics
=======================================
Pure derivation of tare, net weight and bird averages from a sale.

RULES:
- No side effects, no caching. Recompute on every read; entries are
  only ever appended or removed, so a recompute is always consistent.
- Every division is guarded. There are no error conditions.
- net_weight is clamped at zero.
- Aggregates across sales are built by summing per-sale metrics
  field by field, so a printed total always equals the sum of the
  printed lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from core.config.rules import DEFAULT_POLICY
from engines.ledger.models import EntryKind, SaleLedger


@dataclass(frozen=True)
class SaleMetrics:
    full_weight: float
    full_count: int
    empty_weight: float
    empty_count: int
    dead_count: int
    dead_weight: float
    avg_tare: float
    total_tare: float
    net_weight: float
    total_birds: int
    avg_weight_per_bird: float


def compute_metrics(
    sale: SaleLedger,
    chickens_per_crate: int,
    default_tare_kg: float = DEFAULT_POLICY.default_tare_kg,
) -> SaleMetrics:
    full_weight = sale.weight_of(EntryKind.FULL)
    full_count = sale.count_of(EntryKind.FULL)
    empty_weight = sale.weight_of(EntryKind.EMPTY)
    empty_count = sale.count_of(EntryKind.EMPTY)
    dead_count = sale.count_of(EntryKind.MORTALITY)
    dead_weight = sale.weight_of(EntryKind.MORTALITY)

    # No empty-crate samples yet: assume the policy tare.
    avg_tare = empty_weight / empty_count if empty_count > 0 else default_tare_kg
    total_tare = full_count * avg_tare
    net_weight = max(0.0, full_weight - total_tare - dead_weight)

    total_birds = full_count * chickens_per_crate - dead_count
    avg_weight_per_bird = net_weight / total_birds if total_birds > 0 else 0.0

    return SaleMetrics(
        full_weight=full_weight,
        full_count=full_count,
        empty_weight=empty_weight,
        empty_count=empty_count,
        dead_count=dead_count,
        dead_weight=dead_weight,
        avg_tare=avg_tare,
        total_tare=total_tare,
        net_weight=net_weight,
        total_birds=total_birds,
        avg_weight_per_bird=avg_weight_per_bird,
    )


@dataclass(frozen=True)
class MetricsTotals:
    """Field-by-field sum of several SaleMetrics."""

    sale_count: int = 0
    full_weight: float = 0.0
    full_count: int = 0
    empty_weight: float = 0.0
    empty_count: int = 0
    dead_count: int = 0
    dead_weight: float = 0.0
    total_tare: float = 0.0
    net_weight: float = 0.0
    total_birds: int = 0

    @property
    def avg_weight_per_bird(self) -> float:
        return self.net_weight / self.total_birds if self.total_birds > 0 else 0.0


def sum_metrics(metrics: Iterable[SaleMetrics]) -> MetricsTotals:
    totals = MetricsTotals()
    for m in metrics:
        totals = MetricsTotals(
            sale_count=totals.sale_count + 1,
            full_weight=totals.full_weight + m.full_weight,
            full_count=totals.full_count + m.full_count,
            empty_weight=totals.empty_weight + m.empty_weight,
            empty_count=totals.empty_count + m.empty_count,
            dead_count=totals.dead_count + m.dead_count,
            dead_weight=totals.dead_weight + m.dead_weight,
            total_tare=totals.total_tare + m.total_tare,
            net_weight=totals.net_weight + m.net_weight,
            total_birds=totals.total_birds + m.total_birds,
        )
    return totals
