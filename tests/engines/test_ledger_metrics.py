"""
Pollo Control - Ledger Metrics Tests
======================================
Tare, net weight and bird averages derived from a sale.
"""

from datetime import datetime, timezone

import pytest

from engines.ledger.metrics import MetricsTotals, compute_metrics, sum_metrics
from engines.ledger.models import Entry, EntryKind, SaleLedger

NOW = datetime(2026, 3, 2, 8, 0, 0, tzinfo=timezone.utc)


def _entry(kind: EntryKind, weight: float, count: int, n: int = 0) -> Entry:
    return Entry(id=f"e-{kind.value}-{n}", kind=kind, weight=weight, count=count, timestamp=NOW)


def _sale(full=(), empty=(), dead=(), target=50) -> SaleLedger:
    return SaleLedger(
        id="sale-1",
        client_name="Rosa",
        target_full_crates=target,
        created_at=NOW,
        full_crates=[_entry(EntryKind.FULL, w, c, i) for i, (w, c) in enumerate(full)],
        empty_crates=[_entry(EntryKind.EMPTY, w, c, i) for i, (w, c) in enumerate(empty)],
        mortality=[_entry(EntryKind.MORTALITY, w, c, i) for i, (w, c) in enumerate(dead)],
    )


# ══════════════════════════════════════════════════════════════
# UNIT: compute_metrics
# ══════════════════════════════════════════════════════════════

class TestComputeMetrics:
    def test_empty_sale_is_all_zero_with_default_tare(self):
        m = compute_metrics(_sale(), chickens_per_crate=9)
        assert m.full_weight == 0
        assert m.full_count == 0
        assert m.avg_tare == 2.5
        assert m.total_tare == 0
        assert m.net_weight == 0
        assert m.total_birds == 0
        assert m.avg_weight_per_bird == 0

    def test_default_tare_applies_without_empty_samples(self):
        m = compute_metrics(_sale(full=[(50.0, 10)]), chickens_per_crate=9)
        assert m.avg_tare == 2.5
        assert m.total_tare == pytest.approx(25.0)
        assert m.net_weight == pytest.approx(25.0)

    def test_default_tare_is_configurable(self):
        m = compute_metrics(_sale(full=[(50.0, 10)]), 9, default_tare_kg=3.0)
        assert m.total_tare == pytest.approx(30.0)

    def test_sampled_tare_replaces_default(self):
        m = compute_metrics(
            _sale(full=[(50.0, 10)], empty=[(12.0, 6), (8.0, 4)]),
            chickens_per_crate=9,
        )
        assert m.empty_weight == pytest.approx(20.0)
        assert m.empty_count == 10
        assert m.avg_tare == pytest.approx(2.0)
        assert m.total_tare == pytest.approx(20.0)
        assert m.net_weight == pytest.approx(30.0)

    def test_mortality_reduces_net_and_birds(self):
        m = compute_metrics(
            _sale(full=[(50.0, 10)], empty=[(20.0, 10)], dead=[(1.2, 2)]),
            chickens_per_crate=9,
        )
        assert m.dead_count == 2
        assert m.dead_weight == pytest.approx(1.2)
        assert m.total_birds == 88
        assert m.net_weight == pytest.approx(28.8)
        assert m.avg_weight_per_bird == pytest.approx(28.8 / 88)

    def test_net_weight_clamped_at_zero(self):
        # Heavy empties before gross catches up.
        m = compute_metrics(
            _sale(full=[(10.0, 2)], empty=[(30.0, 2)], dead=[(5.0, 3)]),
            chickens_per_crate=9,
        )
        assert m.net_weight == 0.0
        assert m.avg_weight_per_bird == 0.0

    def test_no_birds_means_zero_average(self):
        m = compute_metrics(
            _sale(full=[(30.0, 1)], dead=[(3.0, 9)]), chickens_per_crate=9,
        )
        assert m.total_birds == 0
        assert m.avg_weight_per_bird == 0.0

    def test_more_dead_than_birds_gives_negative_count_but_zero_average(self):
        m = compute_metrics(
            _sale(full=[(30.0, 1)], dead=[(3.0, 12)]), chickens_per_crate=9,
        )
        assert m.total_birds == -3
        assert m.avg_weight_per_bird == 0.0

    def test_recomputes_after_removal(self):
        sale = _sale(full=[(50.0, 10), (20.0, 4)])
        before = compute_metrics(_sale(full=[(50.0, 10)]), 9)
        sale.full_crates.pop()
        after = compute_metrics(sale, 9)
        assert after == before


# ══════════════════════════════════════════════════════════════
# UNIT: sum_metrics
# ══════════════════════════════════════════════════════════════

class TestSumMetrics:
    def test_empty_iterable(self):
        totals = sum_metrics([])
        assert totals == MetricsTotals()
        assert totals.avg_weight_per_bird == 0.0

    def test_field_by_field_sum(self):
        a = compute_metrics(_sale(full=[(50.0, 10)], empty=[(20.0, 10)]), 9)
        b = compute_metrics(_sale(full=[(30.0, 6)], dead=[(1.0, 1)]), 9)
        totals = sum_metrics([a, b])

        assert totals.sale_count == 2
        assert totals.full_count == 16
        assert totals.full_weight == pytest.approx(80.0)
        assert totals.total_tare == pytest.approx(a.total_tare + b.total_tare)
        assert totals.net_weight == pytest.approx(a.net_weight + b.net_weight)
        assert totals.total_birds == a.total_birds + b.total_birds
        assert totals.dead_count == 1
        assert totals.avg_weight_per_bird == pytest.approx(
            totals.net_weight / totals.total_birds
        )

    def test_totals_use_clamped_per_sale_net(self):
        clamped = compute_metrics(_sale(full=[(10.0, 2)], empty=[(30.0, 2)]), 9)
        normal = compute_metrics(_sale(full=[(50.0, 10)], empty=[(20.0, 10)]), 9)
        totals = sum_metrics([clamped, normal])
        assert clamped.net_weight == 0.0
        assert totals.net_weight == pytest.approx(normal.net_weight)
