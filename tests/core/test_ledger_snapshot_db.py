"""
Pollo Control - Django Snapshot Store Tests
=============================================
DjangoSnapshotStore against the test database, and a ledger
reloaded from it.
"""

from datetime import datetime, timezone

import pytest

from core.config.rules import AppConfig, PrinterType, SnapshotConfigStore
from core.ledger_store.models import LedgerSnapshot
from core.ledger_store.repository import DjangoSnapshotStore
from core.time.clock import TickingClock
from engines.ledger.models import EntryKind
from engines.ledger.services import LedgerStore

pytestmark = pytest.mark.django_db(transaction=True)

T0 = datetime(2026, 3, 2, 6, 0, 0, tzinfo=timezone.utc)


class TestDjangoSnapshotStore:
    def test_missing_key(self):
        assert DjangoSnapshotStore().load("nothing") is None

    def test_save_is_upsert(self):
        store = DjangoSnapshotStore()
        store.save("k", "one")
        store.save("k", "two")
        assert store.load("k") == "two"
        assert LedgerSnapshot.objects.filter(key="k").count() == 1

    def test_delete(self):
        store = DjangoSnapshotStore()
        store.save("k", "blob")
        store.delete("k")
        store.delete("k")
        assert store.load("k") is None


class TestLedgerOverDatabase:
    def test_reload_reproduces_ledger(self):
        snapshots = DjangoSnapshotStore()
        store = LedgerStore(snapshots, clock=TickingClock(T0))
        provider = store.create_provider("Granja Norte", 50).value
        sale = store.create_sale(provider.id, "Rosa", 10).value
        store.add_entry(provider.id, sale.id, EntryKind.FULL, 52.4, 10)
        store.add_entry(provider.id, sale.id, EntryKind.EMPTY, 21.0, 10)
        store.toggle_lock(provider.id, sale.id)

        reloaded = LedgerStore(snapshots)
        reloaded.load()
        assert reloaded.serialize() == store.serialize()

        again = reloaded.get_sale(provider.id, sale.id)
        assert again.is_completed is True
        assert reloaded.sale_metrics(reloaded.get_provider(provider.id), again).net_weight == pytest.approx(31.4)

    def test_config_and_providers_use_separate_rows(self):
        snapshots = DjangoSnapshotStore()
        store = LedgerStore(snapshots, clock=TickingClock(T0))
        store.create_provider("Granja Norte", 50)
        config = SnapshotConfigStore(snapshots, store.policy.config_key)
        config.save_app_config(AppConfig(printer_type=PrinterType.SYSTEM))

        keys = set(LedgerSnapshot.objects.values_list("key", flat=True))
        assert keys == {store.policy.providers_key, store.policy.config_key}
        assert config.get_app_config().printer_type is PrinterType.SYSTEM
