"""
Tests - Scale Reading Adapter
===============================
Payload parsing, simulated/fixed readers, device reader with fallback.
"""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone

import pytest

from core.config.rules import LedgerPolicy
from core.time.clock import FixedClock
from integration.adapters import Direction
from integration.audit_log import STATUS_FAILED, STATUS_FALLBACK, STATUS_SUCCESS, IntegrationAuditLog
from integration.inbound import (
    DeviceScaleReader,
    FixedScaleReader,
    SimulatedScaleReader,
    build_scale_reader,
    parse_weight,
)


# ── Test Doubles ─────────────────────────────────────────────

T0 = datetime(2026, 3, 2, 6, 0, 0, tzinfo=timezone.utc)


class FakeScale:
    """Notifying characteristic; push() plays the scale sending data."""

    def __init__(self, connected: bool = True, fail_subscribe: bool = False):
        self.is_connected = connected
        self._fail = fail_subscribe
        self._callback = None

    async def start_notifications(self, callback):
        if self._fail:
            raise RuntimeError("GATT error 133")
        self._callback = callback

    def push(self, data: bytes) -> None:
        self._callback(data)


def _device_reader(scale, audit=None, fallback_value=99.0):
    return DeviceScaleReader(
        scale,
        fallback=FixedScaleReader(fallback_value),
        audit_log=audit,
        clock=FixedClock(T0),
    )


# ── Parsing ──────────────────────────────────────────────────

class TestParseWeight:
    @pytest.mark.parametrize("payload,expected", [
        (b"ST,GS,+  10.50kg\r\n", 10.5),
        ("W: 23.4 kg", 23.4),
        (b"-3", -3.0),
        ("+7", 7.0),
        ("12.", 12.0),
        ("peso 1.25.3", 1.25),
        (b"\xff\xfe 42.10", 42.1),
    ])
    def test_first_number_wins(self, payload, expected):
        assert parse_weight(payload) == pytest.approx(expected)

    @pytest.mark.parametrize("payload", [b"", "no data", b"kg", "-."])
    def test_no_number(self, payload):
        assert parse_weight(payload) is None


# ── Simple Readers ───────────────────────────────────────────

class TestSimulatedScaleReader:
    def test_within_range_and_two_decimals(self):
        reader = SimulatedScaleReader(10.0, 30.0, rng=random.Random(3))
        for _ in range(50):
            value = asyncio.run(reader.read_weight())
            assert 10.0 <= value <= 30.0
            assert value == round(value, 2)

    def test_seeded_is_deterministic(self):
        a = SimulatedScaleReader(rng=random.Random(42))
        b = SimulatedScaleReader(rng=random.Random(42))
        assert asyncio.run(a.read_weight()) == asyncio.run(b.read_weight())

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError, match="inverted"):
            SimulatedScaleReader(30.0, 10.0)


class TestFixedScaleReader:
    def test_constant(self):
        reader = FixedScaleReader(12)
        assert asyncio.run(reader.read_weight()) == 12.0
        assert reader.reader_id == "scale.fixed"


# ── Device Reader ────────────────────────────────────────────

class TestDeviceScaleReader:
    def test_reads_last_payload(self):
        scale = FakeScale()
        audit = IntegrationAuditLog()
        reader = _device_reader(scale, audit)

        async def scenario():
            assert await reader.connect() is True
            scale.push(b"+  10.00kg")
            scale.push(b"+  24.35kg")
            return await reader.read_weight()

        assert asyncio.run(scenario()) == pytest.approx(24.35)
        entry = audit.entries[-1]
        assert entry.status == STATUS_SUCCESS
        assert entry.direction == Direction.INBOUND
        assert entry.occurred_at == T0
        assert entry.payload_hash

    def test_no_payload_yet_uses_fallback(self):
        reader = _device_reader(FakeScale())

        async def scenario():
            await reader.connect()
            return await reader.read_weight()

        assert asyncio.run(scenario()) == 99.0

    def test_garbage_payload_uses_fallback(self):
        scale = FakeScale()
        audit = IntegrationAuditLog()
        reader = _device_reader(scale, audit)

        async def scenario():
            await reader.connect()
            scale.push(b"ERR")
            return await reader.read_weight()

        assert asyncio.run(scenario()) == 99.0
        assert audit.entries[-1].status == STATUS_FALLBACK

    def test_disconnected_uses_fallback(self):
        scale = FakeScale()
        reader = _device_reader(scale)

        async def scenario():
            await reader.connect()
            scale.push(b"15.00")
            scale.is_connected = False
            return await reader.read_weight()

        assert asyncio.run(scenario()) == 99.0

    def test_not_subscribed_uses_fallback(self):
        reader = _device_reader(FakeScale())
        reader.on_notification(b"15.00")
        assert asyncio.run(reader.read_weight()) == 99.0

    def test_subscribe_failure_is_logged_not_raised(self, caplog):
        audit = IntegrationAuditLog()
        reader = _device_reader(FakeScale(fail_subscribe=True), audit)

        async def scenario():
            ok = await reader.connect()
            return ok, await reader.read_weight()

        ok, value = asyncio.run(scenario())
        assert ok is False
        assert value == 99.0
        assert "subscription failed" in caplog.text
        failures = audit.query_failures()
        assert len(failures) == 1
        assert failures[0].operation == "scale.subscribe"
        assert failures[0].error_message == "GATT error 133"


# ── Strategy Selection ───────────────────────────────────────

class TestBuildScaleReader:
    def test_no_characteristic_gives_simulation(self):
        policy = LedgerPolicy(simulation_range_kg=(12.0, 14.0))
        reader = build_scale_reader(policy)
        assert isinstance(reader, SimulatedScaleReader)
        assert reader.range_kg == (12.0, 14.0)

    def test_simulate_flag_wins(self):
        reader = build_scale_reader(characteristic=FakeScale(), simulate=True)
        assert isinstance(reader, SimulatedScaleReader)

    def test_device_reader_falls_back_to_policy_range(self):
        policy = LedgerPolicy(simulation_range_kg=(12.0, 14.0))
        reader = build_scale_reader(policy, FakeScale(connected=False), rng=random.Random(1))
        assert isinstance(reader, DeviceScaleReader)

        async def scenario():
            await reader.connect()
            return await reader.read_weight()

        assert 12.0 <= asyncio.run(scenario()) <= 14.0


# ── Audit Log Bound ──────────────────────────────────────────

class TestAuditLogBound:
    def test_polling_keeps_only_newest_entries(self):
        scale = FakeScale()
        audit = IntegrationAuditLog(max_entries=5)
        reader = _device_reader(scale, audit)

        async def scenario():
            await reader.connect()
            for i in range(20):
                scale.push(f"{i}.00".encode())
                await reader.read_weight()

        asyncio.run(scenario())
        assert len(audit.entries) == 5
        assert audit.max_entries == 5
        assert all(e.status == STATUS_SUCCESS for e in audit.entries)

    def test_default_cap(self):
        assert IntegrationAuditLog().max_entries == 1000

    def test_cap_must_be_positive(self):
        with pytest.raises(ValueError, match="max_entries"):
            IntegrationAuditLog(max_entries=0)
