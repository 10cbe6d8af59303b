"""
Pollo Control Integration - Scale Reading Adapter
===================================================
Turns raw scale payloads into kilogram values.

Doctrine: A scale read never raises.
Real readings come from the last notification payload of a connected
scale; when there is no device, no payload, or no number in the
payload, the reader delegates to an injected fallback strategy
(simulation by default). The strategy is chosen explicitly by
build_scale_reader, never by catching exceptions at read time.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Union

from core.config.rules import DEFAULT_POLICY, LedgerPolicy
from core.time.clock import Clock, get_default_clock
from integration.adapters import Direction, ScaleCharacteristic, payload_hash
from integration.audit_log import (
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_SUCCESS,
    IntegrationAuditLog,
)

logger = logging.getLogger("pollo.devices")

_NUMBER_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")


def parse_weight(payload: Union[bytes, str]) -> Optional[float]:
    """
    First signed-or-unsigned decimal anywhere in the payload.

        "ST,GS,+  10.50kg" -> 10.5
        "-3"               -> -3.0
        "no data"          -> None
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    match = _NUMBER_RE.search(payload)
    return float(match.group(0)) if match else None


# ══════════════════════════════════════════════════════════════
# READER STRATEGIES
# ══════════════════════════════════════════════════════════════

class ScaleReader(ABC):
    """Base class for scale reading strategies."""

    @property
    @abstractmethod
    def reader_id(self) -> str:
        ...

    @abstractmethod
    async def read_weight(self) -> float:
        """Current weight in kilograms. Must not raise."""
        ...


class SimulatedScaleReader(ScaleReader):
    """
    Uniform pseudo-random weight in a plausible crate range.

    Pass a seeded random.Random for deterministic tests.
    """

    def __init__(
        self,
        low: float = DEFAULT_POLICY.simulation_range_kg[0],
        high: float = DEFAULT_POLICY.simulation_range_kg[1],
        rng: Optional[random.Random] = None,
    ) -> None:
        if high < low:
            raise ValueError(f"Simulation range inverted: {low} > {high}.")
        self._low = low
        self._high = high
        self._rng = rng or random.Random()

    @property
    def reader_id(self) -> str:
        return "scale.simulated"

    @property
    def range_kg(self) -> Tuple[float, float]:
        return self._low, self._high

    async def read_weight(self) -> float:
        return round(self._rng.uniform(self._low, self._high), 2)


class FixedScaleReader(ScaleReader):
    """Always the same value (tests, manual entry)."""

    def __init__(self, value: float) -> None:
        self._value = float(value)

    @property
    def reader_id(self) -> str:
        return "scale.fixed"

    async def read_weight(self) -> float:
        return self._value


class DeviceScaleReader(ScaleReader):
    """
    Reads the last payload delivered by a scale characteristic.

    Calls are serialized: one read at a time per device.
    """

    def __init__(
        self,
        characteristic: ScaleCharacteristic,
        fallback: ScaleReader,
        device_id: str = "scale.device",
        audit_log: Optional[IntegrationAuditLog] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._characteristic = characteristic
        self._fallback = fallback
        self._device_id = device_id
        self._audit = audit_log
        self._clock = clock or get_default_clock()
        self._lock = asyncio.Lock()
        self._last_payload: Optional[bytes] = None
        self._subscribed = False

    @property
    def reader_id(self) -> str:
        return self._device_id

    @property
    def last_payload(self) -> Optional[bytes]:
        return self._last_payload

    def on_notification(self, data: bytes) -> None:
        """Notification callback: keep only the latest payload."""
        self._last_payload = bytes(data)

    async def connect(self) -> bool:
        """Subscribe to notifications. Returns False (logged) on failure."""
        async with self._lock:
            try:
                await self._characteristic.start_notifications(self.on_notification)
            except Exception as exc:
                logger.error(
                    f"Scale {self._device_id} subscription failed: {exc}",
                    exc_info=True,
                )
                self._audit_record(STATUS_FAILED, error=exc)
                return False
            self._subscribed = True
            logger.info(f"Scale {self._device_id} subscribed.")
            return True

    async def read_weight(self) -> float:
        async with self._lock:
            payload = self._last_payload
            connected = self._is_connected()

            if connected and payload is not None:
                value = parse_weight(payload)
                if value is not None:
                    self._audit_record(STATUS_SUCCESS, payload=payload)
                    return value
                logger.warning(
                    f"Scale {self._device_id} payload has no number: {payload!r}"
                )
            elif not connected:
                logger.info(f"Scale {self._device_id} not connected, using fallback.")

            value = await self._fallback.read_weight()
            self._audit_record(STATUS_FALLBACK, payload=payload)
            return value

    def _is_connected(self) -> bool:
        try:
            return bool(self._subscribed and self._characteristic.is_connected)
        except Exception as exc:
            logger.error(
                f"Scale {self._device_id} state unreadable: {exc}", exc_info=True,
            )
            return False

    def _audit_record(
        self,
        status: str,
        payload: Optional[bytes] = None,
        error: Optional[Exception] = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(
            device_id=self._device_id,
            direction=Direction.INBOUND,
            operation="scale.read" if error is None else "scale.subscribe",
            status=status,
            occurred_at=self._clock.now_utc(),
            payload_hash=payload_hash(payload) if payload else "",
            error_code="DEVICE_ERROR" if error is not None else None,
            error_message=str(error) if error is not None else None,
        )


# ══════════════════════════════════════════════════════════════
# STRATEGY SELECTION
# ══════════════════════════════════════════════════════════════

def build_scale_reader(
    policy: LedgerPolicy = DEFAULT_POLICY,
    characteristic: Optional[ScaleCharacteristic] = None,
    *,
    simulate: bool = False,
    rng: Optional[random.Random] = None,
    audit_log: Optional[IntegrationAuditLog] = None,
    clock: Optional[Clock] = None,
) -> ScaleReader:
    """
    Simulation when configured or when no characteristic is given;
    otherwise a device reader backed by the simulation.

    A DeviceScaleReader returned here still needs connect().
    """
    low, high = policy.simulation_range_kg
    simulated = SimulatedScaleReader(low, high, rng=rng)
    if simulate or characteristic is None:
        return simulated
    return DeviceScaleReader(
        characteristic, fallback=simulated, audit_log=audit_log, clock=clock,
    )
