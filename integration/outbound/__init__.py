"""
Pollo Control Integration - Ticket Output Sinks
=================================================
Pushes encoded tickets to a printer.

Doctrine: Print failures are never fatal and never propagate.
A disconnected preferred printer degrades to the fallback sink; any
other delivery error becomes a user-visible failure notice. All
outcomes are audit-logged.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from core.commands.rejection import ReasonCode
from core.config.rules import PrinterType
from core.documents.builder import Ticket
from core.documents.renderer.html_renderer import render_print_html
from core.time.clock import Clock, get_default_clock
from integration.adapters import (
    DeviceUnavailableError,
    Direction,
    PrinterCharacteristic,
    TransientError,
    payload_hash,
)
from integration.audit_log import (
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_SUCCESS,
    IntegrationAuditLog,
)

logger = logging.getLogger("pollo.devices")

BLUETOOTH_SINK_ID = "printer.bluetooth"
SYSTEM_SINK_ID = "printer.system"
SIMULATED_SINK_ID = "printer.simulated"


def sink_id_for(printer_type: PrinterType) -> str:
    """Sink id matching the printer type chosen in app configuration."""
    return {
        PrinterType.BLUETOOTH: BLUETOOTH_SINK_ID,
        PrinterType.SYSTEM: SYSTEM_SINK_ID,
    }[printer_type]


# ══════════════════════════════════════════════════════════════
# PRINT RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PrintResult:
    """Result of sending one ticket."""

    success: bool
    sink_id: str
    notice: Optional[str] = None
    fallback_used: bool = False
    retryable: bool = False


# ══════════════════════════════════════════════════════════════
# SINKS
# ══════════════════════════════════════════════════════════════

class TicketSink(ABC):
    """Base class for ticket destinations."""

    @property
    @abstractmethod
    def sink_id(self) -> str:
        ...

    @abstractmethod
    async def deliver(self, ticket: Ticket) -> None:
        """
        Deliver the full ticket.

        Raises DeviceUnavailableError when there is no device to talk to;
        any other exception is a delivery failure.
        """
        ...


class CharacteristicPrinterSink(TicketSink):
    """Writes the ticket bytes to a connected printer characteristic."""

    def __init__(
        self,
        characteristic: Optional[PrinterCharacteristic],
        sink_id: str = BLUETOOTH_SINK_ID,
    ) -> None:
        self._characteristic = characteristic
        self._sink_id = sink_id

    @property
    def sink_id(self) -> str:
        return self._sink_id

    def attach(self, characteristic: Optional[PrinterCharacteristic]) -> None:
        """Swap in a newly paired characteristic (None detaches)."""
        self._characteristic = characteristic

    async def deliver(self, ticket: Ticket) -> None:
        if self._characteristic is None or not self._characteristic.is_connected:
            raise DeviceUnavailableError("Printer not connected.", device_id=self._sink_id)
        try:
            await self._characteristic.write_value(ticket.to_bytes())
        except (OSError, asyncio.TimeoutError) as exc:
            raise TransientError(str(exc), device_id=self._sink_id) from exc


class SystemPrintSink(TicketSink):
    """
    Renders the ticket as HTML and hands it to the system print path.

    submit may be a plain or async callable taking the HTML string.
    """

    def __init__(
        self,
        submit: Callable[[str], Any],
        title: str = "Ticket",
        sink_id: str = SYSTEM_SINK_ID,
    ) -> None:
        self._submit = submit
        self._title = title
        self._sink_id = sink_id

    @property
    def sink_id(self) -> str:
        return self._sink_id

    async def deliver(self, ticket: Ticket) -> None:
        result = self._submit(render_print_html(ticket, title=self._title))
        if inspect.isawaitable(result):
            await result


class SimulatedPrinterSink(TicketSink):
    """Logs the preview and keeps every ticket in memory."""

    def __init__(self, sink_id: str = SIMULATED_SINK_ID) -> None:
        self._sink_id = sink_id
        self.delivered: List[Ticket] = []

    @property
    def sink_id(self) -> str:
        return self._sink_id

    async def deliver(self, ticket: Ticket) -> None:
        self.delivered.append(ticket)
        logger.info(f"Simulated print ({len(ticket.to_bytes())} bytes):\n{ticket.preview()}")


# ══════════════════════════════════════════════════════════════
# PRINT DISPATCHER
# ══════════════════════════════════════════════════════════════

class PrintDispatcher:
    """
    Routes tickets to the preferred sink, falling back when the
    preferred printer is unavailable.

    One print at a time: dispatch() holds an asyncio.Lock for the
    whole delivery.
    """

    def __init__(
        self,
        sinks: Iterable[TicketSink],
        preferred: str,
        fallback: Optional[TicketSink] = None,
        audit_log: Optional[IntegrationAuditLog] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._sinks: Dict[str, TicketSink] = {s.sink_id: s for s in sinks}
        self._preferred = preferred
        self._fallback = fallback or SimulatedPrinterSink()
        self._audit = audit_log or IntegrationAuditLog()
        self._clock = clock or get_default_clock()
        self._lock = asyncio.Lock()

    @property
    def preferred(self) -> str:
        return self._preferred

    @property
    def audit_log(self) -> IntegrationAuditLog:
        return self._audit

    def select(self, sink_id: str) -> None:
        """Change the preferred sink (e.g. after a printer-type change)."""
        self._preferred = sink_id

    def register(self, sink: TicketSink) -> None:
        self._sinks[sink.sink_id] = sink

    async def dispatch(self, ticket: Ticket) -> PrintResult:
        async with self._lock:
            sink = self._sinks.get(self._preferred)
            if sink is None:
                logger.warning(f"No sink registered as '{self._preferred}', using fallback.")
                return await self._deliver_fallback(
                    ticket, reason=f"Printer '{self._preferred}' is not configured.",
                )

            try:
                await sink.deliver(ticket)
            except DeviceUnavailableError as exc:
                logger.warning(f"Sink {sink.sink_id} unavailable: {exc}")
                self._record(sink.sink_id, ticket, STATUS_FALLBACK, ReasonCode.DEVICE_UNAVAILABLE, exc)
                return await self._deliver_fallback(ticket, reason=str(exc))
            except TransientError as exc:
                logger.warning(f"Sink {sink.sink_id} write failed, retryable: {exc}")
                self._record(sink.sink_id, ticket, STATUS_FAILED, "TRANSIENT_FAILURE", exc)
                return PrintResult(
                    success=False,
                    sink_id=sink.sink_id,
                    notice=f"Print failed: {exc}. Try again.",
                    retryable=True,
                )
            except Exception as exc:
                logger.error(f"Sink {sink.sink_id} delivery failed: {exc}", exc_info=True)
                self._record(sink.sink_id, ticket, STATUS_FAILED, "DELIVERY_FAILED", exc)
                return PrintResult(
                    success=False,
                    sink_id=sink.sink_id,
                    notice=f"Print failed: {exc}",
                )

            self._record(sink.sink_id, ticket, STATUS_SUCCESS)
            return PrintResult(success=True, sink_id=sink.sink_id)

    async def _deliver_fallback(self, ticket: Ticket, reason: str) -> PrintResult:
        fallback = self._fallback
        try:
            await fallback.deliver(ticket)
        except Exception as exc:
            logger.error(f"Fallback sink {fallback.sink_id} failed: {exc}", exc_info=True)
            self._record(fallback.sink_id, ticket, STATUS_FAILED, "DELIVERY_FAILED", exc)
            return PrintResult(
                success=False,
                sink_id=fallback.sink_id,
                notice=f"Print failed: {reason}; fallback failed: {exc}",
                fallback_used=True,
            )
        self._record(fallback.sink_id, ticket, STATUS_SUCCESS)
        return PrintResult(
            success=True,
            sink_id=fallback.sink_id,
            notice=f"{reason} Ticket sent to {fallback.sink_id}.",
            fallback_used=True,
        )

    def _record(
        self,
        sink_id: str,
        ticket: Ticket,
        status: str,
        error_code: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self._audit.record(
            device_id=sink_id,
            direction=Direction.OUTBOUND,
            operation="ticket.deliver",
            status=status,
            occurred_at=self._clock.now_utc(),
            payload_hash=payload_hash(ticket.to_bytes()),
            error_code=error_code,
            error_message=str(error) if error is not None else None,
        )
