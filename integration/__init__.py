"""
Pollo Control Integration Layer - Public API
==============================================
Gateway to the physical devices around the ledger.

Doctrine: Devices NEVER write directly to ledger data.
Inbound:  scale payload -> parse -> weight offered to the operator
Outbound: ticket -> preferred printer (or fallback) -> audit log
"""

from integration.adapters import (
    DeviceUnavailableError,
    Direction,
    IntegrationError,
    PrinterCharacteristic,
    ScaleCharacteristic,
    TransientError,
)
from integration.audit_log import IntegrationAuditEntry, IntegrationAuditLog
from integration.inbound import (
    DeviceScaleReader,
    FixedScaleReader,
    ScaleReader,
    SimulatedScaleReader,
    build_scale_reader,
    parse_weight,
)
from integration.outbound import (
    CharacteristicPrinterSink,
    PrintDispatcher,
    PrintResult,
    SimulatedPrinterSink,
    SystemPrintSink,
    TicketSink,
    sink_id_for,
)

__all__ = [
    # Adapters
    "Direction",
    "ScaleCharacteristic",
    "PrinterCharacteristic",
    # Errors
    "IntegrationError",
    "DeviceUnavailableError",
    "TransientError",
    # Audit
    "IntegrationAuditEntry",
    "IntegrationAuditLog",
    # Inbound
    "ScaleReader",
    "DeviceScaleReader",
    "SimulatedScaleReader",
    "FixedScaleReader",
    "build_scale_reader",
    "parse_weight",
    # Outbound
    "TicketSink",
    "CharacteristicPrinterSink",
    "SystemPrintSink",
    "SimulatedPrinterSink",
    "PrintDispatcher",
    "PrintResult",
    "sink_id_for",
]
