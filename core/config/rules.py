"""
Pollo Control Core Config - Policy Constants and App Configuration
====================================================================
Doctrine: No magic numbers in engine logic.
The default tare per crate, the scale simulation range and the
default chickens per crate are policy constants. They come from
LedgerPolicy (overridable through Django settings), never from
literals inside the metrics engine or the device adapters.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple

from core.ledger_store.ports import SnapshotStoreError

logger = logging.getLogger("pollo.config")


# ══════════════════════════════════════════════════════════════
# LEDGER POLICY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerPolicy:
    """
    Calibration constants for the ledger and the device adapters.

    default_tare_kg:            assumed crate weight when a sale has no
                                empty-crate samples yet.
    simulation_range_kg:        uniform range for simulated scale readings.
    default_chickens_per_crate: used when a provider is created without one.
    providers_key / config_key: snapshot store keys for the provider
                                collection and the app configuration.
    """

    default_tare_kg: float = 2.5
    simulation_range_kg: Tuple[float, float] = (10.0, 30.0)
    default_chickens_per_crate: int = 9
    providers_key: str = "pollo_control.providers"
    config_key: str = "pollo_control.app_config"

    def __post_init__(self) -> None:
        if self.default_tare_kg < 0:
            raise ValueError(
                f"default_tare_kg must be >= 0, got {self.default_tare_kg}."
            )
        low, high = self.simulation_range_kg
        if low <= 0 or high < low:
            raise ValueError(
                f"simulation_range_kg must satisfy 0 < low <= high, "
                f"got {self.simulation_range_kg}."
            )
        if self.default_chickens_per_crate <= 0:
            raise ValueError("default_chickens_per_crate must be positive.")
        if not self.providers_key or not self.config_key:
            raise ValueError("storage keys must be non-empty.")
        if self.providers_key == self.config_key:
            raise ValueError("providers_key and config_key must differ.")

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> LedgerPolicy:
        policy = cls()
        overrides: Dict[str, Any] = {}
        if "DEFAULT_TARE_KG" in data:
            overrides["default_tare_kg"] = float(data["DEFAULT_TARE_KG"])
        if "SIMULATION_RANGE_KG" in data:
            low, high = data["SIMULATION_RANGE_KG"]
            overrides["simulation_range_kg"] = (float(low), float(high))
        if "DEFAULT_CHICKENS_PER_CRATE" in data:
            overrides["default_chickens_per_crate"] = int(
                data["DEFAULT_CHICKENS_PER_CRATE"]
            )
        if "PROVIDERS_KEY" in data:
            overrides["providers_key"] = str(data["PROVIDERS_KEY"])
        if "CONFIG_KEY" in data:
            overrides["config_key"] = str(data["CONFIG_KEY"])
        return replace(policy, **overrides)


DEFAULT_POLICY = LedgerPolicy()


def load_policy_from_settings() -> LedgerPolicy:
    """
    Build a LedgerPolicy from the POLLO_CONTROL Django setting.

    Falls back to DEFAULT_POLICY when Django is not configured.
    """
    from django.conf import settings
    from django.core.exceptions import ImproperlyConfigured

    try:
        data = getattr(settings, "POLLO_CONTROL", None) or {}
    except ImproperlyConfigured:
        logger.debug("Django settings not configured, using default policy.")
        return DEFAULT_POLICY
    return LedgerPolicy.from_mapping(data)


# ══════════════════════════════════════════════════════════════
# APP CONFIGURATION (persisted under its own key)
# ══════════════════════════════════════════════════════════════

class PrinterType(Enum):
    """Preferred output sink for tickets."""
    BLUETOOTH = "BLUETOOTH"   # write to a connected device characteristic
    SYSTEM = "SYSTEM"         # render and invoke the system print path


@dataclass(frozen=True)
class AppConfig:
    """Small app-level settings kept apart from the provider collection."""

    app_logo: Optional[str] = None
    printer_type: PrinterType = PrinterType.BLUETOOTH

    def to_dict(self) -> dict:
        return {
            "app_logo": self.app_logo,
            "printer_type": self.printer_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        printer = data.get("printer_type") or PrinterType.BLUETOOTH.value
        return cls(
            app_logo=data.get("app_logo"),
            printer_type=PrinterType(printer),
        )


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """
    Protocol for app configuration storage.

    Implementations may back this with a snapshot store, a file,
    or memory.
    """

    def get_app_config(self) -> AppConfig:
        ...  # pragma: no cover

    def save_app_config(self, config: AppConfig) -> Optional[str]:
        """Persist config. Returns the write error, or None."""
        ...  # pragma: no cover


class InMemoryConfigStore:
    """In-memory config store for testing and development."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self._config = config or AppConfig()

    def get_app_config(self) -> AppConfig:
        return self._config

    def save_app_config(self, config: AppConfig) -> Optional[str]:
        self._config = config
        return None


class SnapshotConfigStore:
    """
    AppConfig persisted as a JSON blob in a snapshot store.

    A missing or unreadable blob yields the default AppConfig.
    A failed write is logged and returned, never raised.
    """

    def __init__(self, snapshot_store, key: str) -> None:
        self._snapshots = snapshot_store
        self._key = key

    def get_app_config(self) -> AppConfig:
        try:
            blob = self._snapshots.load(self._key)
        except SnapshotStoreError as exc:
            logger.warning(f"App config load failed, using defaults: {exc}")
            return AppConfig()
        if not blob:
            return AppConfig()
        try:
            data = json.loads(blob)
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return AppConfig.from_dict(data)
        except (ValueError, TypeError) as exc:
            logger.warning(f"Unreadable app config under '{self._key}': {exc}")
            return AppConfig()

    def save_app_config(self, config: AppConfig) -> Optional[str]:
        try:
            self._snapshots.save(self._key, json.dumps(config.to_dict()))
        except SnapshotStoreError as exc:
            logger.warning(f"App config write failed, change not saved: {exc}")
            return str(exc)
        return None

    def update(self, **changes: Any) -> AppConfig:
        """Merge changes into the stored config (partial update)."""
        updated = replace(self.get_app_config(), **changes)
        self.save_app_config(updated)
        return updated
