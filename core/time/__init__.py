"""
Pollo Control Core Time - Public API
======================================
Explicit clock protocol and temporal helpers.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    TickingClock,
    get_default_clock,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    day_key,
    from_epoch_millis,
    month_key,
    to_epoch_millis,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "TickingClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "to_epoch_millis",
    "from_epoch_millis",
    "month_key",
    "day_key",
]
