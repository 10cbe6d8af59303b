"""
Pollo Control Core Time - Temporal Helpers
============================================
Pure conversions between aware datetimes and the persisted
epoch-millisecond format, plus the calendar bucket keys used by
the global summary.
"""

from __future__ import annotations

from datetime import datetime, timezone


def to_epoch_millis(dt: datetime) -> int:
    """Aware datetime -> integer milliseconds since the Unix epoch."""
    if dt.tzinfo is None:
        raise ValueError("to_epoch_millis requires timezone-aware datetime.")
    return int(round(dt.timestamp() * 1000))


def from_epoch_millis(millis: int) -> datetime:
    """Integer milliseconds since the Unix epoch -> aware UTC datetime."""
    return datetime.fromtimestamp(int(millis) / 1000, tz=timezone.utc)


def month_key(dt: datetime) -> str:
    """Bucket key 'YYYY-MM'."""
    return f"{dt.year:04d}-{dt.month:02d}"


def day_key(dt: datetime) -> str:
    """Bucket key 'YYYY-MM-DD'."""
    return dt.date().isoformat()
