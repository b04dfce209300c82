"""Timezone-aware time helpers.

Timestamps are ISO 8601 UTC with millisecond precision and a ``Z`` suffix,
e.g. ``2026-01-31T09:15:02.123Z``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso8601(timestamp_str: str) -> datetime:
    """Parse an ISO 8601 timestamp string into a UTC datetime.

    Date-only values (``2026-03-01``) are read as midnight UTC.
    """
    ts = timestamp_str.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt


def try_parse_iso8601(value: object) -> Optional[datetime]:
    """Like :func:`parse_iso8601` but returns None for anything unparsable."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_iso8601(value)
    except ValueError:
        return None


__all__ = [
    "Clock",
    "utc_now",
    "format_timestamp",
    "parse_iso8601",
    "try_parse_iso8601",
]
