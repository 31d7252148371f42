"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime
from typing import Any


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """Create a UTC-aware datetime from a Unix timestamp (seconds)."""
    return datetime.fromtimestamp(timestamp, tz=UTC)


def from_timestamp_ms_utc(timestamp_ms: int) -> datetime:
    """
    Create a UTC-aware datetime from a millisecond Unix timestamp.
    Common in JavaScript clients that persist Date.now().
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def coerce_datetime(value: Any) -> datetime | None:
    """
    Best-effort conversion of a stored timestamp to a UTC-aware datetime.

    Documents written by the web client hold timestamps in several shapes:
    native Firestore timestamps (decoded to datetime), ISO-8601 strings,
    millisecond epochs, or ``{"seconds": ..., "nanoseconds": ...}`` maps.
    Unparseable values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return from_timestamp_ms_utc(int(value))
    if isinstance(value, dict) and "seconds" in value:
        try:
            seconds = float(value["seconds"])
        except (TypeError, ValueError):
            return None
        nanos = value.get("nanoseconds") or 0
        return from_timestamp_utc(seconds + float(nanos) / 1e9)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None
