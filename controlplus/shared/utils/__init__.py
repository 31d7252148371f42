"""Shared utilities (datetime helpers, ID generators)."""

from controlplus.shared.utils.datetime import (
    coerce_datetime,
    ensure_utc,
    from_timestamp_ms_utc,
    utc_now,
)
from controlplus.shared.utils.generators import generate_cuid

__all__ = [
    "coerce_datetime",
    "ensure_utc",
    "from_timestamp_ms_utc",
    "generate_cuid",
    "utc_now",
]
