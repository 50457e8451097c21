# seriesview/core/instants.py
"""
Helpers for absolute instants.

All instants inside the engine are timezone-aware UTC datetimes. The chart
x domain uses float milliseconds since the Unix epoch.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone

from .exceptions import CoreError

# Stores may emit 1 to 9 fractional digits; fromisoformat wants 3 or 6 before 3.11.
_FRACTION = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string (or normalize a datetime) to an aware UTC datetime.

    Naive values are read as UTC. A trailing ``Z`` is accepted. Fractional
    seconds are cut or padded to microseconds.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise CoreError(f"Invalid ISO-8601 instant: {value!r}") from e
    else:
        raise CoreError(f"Expected datetime or ISO-8601 string, got {type(value).__name__}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_ms(dt: datetime) -> float:
    return dt.timestamp() * 1000.0
