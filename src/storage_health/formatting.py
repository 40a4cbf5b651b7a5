"""Human-readable byte counts and durations."""

from __future__ import annotations

from datetime import timedelta
from typing import Union


_UNITS = (
    ("TB", 1024**4),
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
)


def format_bytes(value: int) -> str:
    """Render ``value`` in the largest unit where it is at least 1.

    Anything below one kilobyte is shown as a whole number of bytes.
    """
    size = int(value or 0)
    for unit, factor in _UNITS:
        if size >= factor:
            return f"{size / factor:.2f} {unit}"
    return f"{size} Bytes"


def format_uptime(span: Union[timedelta, int, float]) -> str:
    if not isinstance(span, timedelta):
        span = timedelta(seconds=span)
    total_minutes = int(span.total_seconds()) // 60
    days, rest = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)
    return f"{days} days, {hours} hours, {minutes} minutes"
