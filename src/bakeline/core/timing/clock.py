"""Wall-clock access and timestamp conversion helpers.

All timing code reads time through a ``Clock`` (a zero-argument callable
returning epoch milliseconds) so tests can drive it deterministically.
"""

import time
from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_iso(ms: int | None) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string.

    Returns an empty string for ``None`` so absent timestamps serialize
    the same way everywhere.

    Examples:
        >>> ms_to_iso(0)
        '1970-01-01T00:00:00.000Z'
    """
    if ms is None:
        return ""
    moment = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_to_ms(value: str | None) -> int | None:
    """Parse an ISO-8601 timestamp into epoch milliseconds.

    Naive timestamps are taken as UTC. Empty or unparseable input
    yields ``None``.
    """
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(round(moment.timestamp() * 1000))


def format_duration(ms: float | None = 0) -> str:
    """Format a duration as ``HH:MM:SS`` with whole seconds floored.

    Hours are not wrapped at 24.

    Examples:
        >>> format_duration(3_723_999)
        '01:02:03'
    """
    total_seconds = int((ms or 0) // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
