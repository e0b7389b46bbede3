"""Time helpers. All timestamps are integer epoch milliseconds, days are UTC."""

import time
from datetime import UTC, datetime, timedelta

__all__ = [
    "MS_PER_DAY",
    "MS_PER_MINUTE",
    "day_key",
    "now_ms",
    "previous_day_key",
]

MS_PER_MINUTE = 60_000
MS_PER_DAY = 86_400_000


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def day_key(timestamp_ms: int) -> str:
    """Return the UTC calendar day of a timestamp as ``YYYY-MM-DD``."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).date().isoformat()


def previous_day_key(timestamp_ms: int) -> str:
    day = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).date()
    return (day - timedelta(days=1)).isoformat()
