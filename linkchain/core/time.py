"""linkchain.core.time

Block timestamps are plain epoch seconds. This module is the only clock.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime


def unix_now() -> float:
    """Return the current time as fractional epoch seconds (millisecond precision)."""

    return int(time.time() * 1000) / 1000


def to_datetime(timestamp: float) -> datetime:
    """Render a block timestamp as an aware UTC datetime."""

    return datetime.fromtimestamp(float(timestamp), tz=UTC)
