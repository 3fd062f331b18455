"""
Utility functions for the log shipper.

Time helpers used when converting records to log events.
"""

import math
import time
from datetime import datetime, timezone
from typing import Any, Optional, Union


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def parse_datetime(dt: Union[str, datetime]) -> datetime:
    """Parse datetime from string or return datetime object."""
    if isinstance(dt, str):
        return datetime.fromisoformat(dt.replace("Z", "+00:00"))
    return dt


def to_epoch_ms(value: Any) -> Optional[int]:
    """Convert a datetime, ISO-8601 string or epoch-ms number to epoch millis.

    Naive datetimes are taken as UTC. Returns None when the value cannot be
    interpreted as a point in time.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, (str, datetime)):
        try:
            dt = parse_datetime(value)
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)
    return None
