"""
Record -> LogEvent conversion and ingestion filters.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from ..utils import now_ms, to_epoch_ms
from .types import LogEvent


def accept_present(record: Any) -> bool:
    """Default ingestion filter: accept anything except None."""
    return record is not None


def reject_all(record: Any) -> bool:
    """Filter installed after fail-stop."""
    return False


def _structured(record: Any) -> Any:
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json")
    return record


def create_log_event(record: Any, *, timestamp_field: str = "time") -> LogEvent:
    """Create a log event from a text or structured record.

    Text records become the message unchanged. Anything else is serialized to
    JSON. The timestamp comes from ``record[timestamp_field]`` when the record
    is a mapping (or model) carrying a parseable value, otherwise now.
    """
    if isinstance(record, str):
        return LogEvent(message=record, timestamp=now_ms())

    data = _structured(record)
    message = json.dumps(data, default=str, ensure_ascii=False)

    timestamp = None
    if isinstance(data, Mapping) and data.get(timestamp_field):
        timestamp = to_epoch_ms(data[timestamp_field])
    return LogEvent(message=message, timestamp=timestamp if timestamp is not None else now_ms())
