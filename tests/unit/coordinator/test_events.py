"""
Unit tests for record -> LogEvent conversion.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel

from logstream_shipper.coordinator import LogEvent, accept_present, create_log_event

T_2024 = int(datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp() * 1000)


class Record(BaseModel):
    msg: str
    time: datetime


@pytest.fixture
def frozen_now(monkeypatch):
    monkeypatch.setattr("logstream_shipper.coordinator.events.now_ms", lambda: 42)
    return 42


def test_text_record_passes_through(frozen_now):
    e = create_log_event("plain line")
    assert e == LogEvent(message="plain line", timestamp=42)


def test_structured_record_serialized_with_time_field():
    e = create_log_event({"msg": "hi", "time": "2024-01-01T00:00:00Z"})
    assert json.loads(e.message) == {"msg": "hi", "time": "2024-01-01T00:00:00Z"}
    assert e.timestamp == T_2024


@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 1, 1),
        "2024-01-01T00:00:00+00:00",
        T_2024,
    ],
)
def test_time_field_formats(value):
    assert create_log_event({"time": value}).timestamp == T_2024


def test_missing_or_unparseable_time_uses_now(frozen_now):
    assert create_log_event({"msg": "x"}).timestamp == 42
    assert create_log_event({"time": "not a date"}).timestamp == 42
    assert create_log_event([1, 2, 3]).timestamp == 42


def test_custom_timestamp_field():
    e = create_log_event({"ts": "2024-01-01T00:00:00Z"}, timestamp_field="ts")
    assert e.timestamp == T_2024


def test_pydantic_model_record():
    e = create_log_event(Record(msg="hi", time=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    assert json.loads(e.message)["msg"] == "hi"
    assert e.timestamp == T_2024


def test_log_event_is_immutable():
    e = LogEvent(message="a", timestamp=1)
    with pytest.raises(Exception):
        e.message = "b"  # type: ignore


def test_default_filter():
    assert not accept_present(None)
    assert accept_present("")
    assert accept_present({})
