"""
Unit tests for ShipperSettings.
"""

import pytest

from logstream_shipper import ConfigurationError
from logstream_shipper.coordinator import ShipperSettings, load_settings


def test_defaults():
    s = load_settings(group_id="g", stream_id="s")
    assert s.write_interval_ms == "immediate"
    assert s.retryable_max == 100
    assert s.retryable_delay_ms == 150
    assert s.max_batch_count == 10_000
    assert s.max_batch_size == 1_048_576
    assert s.timestamp_field == "time"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LOGSTREAM_SHIPPER_GROUP_ID", "env-group")
    monkeypatch.setenv("LOGSTREAM_SHIPPER_STREAM_ID", "env-stream")
    monkeypatch.setenv("LOGSTREAM_SHIPPER_RETRYABLE_DELAY_MS", "immediate")
    monkeypatch.setenv("LOGSTREAM_SHIPPER_WRITE_INTERVAL_MS", "250")

    s = load_settings()
    assert s.group_id == "env-group"
    assert s.stream_id == "env-stream"
    assert s.retryable_delay_ms == "immediate"
    assert s.write_interval_ms == 250


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"group_id": "", "stream_id": "s"},
        {"retryable_max": 0},
        {"retryable_delay_ms": -1},
        {"retryable_delay_ms": "soon"},
        {"write_interval_ms": -0.5},
        {"write_interval_ms": "inf"},
        {"retryable_delay_ms": float("inf")},
        {"retryable_delay_ms": float("nan")},
        {"drain_timeout_s": float("inf")},
        {"max_batch_count": 0},
        {"max_batch_count": 10_001},
        {"max_batch_size": 255},
        {"max_batch_size": 1_048_577},
    ],
)
def test_invalid_values_raise_configuration_error(kwargs, monkeypatch):
    monkeypatch.delenv("LOGSTREAM_SHIPPER_GROUP_ID", raising=False)
    monkeypatch.delenv("LOGSTREAM_SHIPPER_STREAM_ID", raising=False)
    if kwargs:
        kwargs = {"group_id": "g", "stream_id": "s", **kwargs}
    with pytest.raises(ConfigurationError):
        load_settings(**kwargs)


def test_settings_are_immutable():
    s = ShipperSettings(group_id="g", stream_id="s")
    with pytest.raises(Exception):
        s.retryable_max = 5  # type: ignore
