"""
Runtime settings for the log shipper.

Values come from keyword arguments, then environment variables prefixed with
LOGSTREAM_SHIPPER_ (e.g. LOGSTREAM_SHIPPER_GROUP_ID), then a local .env file.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigurationError
from .planner import MAX_BATCH_COUNT, MAX_BATCH_SIZE, MIN_BATCH_SIZE

NonNegativeMs = Annotated[float, Field(ge=0, allow_inf_nan=False)]
IntervalSetting = Union[Literal["immediate"], NonNegativeMs]


class ShipperSettings(BaseSettings):
    """Validated, immutable shipper configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOGSTREAM_SHIPPER_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    group_id: str = Field(min_length=1)
    stream_id: str = Field(min_length=1)

    # Wait after a write before sending, to let records batch up
    write_interval_ms: IntervalSetting = "immediate"

    retryable_max: int = Field(default=100, ge=1)
    retryable_delay_ms: IntervalSetting = 150

    max_batch_count: int = Field(default=MAX_BATCH_COUNT, ge=1, le=MAX_BATCH_COUNT)
    max_batch_size: int = Field(default=MAX_BATCH_SIZE, ge=MIN_BATCH_SIZE, le=MAX_BATCH_SIZE)

    timestamp_field: str = "time"
    drain_timeout_s: float = Field(default=10.0, gt=0, allow_inf_nan=False)


def load_settings(**overrides: Any) -> ShipperSettings:
    """Build settings, raising ConfigurationError for invalid values."""
    try:
        return ShipperSettings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid log shipper settings: {exc}") from exc
