"""
Log Stream Shipper

Buffers application log records and delivers them, in order, to an
ordered-append log stream service with per-request size/count caps and a
sequence-token handshake.

Usage:
    from logstream_shipper import LogShipper, requeue_failed_events

    async with LogShipper(client, group_id="app", stream_id="web-1",
                          recovery_hook=requeue_failed_events) as shipper:
        shipper.enqueue({"msg": "hello", "time": "2024-01-01T00:00:00Z"})
"""

from .coordinator import (
    LogShipper,
    ShipperSettings,
    ShipperHealth,
    load_settings,
    LogEvent,
    DeliveryState,
    DestinationClient,
    Notification,
    NotificationBus,
    NotificationKind,
    fail_stop,
    requeue_failed_events,
    discard_failed_events,
    utf8_size,
)
from .errors import (
    ShipperError,
    ConfigurationError,
    DestinationError,
    ResourceKind,
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    ProvisioningError,
)

__version__ = "0.1.0"
__all__ = [
    "LogShipper",
    "ShipperSettings",
    "ShipperHealth",
    "load_settings",
    "LogEvent",
    "DeliveryState",
    "DestinationClient",
    "Notification",
    "NotificationBus",
    "NotificationKind",
    "fail_stop",
    "requeue_failed_events",
    "discard_failed_events",
    "utf8_size",
    "ShipperError",
    "ConfigurationError",
    "DestinationError",
    "ResourceKind",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ProvisioningError",
]
