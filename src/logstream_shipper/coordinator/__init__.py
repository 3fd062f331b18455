"""Log delivery coordinator

Queue -> batch planner -> token handshake -> send pipeline with:
- EventQueue (ordered, unbounded, head requeue)
- BatchPlanner under destination count/byte caps
- RetryPolicy for destination-flagged transient send failures
- Recovery hooks (fail-stop, requeue, discard)
- NotificationBus for provisioning/delivery/fatal notifications
- Environment-based settings
"""

from .types import (
    LogEvent,
    SequenceToken,
    BatchRequest,
    DeliveryState,
    DestinationClient,
    Interval,
    RecordFilter,
    MessageSizer,
    RecoveryHook,
    ResumeCallback,
)
from .events import create_log_event, accept_present
from .queue import EventQueue
from .planner import BatchPlanner, EVENT_OVERHEAD_BYTES, char_count, utf8_size
from .policy import RetryPolicy, default_retry_classifier
from .recovery import fail_stop, requeue_failed_events, discard_failed_events
from .feedback import Notification, NotificationBus, NotificationKind
from .settings import ShipperSettings, load_settings
from .shipper import LogShipper, ShipperHealth, PipelineState

__all__ = [
    # types
    "LogEvent",
    "SequenceToken",
    "BatchRequest",
    "DeliveryState",
    "DestinationClient",
    "Interval",
    "RecordFilter",
    "MessageSizer",
    "RecoveryHook",
    "ResumeCallback",
    "ShipperHealth",
    "PipelineState",
    # ingestion & batching
    "create_log_event",
    "accept_present",
    "EventQueue",
    "BatchPlanner",
    "EVENT_OVERHEAD_BYTES",
    "char_count",
    "utf8_size",
    # policies
    "RetryPolicy",
    "default_retry_classifier",
    "fail_stop",
    "requeue_failed_events",
    "discard_failed_events",
    # runtime
    "LogShipper",
    "ShipperSettings",
    "load_settings",
    # notifications
    "Notification",
    "NotificationBus",
    "NotificationKind",
]
