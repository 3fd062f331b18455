"""
Delivery notifications for the log shipper.

In-process pub/sub so the host can observe provisioning, deliveries and
fail-stop. Notifications are informational; the pipeline behaves the same
with no subscribers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from loguru import logger

from .types import LogEvent


class NotificationKind(str, Enum):
    """Notification types, listed in the order they can occur in one cycle."""

    GROUP_CREATED = "group_created"
    STREAM_CREATED = "stream_created"
    BATCH_DELIVERED = "batch_delivered"
    FATAL = "fatal"


@dataclass(frozen=True)
class Notification:
    """Immutable delivery notification.

    Attributes:
        kind: What happened
        group_id: Target log group
        stream_id: Target log stream
        events: Events delivered (BATCH_DELIVERED only)
        error: Error that stopped the pipeline (FATAL only)
    """

    kind: NotificationKind
    group_id: str
    stream_id: str
    events: tuple[LogEvent, ...] = ()
    error: Optional[BaseException] = None


class NotificationSubscriber(Protocol):
    """Async callable accepting a Notification.

    Exceptions are caught and logged to prevent cascade failures.
    """

    async def __call__(self, notification: Notification) -> None: ...


class NotificationBus:
    """In-process pub/sub bus for shipper notifications.

    One subscriber's failure does not affect others or the pipeline.

    Example:
        bus = NotificationBus()

        async def on_delivered(n: Notification):
            if n.kind is NotificationKind.BATCH_DELIVERED:
                print(len(n.events))

        bus.subscribe(on_delivered)
    """

    def __init__(self) -> None:
        self._subs: list[NotificationSubscriber] = []

    def subscribe(self, callback: NotificationSubscriber) -> None:
        if callback in self._subs:
            return
        self._subs.append(callback)
        logger.debug(f"Subscribed to notifications ({len(self._subs)} subscribers)")

    def unsubscribe(self, callback: NotificationSubscriber) -> None:
        """Remove a subscriber. No-op if it was never subscribed."""
        if callback in self._subs:
            self._subs.remove(callback)
            logger.debug(f"Unsubscribed from notifications ({len(self._subs)} subscribers)")

    async def publish(self, notification: Notification) -> None:
        """Deliver to all subscribers in registration order."""
        # Snapshot so subscribers may unsubscribe while being notified
        for callback in tuple(self._subs):
            try:
                await callback(notification)
            except Exception as exc:
                logger.warning(
                    f"Subscriber {getattr(callback, '__qualname__', callback)!s} failed on "
                    f"{notification.kind.value} notification: {type(exc).__name__}: {exc}"
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)
