"""
Demo script for LogShipper.

Ships records to an in-memory destination that throttles now and then and
needs its log group provisioned on first use.
"""

import asyncio
import random
from typing import Optional, Sequence

from loguru import logger

from logstream_shipper import (
    DestinationError,
    LogShipper,
    Notification,
    NotificationKind,
    ResourceKind,
    ResourceNotFoundError,
    requeue_failed_events,
)
from logstream_shipper.coordinator import LogEvent


class PrintDestination:
    """Destination that prints batches and throttles ~20% of sends."""

    def __init__(self):
        self.groups: set[str] = set()
        self.streams: set[tuple[str, str]] = set()
        self._seq = 0

    async def query_stream_token(self, group_id: str, stream_prefix: str) -> Optional[str]:
        await asyncio.sleep(0.005)
        if group_id not in self.groups:
            raise ResourceNotFoundError(ResourceKind.GROUP)
        if (group_id, stream_prefix) not in self.streams:
            raise ResourceNotFoundError(ResourceKind.STREAM)
        return str(self._seq) if self._seq else None

    async def create_group(self, group_id: str) -> None:
        await asyncio.sleep(0.005)
        self.groups.add(group_id)

    async def create_stream(self, group_id: str, stream_id: str) -> None:
        await asyncio.sleep(0.005)
        self.streams.add((group_id, stream_id))

    async def send_batch(
        self,
        group_id: str,
        stream_id: str,
        token: Optional[str],
        events: Sequence[LogEvent],
    ) -> Optional[str]:
        await asyncio.sleep(0.01)
        if random.random() < 0.2:
            raise DestinationError("Rate exceeded", retryable=True, code="ThrottlingException")
        self._seq += 1
        logger.info(
            f"PrintDestination stored {len(events)} events "
            f"(first={events[0].message!r}, token={token})"
        )
        return str(self._seq)


async def on_notification(n: Notification):
    if n.kind is NotificationKind.FATAL:
        logger.error(f"Shipper stopped: {n.error}")
    elif n.kind is not NotificationKind.BATCH_DELIVERED:
        logger.info(f"Provisioned: {n.kind.value} for {n.group_id}/{n.stream_id}")


async def main():
    async with LogShipper(
        PrintDestination(),
        group_id="demo-app",
        stream_id="worker-1",
        write_interval_ms=20,
        retryable_delay_ms=10,
        max_batch_count=250,
        recovery_hook=requeue_failed_events,
    ) as shipper:
        shipper.notifications.subscribe(on_notification)
        logger.info("🚀 Producing 1,000 records")

        for i in range(1_000):
            shipper.enqueue({"msg": f"record {i}", "level": "info"})
            if i % 100 == 0:
                await asyncio.sleep(0.01)
                health = shipper.health()
                logger.info(f"Progress: {i}/1000 | state={health.state.value} | queued={health.queue_size}")

    logger.success(f"Done, final state={shipper.state.value}")


if __name__ == "__main__":
    asyncio.run(main())
