"""
Pytest configuration and fixtures for logstream-shipper.

Provides an in-memory destination that behaves like an ordered-append log
stream service, plus helpers to build shippers against it.
"""

import asyncio
import sys
from typing import Optional, Sequence

import pytest

from logstream_shipper import LogShipper, ResourceKind, ResourceNotFoundError
from logstream_shipper.coordinator import DeliveryState, LogEvent

# Set policy *before* pytest-asyncio creates any loops
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


class FakeLogsClient:
    """In-memory log stream destination.

    Failures are scripted: each entry in ``send_failures`` / ``query_failures``
    is raised by one call, in order, before calls start succeeding.
    """

    def __init__(
        self,
        *,
        group_exists: bool = True,
        stream_exists: bool = True,
        token: Optional[str] = "token-0",
    ):
        self.groups: set[str] = set()
        self.streams: set[tuple[str, str]] = set()
        self._group_exists = group_exists
        self._stream_exists = stream_exists
        self.token = token

        self.calls: list[tuple] = []
        self.batches: list[list[LogEvent]] = []
        self.send_failures: list[Exception] = []
        self.query_failures: list[Exception] = []
        self.create_group_failures: list[Exception] = []
        self.create_stream_failures: list[Exception] = []
        self.ignore_create_stream = False
        self.send_gate: Optional[asyncio.Event] = None
        self._seq = 0

    @property
    def send_attempts(self) -> int:
        return sum(1 for c in self.calls if c[0] == "send")

    @property
    def sent_messages(self) -> list[str]:
        return [e.message for batch in self.batches for e in batch]

    def _has_group(self, group_id: str) -> bool:
        return self._group_exists or group_id in self.groups

    def _has_stream(self, group_id: str, stream_id: str) -> bool:
        return (self._group_exists and self._stream_exists) or (group_id, stream_id) in self.streams

    async def query_stream_token(self, group_id: str, stream_prefix: str) -> Optional[str]:
        self.calls.append(("query", group_id, stream_prefix))
        await asyncio.sleep(0)
        if self.query_failures:
            raise self.query_failures.pop(0)
        if not self._has_group(group_id):
            raise ResourceNotFoundError(ResourceKind.GROUP)
        if not self._has_stream(group_id, stream_prefix):
            raise ResourceNotFoundError(ResourceKind.STREAM)
        return self.token

    async def create_group(self, group_id: str) -> None:
        self.calls.append(("create_group", group_id))
        await asyncio.sleep(0)
        if self.create_group_failures:
            raise self.create_group_failures.pop(0)
        self.groups.add(group_id)

    async def create_stream(self, group_id: str, stream_id: str) -> None:
        self.calls.append(("create_stream", group_id, stream_id))
        await asyncio.sleep(0)
        if self.create_stream_failures:
            raise self.create_stream_failures.pop(0)
        if not self.ignore_create_stream:
            self.streams.add((group_id, stream_id))

    async def send_batch(
        self,
        group_id: str,
        stream_id: str,
        token: Optional[str],
        events: Sequence[LogEvent],
    ) -> Optional[str]:
        self.calls.append(("send", token, [e.message for e in events]))
        await asyncio.sleep(0)
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_failures:
            raise self.send_failures.pop(0)
        self.batches.append(list(events))
        self._seq += 1
        self.token = f"token-{self._seq}"
        return self.token


async def wait_for_state(shipper: LogShipper, state: DeliveryState, timeout: float = 1.0) -> None:
    """Poll until the shipper reaches ``state``."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while shipper.state is not state:
        if loop.time() > deadline:
            raise AssertionError(f"shipper stuck in {shipper.state}, expected {state}")
        await asyncio.sleep(0.001)


@pytest.fixture
def client():
    """Destination with group and stream already provisioned."""
    return FakeLogsClient()


@pytest.fixture
def make_shipper(client):
    """Factory building shippers against the fake client with fast retries."""

    def _make(target=None, **kwargs) -> LogShipper:
        kwargs.setdefault("group_id", "app-logs")
        kwargs.setdefault("stream_id", "web-1")
        kwargs.setdefault("retryable_delay_ms", "immediate")
        return LogShipper(target or client, **kwargs)

    return _make
