from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Literal, Optional, Protocol, Sequence, Union

# Either "immediate" (yield to the event loop once) or a delay in milliseconds
Interval = Union[Literal["immediate"], float]


@dataclass(frozen=True)
class LogEvent:
    """One message queued for delivery.

    Attributes:
        message: Text sent to the destination verbatim
        timestamp: Event time as epoch milliseconds
    """

    message: str
    timestamp: int


@dataclass(frozen=True)
class SequenceToken:
    """Result of a successful ordering handshake.

    ``value`` is whatever the destination needs on the next append. It may be
    None for a freshly created stream, which is still a valid handshake.
    """

    value: Optional[str]


@dataclass(frozen=True)
class BatchRequest:
    """A single append call; never retained after the call completes."""

    group_id: str
    stream_id: str
    token: Optional[str]
    events: tuple[LogEvent, ...]


class DeliveryState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    ACQUIRING_TOKEN = "acquiring_token"
    SENDING = "sending"
    RECOVERING = "recovering"
    FAILED = "failed"


class DestinationClient(Protocol):
    """Async client for an ordered-append log stream service.

    Implementations raise ``logstream_shipper.errors`` exceptions so failures
    can be classified: ResourceNotFoundError from the token query,
    ResourceAlreadyExistsError from the create calls and DestinationError
    (with ``retryable``) from send_batch.
    """

    async def query_stream_token(self, group_id: str, stream_prefix: str) -> Optional[str]: ...

    async def create_group(self, group_id: str) -> None: ...

    async def create_stream(self, group_id: str, stream_id: str) -> None: ...

    async def send_batch(
        self,
        group_id: str,
        stream_id: str,
        token: Optional[str],
        events: Sequence[LogEvent],
    ) -> Optional[str]: ...


RecordFilter = Callable[[Any], bool]
MessageSizer = Callable[[str], int]

# resume(), resume(events) or resume(error)
ResumeCallback = Callable[..., None]
RecoveryHook = Callable[
    [BaseException, Optional[list[LogEvent]], ResumeCallback], Optional[Awaitable[None]]
]
