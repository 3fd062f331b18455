"""
LogShipper: buffered, ordered delivery of log records to a log stream.

Records are queued synchronously and shipped by a single background delivery
cycle at a time:

    enqueue -> queue -> [cycle] -> token handshake -> batch send -> repeat

Failures invalidate the sequence token and are handed to a recovery hook,
which either resumes delivery (optionally requeueing the failed batch) or
fail-stops the shipper for good.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger

from ..errors import (
    ConfigurationError,
    ProvisioningError,
    ResourceAlreadyExistsError,
    ResourceKind,
    ResourceNotFoundError,
)
from ..metrics import registry as metrics
from .events import accept_present, create_log_event, reject_all
from .feedback import Notification, NotificationBus, NotificationKind
from .planner import BatchPlanner, char_count
from .policy import RetryPolicy, wait_interval
from .queue import EventQueue
from .recovery import fail_stop
from .settings import ShipperSettings, load_settings
from .types import (
    BatchRequest,
    DeliveryState,
    DestinationClient,
    LogEvent,
    MessageSizer,
    RecordFilter,
    RecoveryHook,
    SequenceToken,
)


@dataclass
class PipelineState:
    """All mutable state of one shipper instance."""

    queue: EventQueue = field(default_factory=EventQueue)
    token: Optional[SequenceToken] = None
    cycle_scheduled: bool = False
    recovery_epoch: int = 0
    delivery: DeliveryState = DeliveryState.IDLE
    failure: Optional[BaseException] = None


@dataclass(frozen=True)
class ShipperHealth:
    """Point-in-time snapshot for host health checks."""

    state: DeliveryState
    queue_size: int
    token_known: bool
    recovery_epoch: int
    failed: bool


class LogShipper:
    """Non-blocking log shipper for an ordered-append log stream.

    Args:
        client: Destination client (see DestinationClient)
        settings: Validated settings; built from ``overrides`` and the
            environment when omitted
        recovery_hook: Called as ``hook(error, events, resume)`` on every
            unrecoverable failure (default: fail-stop)
        filter_record: Ingestion predicate (default: reject None)
        measure_message: Message size function used for batch sizing
            (default: character count)
        notifications: Bus to publish notifications on (default: a new one)

    Example:
        async with LogShipper(client, group_id="app", stream_id="web-1") as shipper:
            shipper.enqueue({"msg": "started", "time": "2024-01-01T00:00:00Z"})
            shipper.enqueue("plain text line")
        # drained on exit
    """

    def __init__(
        self,
        client: DestinationClient,
        settings: Optional[ShipperSettings] = None,
        *,
        recovery_hook: Optional[RecoveryHook] = None,
        filter_record: Optional[RecordFilter] = None,
        measure_message: Optional[MessageSizer] = None,
        notifications: Optional[NotificationBus] = None,
        **overrides: Any,
    ):
        if client is None:
            raise ConfigurationError("client is required")
        if settings is None:
            settings = load_settings(**overrides)
        elif overrides:
            settings = load_settings(**{**settings.model_dump(), **overrides})

        for name, strategy in (
            ("recovery_hook", recovery_hook),
            ("filter_record", filter_record),
            ("measure_message", measure_message),
        ):
            if strategy is not None and not callable(strategy):
                raise ConfigurationError(f"{name} must be callable")

        self._client = client
        self._settings = settings
        self._recovery_hook: RecoveryHook = recovery_hook or fail_stop
        self._filter: RecordFilter = filter_record or accept_present
        self._planner = BatchPlanner(
            settings.max_batch_count,
            settings.max_batch_size,
            measure=measure_message or char_count,
        )
        self._retry = RetryPolicy(
            retryable_max=settings.retryable_max,
            retryable_delay_ms=settings.retryable_delay_ms,
        )
        self._bus = notifications or NotificationBus()

        self._state = PipelineState()
        self._idle = asyncio.Event()
        self._idle.set()
        self._tasks: set[asyncio.Task] = set()

        self._labels = {"group": settings.group_id, "stream": settings.stream_id}

    # --------------- context management

    async def __aenter__(self) -> "LogShipper":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    # --------------- properties

    @property
    def settings(self) -> ShipperSettings:
        return self._settings

    @property
    def notifications(self) -> NotificationBus:
        return self._bus

    @property
    def state(self) -> DeliveryState:
        return self._state.delivery

    @property
    def queue_size(self) -> int:
        """Queued events, not counting a batch currently being sent."""
        return len(self._state.queue)

    @property
    def sequence_token(self) -> Optional[SequenceToken]:
        return self._state.token

    @property
    def failure(self) -> Optional[BaseException]:
        """The error that fail-stopped the shipper, if any."""
        return self._state.failure

    def health(self) -> ShipperHealth:
        s = self._state
        return ShipperHealth(
            state=s.delivery,
            queue_size=len(s.queue),
            token_known=s.token is not None,
            recovery_epoch=s.recovery_epoch,
            failed=s.delivery is DeliveryState.FAILED,
        )

    # --------------- public API

    def enqueue(self, record: Any) -> bool:
        """Queue one record for delivery. Never blocks.

        Returns True once the record is queued (not delivered), False if the
        ingestion filter rejected it. Must be called from the event loop thread.
        """
        if not self._filter(record):
            metrics.RECORDS_REJECTED_TOTAL.labels(**self._labels).inc()
            return False

        event = create_log_event(record, timestamp_field=self._settings.timestamp_field)
        self._state.queue.append(event)
        metrics.RECORDS_ENQUEUED_TOTAL.labels(**self._labels).inc()
        self._update_depth()

        if not self._state.cycle_scheduled:
            self._schedule()
        return True

    def clear_queue(self) -> list[LogEvent]:
        """Remove and return every queued event."""
        events = self._state.queue.detach()
        self._update_depth()
        return events

    async def flush(self, timeout: Optional[float] = None) -> None:
        """Wait until the queue is drained (IDLE) or the shipper has failed.

        Raises asyncio.TimeoutError if ``timeout`` seconds pass first. Never
        returns while a recovery hook has not called resume.
        """
        if timeout is None:
            await self._idle.wait()
        else:
            await asyncio.wait_for(self._idle.wait(), timeout)

    async def aclose(self, timeout: Optional[float] = None) -> None:
        """Drain the queue, giving up after ``timeout`` (default: drain_timeout_s)."""
        timeout = timeout if timeout is not None else self._settings.drain_timeout_s
        try:
            await self.flush(timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"LogShipper {self._target} not drained after {timeout}s "
                f"(state={self.state.value}, queued={self.queue_size})"
            )

    # --------------- scheduling

    @property
    def _target(self) -> str:
        return f"{self._settings.group_id}/{self._settings.stream_id}"

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _schedule(self) -> None:
        s = self._state
        if s.delivery is DeliveryState.FAILED:
            return
        self._spawn(self._run())
        s.cycle_scheduled = True
        s.delivery = DeliveryState.SCHEDULED
        self._idle.clear()

    def _set_idle(self) -> None:
        self._state.delivery = DeliveryState.IDLE
        self._state.cycle_scheduled = False
        self._idle.set()

    async def _run(self) -> None:
        """Run delivery cycles back to back while batches keep succeeding."""
        while True:
            await wait_interval(self._settings.write_interval_ms)
            try:
                again = await self._cycle()
            except Exception as exc:
                # Host strategy (e.g. measure_message) raised outside the client calls
                self._state.token = None
                await self._recover(exc, None, phase="cycle")
                return
            if not again:
                return

    # --------------- delivery cycle

    async def _cycle(self) -> bool:
        """One delivery cycle. Returns True when another cycle should follow."""
        s = self._state
        if not s.queue:
            self._set_idle()
            return False

        if s.token is None:
            s.delivery = DeliveryState.ACQUIRING_TOKEN
            try:
                s.token = await self._acquire_token()
            except Exception as exc:
                s.token = None
                await self._recover(exc, None, phase="token")
                return False

        # Queue may have been cleared while the handshake was in flight
        if not s.queue:
            self._set_idle()
            return False

        s.delivery = DeliveryState.SENDING
        count = self._planner.next_batch_size(s.queue)
        request = BatchRequest(
            group_id=self._settings.group_id,
            stream_id=self._settings.stream_id,
            token=s.token.value,
            events=tuple(s.queue.take(count)),
        )
        self._update_depth()
        logger.debug(f"Sending {len(request.events)} log events to {self._target}")

        try:
            next_token = await self._retry.run(
                functools.partial(
                    self._client.send_batch,
                    request.group_id,
                    request.stream_id,
                    request.token,
                    request.events,
                ),
                on_retry=self._on_send_retry,
            )
        except Exception as exc:
            s.token = None
            await self._recover(exc, list(request.events), phase="send")
            return False

        s.token = SequenceToken(next_token)
        metrics.BATCHES_DELIVERED_TOTAL.labels(**self._labels).inc()
        metrics.EVENTS_DELIVERED_TOTAL.labels(**self._labels).inc(len(request.events))
        await self._notify(NotificationKind.BATCH_DELIVERED, events=request.events)

        if s.queue:
            s.delivery = DeliveryState.SCHEDULED
            return True
        self._set_idle()
        return False

    def _on_send_retry(self, attempt: int, exc: BaseException) -> None:
        metrics.SEND_RETRIES_TOTAL.labels(**self._labels).inc()

    # --------------- token handshake & provisioning

    async def _acquire_token(self) -> SequenceToken:
        """Query the stream token, creating the group/stream when missing."""
        group_id, stream_id = self._settings.group_id, self._settings.stream_id
        provisioned: set[ResourceKind] = set()

        while True:
            try:
                value = await self._client.query_stream_token(group_id, stream_id)
            except ResourceNotFoundError as exc:
                if exc.kind in provisioned:
                    raise ProvisioningError(
                        f"log {exc.kind.value} for {self._target} still missing after creation"
                    ) from exc
                if exc.kind is ResourceKind.GROUP:
                    await self._create_group()
                    provisioned.add(ResourceKind.GROUP)
                await self._create_stream()
                provisioned.add(ResourceKind.STREAM)
                continue

            logger.debug(f"Acquired sequence token for {self._target}")
            return SequenceToken(value)

    async def _create_group(self) -> None:
        try:
            await self._client.create_group(self._settings.group_id)
        except ResourceAlreadyExistsError:
            logger.debug(f"Log group {self._settings.group_id} already exists")
            return
        logger.info(f"Created log group {self._settings.group_id}")
        await self._notify(NotificationKind.GROUP_CREATED)

    async def _create_stream(self) -> None:
        try:
            await self._client.create_stream(self._settings.group_id, self._settings.stream_id)
        except ResourceAlreadyExistsError:
            logger.debug(f"Log stream {self._target} already exists")
            return
        logger.info(f"Created log stream {self._target}")
        await self._notify(NotificationKind.STREAM_CREATED)

    # --------------- recovery & fail-stop

    async def _recover(
        self, error: Exception, events: Optional[list[LogEvent]], *, phase: str
    ) -> None:
        s = self._state
        s.recovery_epoch += 1
        s.delivery = DeliveryState.RECOVERING
        metrics.DELIVERY_FAILURES_TOTAL.labels(**self._labels, phase=phase).inc()
        logger.warning(
            f"Log delivery to {self._target} failed during {phase} "
            f"({len(events) if events else 0} events): {type(error).__name__}: {error}"
        )

        resume = functools.partial(self._resume, s.recovery_epoch)
        try:
            result = self._recovery_hook(error, events, resume)
            if inspect.isawaitable(result):
                await result
        except Exception as hook_exc:
            logger.error(f"Recovery hook raised {type(hook_exc).__name__}: {hook_exc}")
            resume(hook_exc)

    def _resume(self, epoch: int, outcome: Any = None) -> None:
        """Resume callback bound to one failure; later or stale calls are ignored."""
        s = self._state
        if epoch != s.recovery_epoch or s.delivery is not DeliveryState.RECOVERING:
            logger.debug(f"Ignoring stale resume for recovery epoch {epoch}")
            return

        s.token = None
        if isinstance(outcome, BaseException):
            self._fail_stop(outcome)
            return

        if outcome:
            s.queue.push_front(outcome)
            self._update_depth()
        logger.debug(f"Resuming delivery to {self._target} (queued={len(s.queue)})")
        self._schedule()

    def _fail_stop(self, error: BaseException) -> None:
        s = self._state
        s.delivery = DeliveryState.FAILED
        s.failure = error
        self._filter = reject_all
        dropped = s.queue.detach()
        self._update_depth()
        metrics.FAIL_STOPS_TOTAL.labels(**self._labels).inc()
        logger.error(
            f"LogShipper {self._target} stopped permanently, dropped {len(dropped)} "
            f"queued events: {type(error).__name__}: {error}"
        )
        self._spawn(self._publish_fatal(error))

    async def _publish_fatal(self, error: BaseException) -> None:
        try:
            await self._notify(NotificationKind.FATAL, error=error)
        finally:
            self._idle.set()

    # --------------- helpers

    async def _notify(
        self,
        kind: NotificationKind,
        *,
        events: tuple[LogEvent, ...] = (),
        error: Optional[BaseException] = None,
    ) -> None:
        await self._bus.publish(
            Notification(
                kind=kind,
                group_id=self._settings.group_id,
                stream_id=self._settings.stream_id,
                events=events,
                error=error,
            )
        )

    def _update_depth(self) -> None:
        metrics.QUEUE_DEPTH.labels(**self._labels).set(len(self._state.queue))
