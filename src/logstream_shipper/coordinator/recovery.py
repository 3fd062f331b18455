"""
Recovery hooks.

A recovery hook is called with ``(error, events, resume)`` whenever a
destination call fails for good. ``events`` is the batch that failed to send,
or None when the failure happened while querying the token or provisioning.
The hook must eventually call ``resume`` exactly once, in one of three ways:

- ``resume(error)``: fail-stop. The queue is cleared, a fatal notification is
  published and every later record is rejected.
- ``resume()``: carry on without the failed events.
- ``resume(events)``: put ``events`` back at the head of the queue and carry on.

``resume`` may be called synchronously from the hook or later from another
task. Only the first call for a given failure has an effect.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .types import LogEvent, ResumeCallback


def fail_stop(error: BaseException, events: Optional[list[LogEvent]], resume: ResumeCallback) -> None:
    """Default hook: every error is fatal."""
    resume(error)


def requeue_failed_events(
    error: BaseException, events: Optional[list[LogEvent]], resume: ResumeCallback
) -> None:
    """Keep retrying forever, returning failed batches to the queue head."""
    logger.warning(f"Log delivery failed, requeueing: {type(error).__name__}: {error}")
    if events:
        resume(events)
    else:
        resume()


def discard_failed_events(
    error: BaseException, events: Optional[list[LogEvent]], resume: ResumeCallback
) -> None:
    """Drop the failed batch and carry on with the rest of the queue."""
    if events:
        logger.warning(
            f"Dropping {len(events)} log events after delivery failure: "
            f"{type(error).__name__}: {error}"
        )
    resume()
