"""
Retry policy for the batch-send call.

Only failures the destination flags as transient are retried, a bounded
number of times, with a fixed delay between attempts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from .types import Interval

R = TypeVar("R")


def default_retry_classifier(exc: BaseException) -> bool:
    """Retry exactly what the destination marked as retryable."""
    return bool(getattr(exc, "retryable", False))


async def wait_interval(interval: Interval) -> None:
    """Yield once for "immediate", otherwise sleep ``interval`` milliseconds."""
    if interval == "immediate":
        await asyncio.sleep(0)
    else:
        await asyncio.sleep(float(interval) / 1000.0)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry of destination-flagged transient failures.

    Attributes:
        retryable_max: Retries allowed after the first attempt (0 disables)
        retryable_delay_ms: Delay between attempts, or "immediate"
        classify_retryable: Decides whether an exception may be retried
    """

    retryable_max: int = 100
    retryable_delay_ms: Interval = 150
    classify_retryable: Callable[[BaseException], bool] = field(default=default_retry_classifier)

    def __post_init__(self) -> None:
        if self.retryable_max < 0:
            raise ValueError("retryable_max must be >= 0")
        if self.retryable_delay_ms != "immediate" and float(self.retryable_delay_ms) < 0:
            raise ValueError('retryable_delay_ms must be >= 0 or "immediate"')

    async def run(
        self,
        call: Callable[[], Awaitable[R]],
        *,
        on_retry: Optional[Callable[[int, BaseException], None]] = None,
    ) -> R:
        """Await ``call()`` until it succeeds or the failure is surfaced.

        The final exception is re-raised unmodified once retries run out or
        the failure is not retryable.
        """
        retries = 0
        while True:
            try:
                return await call()
            except Exception as exc:
                if not self.classify_retryable(exc) or retries >= self.retryable_max:
                    raise
                retries += 1
                logger.debug(
                    f"Retryable send failure ({type(exc).__name__}: {exc}); "
                    f"retry {retries}/{self.retryable_max}"
                )
                if on_retry:
                    on_retry(retries, exc)
                await wait_interval(self.retryable_delay_ms)
