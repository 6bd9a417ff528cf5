"""Retry policy for the ServiceNow client.

Wraps an async operation with jittered exponential backoff. Retry-After hints
on 429 responses override the backoff schedule.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from docsdesk.core.errors import ApiError, RequestCancelledError
from docsdesk.core.execution.error_classifier import ErrorClassifier
from docsdesk.core.logging import logger
from docsdesk.core.retry_config import ErrorCategory, RetryConfig

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


class RetryPolicy:
    """Runs an operation up to ``max_attempts`` times.

    Holds no per-call state, so one instance can serve any number of
    concurrent calls. The randomness source and the sleep coroutine are
    injectable so tests can assert exact delays.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        sleep: Optional[SleepFn] = None,
    ):
        """Initialize RetryPolicy.

        Args:
            config: RetryConfig (defaults: 5 attempts, 500ms base, x2, 15% jitter)
            rng: Source of jitter (defaults to a fresh random.Random)
            sleep: Coroutine function taking seconds (defaults to asyncio.sleep)
        """
        self.config = config or RetryConfig()
        self._rng = rng or random.Random()
        self._sleep = sleep or asyncio.sleep

    def backoff_delay_ms(self, attempt: int) -> float:
        """Exponential backoff with jitter for the attempt that just failed.

        base = base_delay_ms * factor^(attempt-1), perturbed uniformly within
        +/- jitter_percent of base, floored at 0.
        """
        base = self.config.base_delay_ms * self.config.factor ** (attempt - 1)
        jitter = base * self.config.jitter_percent / 100
        return max(0.0, base + self._rng.uniform(-jitter, jitter))

    def next_delay_ms(self, error: BaseException, attempt: int) -> float:
        """Delay before the attempt following ``attempt``.

        A 429 with a known Retry-After is honored exactly, without jitter.
        """
        match error:
            case ApiError(status_code=429, retry_after_seconds=int(seconds)):
                return float(seconds * 1000)
            case _:
                return self.backoff_delay_ms(attempt)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> T:
        """Execute ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine function, one HTTP attempt per call
            cancel_event: Setting this event aborts the attempt or pending sleep
            timeout: Overall deadline in seconds across all attempts and sleeps
            context: Extra structured fields for retry log lines (method, url, table)

        Returns:
            The operation's result

        Raises:
            RequestCancelledError: cancel_event was set or the deadline elapsed
            The most recent error raised by the operation, unchanged, once it is
            non-retryable or attempts are exhausted
        """
        context = context or {}
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                return await self._guarded(operation(), cancel_event, deadline)
            except Exception as error:
                category = ErrorClassifier.categorize(error)

                if category in (ErrorCategory.CANCELLED, ErrorCategory.PERMANENT):
                    raise

                if attempt == max_attempts:
                    logger.warning(
                        "servicenow_retries_exhausted",
                        attempts=attempt,
                        status_code=getattr(error, "status_code", None),
                        error_type=type(error).__name__,
                        **context,
                    )
                    raise

                delay_ms = self.next_delay_ms(error, attempt)
                logger.info(
                    "servicenow_retry_scheduled",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    delay_ms=round(delay_ms, 1),
                    category=category.value,
                    status_code=getattr(error, "status_code", None),
                    **context,
                )
                await self._guarded(self._sleep(delay_ms / 1000), cancel_event, deadline)

        raise AssertionError("unreachable")

    @staticmethod
    async def _guarded(
        awaitable: Awaitable[T],
        cancel_event: Optional[asyncio.Event],
        deadline: Optional[float],
    ) -> T:
        """Await ``awaitable`` unless the cancel event fires or the deadline passes first."""
        if cancel_event is None and deadline is None:
            return await awaitable

        task = asyncio.ensure_future(awaitable)
        if cancel_event is not None and cancel_event.is_set():
            await _cancel_task(task)
            raise RequestCancelledError("cancelled")

        waiters = {task}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        remaining = None
        if deadline is not None:
            remaining = max(0.0, deadline - asyncio.get_running_loop().time())

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            await _cancel_task(task)
            raise
        finally:
            if cancel_waiter is not None:
                await _cancel_task(cancel_waiter)

        if task in done:
            return task.result()

        await _cancel_task(task)
        raise RequestCancelledError("cancelled" if cancel_waiter in done else "deadline")


async def _cancel_task(task: "asyncio.Future[Any]") -> None:
    """Cancel ``task`` and wait for it to finish unwinding.

    asyncio.wait never raises the task's own CancelledError, so cancellation
    of the calling task still propagates.
    """
    if task.done():
        return
    task.cancel()
    await asyncio.wait({task})
