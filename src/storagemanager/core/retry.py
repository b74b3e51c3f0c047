"""Fixed-delay retry executor for eventually consistent backends.

Managed cloud backends provision accounts asynchronously: a container can
only be created once the account reports a succeeded provisioning state.
RetryExecutor polls such operations with a fixed delay until they succeed,
the attempt budget is exhausted, the deadline passes or a cancel signal
arrives.

Usage:
    from storagemanager.core.retry import RetryExecutor

    executor = RetryExecutor(config.retry)

    # attempt() returns True when done, False when the backend is not ready
    outcome = await executor.run(attempt, cancel=shutdown_event)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from storagemanager.config import RetryConfig
from storagemanager.logging_schema import LogEvent
from storagemanager.metrics import RETRY_ATTEMPTS

logger = logging.getLogger(__name__)


class RetryStatus(str, Enum):
    """Terminal states of a retry loop that are not failures."""

    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"


@dataclass
class RetryState:
    """Transient execution state of one retry loop."""

    attempts: int = 0
    last_error: Exception | None = None
    waited: float = 0.0


@dataclass
class RetryOutcome:
    status: RetryStatus
    state: RetryState

    @property
    def succeeded(self) -> bool:
        return self.status == RetryStatus.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.status == RetryStatus.CANCELLED


class RetryExhaustedError(Exception):
    """Raised when the attempt budget or the deadline is used up.

    Attributes:
        state: Retry state at the time the loop gave up.
        last_error: Last exception raised by an attempt (None if every
            attempt only reported "not ready").
        timed_out: True when the deadline stopped the loop.
    """

    def __init__(self, state: RetryState, timed_out: bool = False) -> None:
        self.state = state
        self.last_error = state.last_error
        self.timed_out = timed_out
        reason = "deadline exceeded" if timed_out else "retry budget exhausted"
        message = f"{reason} after {state.attempts} attempts"
        if state.last_error is not None:
            message = f"{message}: {state.last_error}"
        super().__init__(message)


def _always_retryable(exc: Exception) -> bool:
    return True


class RetryExecutor:
    """Runs an attempt repeatedly with a fixed delay.

    Args:
        config: Retry budget (max_retries, delay, deadline).
        is_retryable: Classifier for attempt errors. Errors it rejects are
            raised immediately without further attempts.
    """

    def __init__(
        self,
        config: RetryConfig,
        is_retryable: Callable[[Exception], bool] | None = None,
    ) -> None:
        self._config = config
        self._is_retryable = is_retryable or _always_retryable

    @property
    def max_attempts(self) -> int:
        return max(1, self._config.max_retries)

    async def run(
        self,
        attempt: Callable[[], Awaitable[bool]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> RetryOutcome:
        """Run attempt until it returns True.

        Args:
            attempt: Factory creating a new coroutine for each attempt.
                Returns True when done, False when the backend is not ready.
            cancel: Cooperative cancel signal observed while waiting.

        Returns:
            RetryOutcome with status SUCCEEDED or CANCELLED.

        Raises:
            RetryExhaustedError: Budget or deadline used up without success.
            Exception: Non-retryable error raised by an attempt.
        """
        state = RetryState()
        deadline = self._config.deadline
        started = time.monotonic()

        while True:
            state.attempts += 1
            try:
                if await attempt():
                    RETRY_ATTEMPTS.labels(outcome="succeeded").inc()
                    return RetryOutcome(RetryStatus.SUCCEEDED, state)
                RETRY_ATTEMPTS.labels(outcome="not_ready").inc()
            except Exception as exc:
                if not self._is_retryable(exc):
                    RETRY_ATTEMPTS.labels(outcome="failed").inc()
                    raise
                state.last_error = exc
                RETRY_ATTEMPTS.labels(outcome="failed").inc()
                logger.warning(
                    "Retry attempt failed (attempt %d/%d): %s",
                    state.attempts,
                    self.max_attempts,
                    exc,
                    extra={
                        "event": LogEvent.RETRY_ATTEMPT_FAILED,
                        "attempt": state.attempts,
                        "error_type": type(exc).__name__,
                    },
                )

            if state.attempts >= self.max_attempts:
                break

            delay = self._config.delay
            if deadline is not None:
                remaining = deadline - (time.monotonic() - started)
                if remaining <= 0:
                    raise self._exhausted(state, timed_out=True)
                delay = min(delay, remaining)

            if await self._wait(delay, cancel):
                logger.info(
                    "Retry loop cancelled after %d attempts",
                    state.attempts,
                    extra={"event": LogEvent.RETRY_CANCELLED, "attempt": state.attempts},
                )
                return RetryOutcome(RetryStatus.CANCELLED, state)
            state.waited += delay

            if deadline is not None and time.monotonic() - started >= deadline:
                raise self._exhausted(state, timed_out=True)

        raise self._exhausted(state, timed_out=False)

    def _exhausted(self, state: RetryState, timed_out: bool) -> RetryExhaustedError:
        error = RetryExhaustedError(state, timed_out=timed_out)
        logger.error(
            "Retry loop gave up: %s",
            error,
            extra={
                "event": LogEvent.RETRY_EXHAUSTED,
                "attempt": state.attempts,
                "waited": state.waited,
                "timed_out": timed_out,
            },
        )
        return error

    @staticmethod
    async def _wait(delay: float, cancel: asyncio.Event | None) -> bool:
        """Wait for delay seconds. Returns True if cancel was signalled."""
        if cancel is None:
            await asyncio.sleep(delay)
            return False
        if cancel.is_set():
            return True
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
