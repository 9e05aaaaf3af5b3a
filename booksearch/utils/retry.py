"""Retry policy for waiting on the search store.

The reload pipeline must not start loading until the store answers a health
check.  How long to keep trying is a deployment decision, so it is
expressed as a :class:`RetryPolicy` object that is injected into the
orchestrator instead of being hard-coded in a loop:

* ``RetryPolicy(max_attempts=None)`` -- retry until healthy (unbounded).
* ``RetryPolicy(max_attempts=10)`` -- fail fast after ten attempts.
* ``RetryPolicy.immediate(3)`` -- three attempts with no sleep (tests).

The backoff function maps the 1-based attempt number that just failed to
the number of seconds to sleep before the next attempt.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import structlog

_T = TypeVar("_T")

logger = structlog.get_logger(logger_name=__name__)


def exponential_backoff(base: float = 0.5, maximum: float = 30.0) -> Callable[[int], float]:
    """Return a backoff function doubling from *base* seconds, capped at *maximum*."""

    def _backoff(attempt: int) -> float:
        return min(maximum, base * (2 ** (attempt - 1)))

    return _backoff


def no_backoff(attempt: int) -> float:  # noqa: ARG001
    return 0.0


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry an async operation and how long to wait between tries.

    Parameters
    ----------
    max_attempts:
        Total number of attempts, or ``None`` to retry forever.
    backoff:
        Maps the failed attempt number (1-based) to a delay in seconds.
    retry_on:
        Exception types that trigger another attempt.  Anything else
        propagates immediately.
    """

    max_attempts: int | None = 10
    backoff: Callable[[int], float] = field(default_factory=exponential_backoff)
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 or None")

    @classmethod
    def immediate(cls, max_attempts: int | None = 1) -> RetryPolicy:
        """A policy that never sleeps between attempts."""
        return cls(max_attempts=max_attempts, backoff=no_backoff)

    @classmethod
    def unbounded(cls, base: float = 0.5, maximum: float = 30.0) -> RetryPolicy:
        """Retry until the operation succeeds, backing off exponentially."""
        return cls(max_attempts=None, backoff=exponential_backoff(base, maximum))

    async def run(
        self,
        operation: Callable[[], Awaitable[_T]],
        *,
        description: str = "operation",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> _T:
        """Call *operation* until it succeeds or attempts are exhausted.

        The last exception is re-raised once ``max_attempts`` is reached.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except self.retry_on as exc:
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    logger.error(
                        "retry_exhausted",
                        operation=description,
                        attempts=attempt,
                        error=str(exc),
                    )
                    raise
                delay = self.backoff(attempt)
                logger.warning(
                    "retrying",
                    operation=description,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay_s=delay,
                    error=str(exc),
                )
                if delay > 0:
                    await sleep(delay)
