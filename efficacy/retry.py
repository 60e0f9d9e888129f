"""
Retry combinators
=================

Retry is not part of the Task core: it is an ordinary consumer built on
``Task.create`` and ``Task.run``. Waits between attempts observe the
invocation's cancellation token.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from ._types import Predicate
from .cancel import CancelToken, sleep
from .task import Task

logger = logging.getLogger(__name__)


# (zero-based attempt, error of that attempt) -> seconds to wait
type BackoffStrategy[E] = Callable[[int, E], float]


def _constant_wait[E](seconds: float) -> BackoffStrategy[E]:
    def wait(attempt: int, error: E) -> float:
        return seconds

    return wait


def _growing_wait[E](
    initial: float,
    multiplier: float,
    max_delay: float,
    jitter_factor: float = 0.0,
) -> BackoffStrategy[E]:
    """``min(initial * multiplier**attempt, max_delay)``, spread by +/- ``jitter_factor``."""

    def wait(attempt: int, error: E) -> float:
        seconds = min(initial * multiplier**attempt, max_delay)
        if jitter_factor:
            seconds *= 1.0 + random.uniform(-jitter_factor, jitter_factor)
        return max(0.0, seconds)

    return wait


@dataclass(frozen=True, slots=True)
class RetryPolicy[E]:
    """
    Retry configuration with pluggable backoff strategy.

    ``times`` bounds the number of attempts, ``ceiling`` bounds the total
    time spent waiting between them (in seconds). At least one is required.
    """

    backoff: BackoffStrategy[E]
    times: int | None = None
    ceiling: float | None = None
    retry_on: Predicate[E] | None = None

    def __post_init__(self) -> None:
        if self.times is None and self.ceiling is None:
            raise ValueError("RetryPolicy needs times or ceiling")
        if self.times is not None and self.times < 1:
            raise ValueError("RetryPolicy.times must be >= 1")
        if self.ceiling is not None and self.ceiling < 0.0:
            raise ValueError("RetryPolicy.ceiling must be >= 0")

    @classmethod
    def fixed(
        cls,
        times: int,
        delay_seconds: float = 0.0,
        retry_on: Predicate[E] | None = None,
    ) -> RetryPolicy[E]:
        """Same delay every retry. Simple and predictable."""
        if delay_seconds < 0.0:
            raise ValueError("delay_seconds must be >= 0")
        return cls(backoff=_constant_wait(delay_seconds), times=times, retry_on=retry_on)

    @classmethod
    def exponential(
        cls,
        times: int | None = None,
        initial: float = 0.1,
        multiplier: float = 2.0,
        max_delay: float = 60.0,
        ceiling: float | None = None,
        retry_on: Predicate[E] | None = None,
    ) -> RetryPolicy[E]:
        """Back off more aggressively with each failure."""
        if initial < 0.0:
            raise ValueError("initial must be >= 0")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if max_delay < initial:
            raise ValueError("max_delay must be >= initial")
        if times is None and initial == 0.0:
            raise ValueError("a policy bounded only by ceiling needs initial > 0")
        return cls(
            backoff=_growing_wait(initial, multiplier, max_delay),
            times=times,
            ceiling=ceiling,
            retry_on=retry_on,
        )

    @classmethod
    def exponential_jitter(
        cls,
        times: int | None = None,
        initial: float = 0.1,
        multiplier: float = 2.0,
        max_delay: float = 60.0,
        jitter_factor: float = 0.3,
        ceiling: float | None = None,
        retry_on: Predicate[E] | None = None,
    ) -> RetryPolicy[E]:
        """Exponential growth + randomness, to avoid thundering herd."""
        if initial < 0.0:
            raise ValueError("initial must be >= 0")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if max_delay < initial:
            raise ValueError("max_delay must be >= initial")
        if times is None and initial == 0.0:
            raise ValueError("a policy bounded only by ceiling needs initial > 0")
        if jitter_factor < 0.0 or jitter_factor > 1.0:
            raise ValueError("jitter_factor must be in [0, 1]")
        return cls(
            backoff=_growing_wait(initial, multiplier, max_delay, jitter_factor),
            times=times,
            ceiling=ceiling,
            retry_on=retry_on,
        )


def _should_retry[E](*, policy: RetryPolicy[E], attempt: int, error: E) -> bool:
    if policy.times is not None and attempt + 1 >= policy.times:
        return False
    if policy.retry_on is not None and not policy.retry_on(error):
        return False
    return True


def _within_ceiling[E](*, policy: RetryPolicy[E], waited: float, delay: float) -> bool:
    return policy.ceiling is None or waited + delay <= policy.ceiling


def retry[T, E, Caps](
    task: Task[T, E, Caps],
    *,
    policy: RetryPolicy[E],
) -> Task[T, E, Caps]:
    """
    Run ``task`` again while it fails and the policy allows it.

    Returns the first success, otherwise the last failure. When the token
    fires during a wait, the wait is abandoned and the next attempt starts
    right away: leaves that honour the token report the cancellation there.
    """

    async def run(io: Caps, token: CancelToken | None) -> Result[T, E]:
        attempt = 0
        waited = 0.0
        while True:
            result = await task.run(io, token)
            match result:
                case Ok(_):
                    return result
                case Error(e):
                    pass
            if not _should_retry(policy=policy, attempt=attempt, error=e):
                return result
            delay = policy.backoff(attempt, e)
            if not _within_ceiling(policy=policy, waited=waited, delay=delay):
                logger.debug("retry budget spent after %d attempts (%.3fs waited)", attempt + 1, waited)
                return result
            logger.debug("attempt %d failed with %r, retrying in %.3fs", attempt + 1, e, delay)
            waited += delay
            if not await sleep(delay, token):
                logger.debug("retry wait abandoned: %r", token)
            attempt += 1

    return Task.create(run)


__all__ = (
    "BackoffStrategy",
    "RetryPolicy",
    "retry",
)
