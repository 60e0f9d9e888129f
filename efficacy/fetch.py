"""
Retrying fetch
==============

Leaf Task over the ``http`` capability, wrapped in ``retry``.

    io = define_io(http=client.get)
    result = await fetch("https://example.org/data.json").run(io, token)
    match result:
        case Ok(response): ...
        case Error(FetchError(message, can_retry)): ...
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import typing
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from .cancel import CancelToken
from .io import HttpIO
from .retry import RetryPolicy, retry
from .task import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FetchError:
    """Why a fetch failed, and whether trying again could help."""

    message: str
    can_retry: bool


class Response(typing.Protocol):
    """What fetch needs from the value the ``http`` capability returns."""

    @property
    def status_code(self) -> int: ...

    @property
    def is_success(self) -> bool: ...


def _can_retry(error: FetchError) -> bool:
    return error.can_retry


# 1s, 2s, 4s, ... capped at 30s per wait, at most 30s of waiting in total.
DEFAULT_POLICY: RetryPolicy[FetchError] = RetryPolicy.exponential(
    initial=1.0,
    multiplier=2.0,
    max_delay=30.0,
    ceiling=30.0,
)


def _cancelled(token: CancelToken) -> FetchError:
    reason = token.reason
    if reason is None:
        return FetchError("fetch cancelled", can_retry=False)
    return FetchError(f"fetch cancelled: {reason}", can_retry=False)


_ABANDONED: typing.Final = object()


async def _call_until_cancelled(
    call: typing.Awaitable[Response],
    token: CancelToken | None,
) -> Response | object:
    """Await ``call``, or cancel it and return ``_ABANDONED`` once ``token`` fires."""
    if token is None:
        return await call
    request = asyncio.ensure_future(call)
    signal = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({request, signal}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        signal.cancel()
        if not request.done():
            request.cancel()
    if request in done:
        return request.result()
    await asyncio.wait({request})
    return _ABANDONED


def attempt(uri: str, /, **options: typing.Any) -> Task[Response, FetchError, HttpIO]:
    """
    Single ``http`` call turned into a typed outcome.

    - token already signaled -> non-retryable failure, no call made
    - token signaled while the call is in flight -> call cancelled, same failure
    - capability raised -> retryable failure carrying the exception text
    - response not successful -> retryable failure ``"HTTP <status>"``
    """

    async def run(io: HttpIO, token: CancelToken | None) -> Result[Response, FetchError]:
        if token is not None and token.cancelled:
            return Error(_cancelled(token))
        try:
            outcome = await _call_until_cancelled(io.http(uri, **options), token)
        except Exception as exc:
            logger.debug("fetch %s raised %r", uri, exc)
            return Error(FetchError(str(exc) or type(exc).__name__, can_retry=True))
        if outcome is _ABANDONED:
            assert token is not None
            logger.debug("fetch %s abandoned: %r", uri, token)
            return Error(_cancelled(token))
        response = typing.cast(Response, outcome)
        if not response.is_success:
            logger.debug("fetch %s answered %s", uri, response.status_code)
            return Error(FetchError(f"HTTP {response.status_code}", can_retry=True))
        return Ok(response)

    return Task.create(run)


def fetch(
    uri: str,
    /,
    *,
    policy: RetryPolicy[FetchError] = DEFAULT_POLICY,
    **options: typing.Any,
) -> Task[Response, FetchError, HttpIO]:
    """
    ``attempt`` with exponential backoff.

    Only retryable failures are retried, whatever ``policy.retry_on`` says.
    Once the policy gives up, the last failure is returned; it still has
    ``can_retry=True`` so callers can schedule another round later.
    """
    extra = policy.retry_on

    def retry_on(error: FetchError) -> bool:
        return _can_retry(error) and (extra is None or extra(error))

    return retry(attempt(uri, **options), policy=dataclasses.replace(policy, retry_on=retry_on))


__all__ = (
    "DEFAULT_POLICY",
    "FetchError",
    "Response",
    "attempt",
    "fetch",
)
