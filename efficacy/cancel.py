"""
Cancellation token
==================

Cooperative, advisory cancellation. A token is handed to ``Task.run`` /
``Stream.run`` and forwarded untouched through every combinator; only leaf
initializers look at it.
"""

from __future__ import annotations

import asyncio
import typing


class CancelToken:
    """
    Checkable cancellation flag with an optional reason.

    Example:
        token = CancelToken()
        pending = asyncio.create_task(download.run(io, token))
        token.cancel("user closed the dialog")
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: typing.Any = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> typing.Any:
        """Value passed to the first ``cancel`` call, ``None`` if not signaled."""
        return self._reason

    def cancel(self, reason: typing.Any = None) -> None:
        """Signal the token. Later calls keep the first reason."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Suspend until the token is signaled."""
        await self._event.wait()

    def __repr__(self) -> str:
        if self.cancelled:
            return f"CancelToken(cancelled, reason={self._reason!r})"
        return "CancelToken(pending)"


async def sleep(seconds: float, token: CancelToken | None = None) -> bool:
    """
    Wait ``seconds`` unless ``token`` is signaled first.

    Returns True when the full delay elapsed, False when the wait was
    abandoned because of cancellation.
    """
    if token is None:
        if seconds > 0.0:
            await asyncio.sleep(seconds)
        return True

    if token.cancelled:
        return False
    if seconds <= 0.0:
        return True

    try:
        await asyncio.wait_for(token.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return True
    return False


__all__ = ("CancelToken", "sleep")
