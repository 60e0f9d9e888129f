from __future__ import annotations

import asyncio
import time

import pytest

from efficacy import CancelToken, sleep


def test_token_starts_pending() -> None:
    token = CancelToken()
    assert not token.cancelled
    assert token.reason is None


def test_first_reason_wins() -> None:
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")
    assert token.cancelled
    assert token.reason == "first"


@pytest.mark.asyncio
async def test_sleep_without_token_completes() -> None:
    assert await sleep(0.001) is True


@pytest.mark.asyncio
async def test_sleep_full_delay() -> None:
    assert await sleep(0.001, CancelToken()) is True


@pytest.mark.asyncio
async def test_sleep_returns_at_once_when_already_cancelled() -> None:
    token = CancelToken()
    token.cancel()
    started = time.monotonic()
    assert await sleep(10.0, token) is False
    assert time.monotonic() - started < 1.0


@pytest.mark.asyncio
async def test_sleep_is_abandoned_on_cancel() -> None:
    token = CancelToken()

    async def cancel_soon() -> None:
        await asyncio.sleep(0.01)
        token.cancel("stop")

    started = time.monotonic()
    canceller = asyncio.create_task(cancel_soon())
    assert await sleep(10.0, token) is False
    await canceller
    assert time.monotonic() - started < 1.0


@pytest.mark.asyncio
async def test_wait_returns_once_signaled() -> None:
    token = CancelToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()
    token.cancel()
    await asyncio.wait_for(waiter, timeout=1.0)
