from __future__ import annotations

import asyncio

import pytest
from kungfu import Error, LazyCoroResult, Ok, Result

from efficacy import SINGLE, CancelToken, Task, define_io

from _support import collect, outcome


def _double(x: int) -> int:
    return x * 2


def _inc(x: int) -> int:
    return x + 1


def _half(x: int) -> Task[int, str, object]:
    return Task.of(x // 2) if x % 2 == 0 else Task.reject(f"odd: {x}")


def _neg(x: int) -> Task[int, str, object]:
    return Task.of(-x)


SOURCES = [Task.of(10), Task.of(7), Task.reject("boom")]


@pytest.mark.asyncio
async def test_of_and_reject() -> None:
    assert outcome(await Task.of(1).run({})) == ("ok", 1)
    assert outcome(await Task.reject("e").run({})) == ("error", "e")


@pytest.mark.asyncio
async def test_from_result() -> None:
    assert outcome(await Task.from_result(Ok(3)).run(None)) == ("ok", 3)
    assert outcome(await Task.from_result(Error("x")).run(None)) == ("error", "x")


@pytest.mark.asyncio
async def test_nothing_runs_before_run() -> None:
    calls: list[str] = []

    async def init(io: object, token: CancelToken | None) -> Result[int, str]:
        calls.append("ran")
        return Ok(1)

    task = Task.create(init).map(_double).flat_map(Task.of)
    assert calls == []
    await task.run({})
    assert calls == ["ran"]


# Functor laws


@pytest.mark.asyncio
@pytest.mark.parametrize("m", SOURCES)
async def test_map_identity(m: Task[int, str, object]) -> None:
    assert outcome(await m.map(lambda x: x).run({})) == outcome(await m.run({}))


@pytest.mark.asyncio
@pytest.mark.parametrize("m", SOURCES)
async def test_map_composition(m: Task[int, str, object]) -> None:
    chained = await m.map(_double).map(_inc).run({})
    composed = await m.map(lambda x: _inc(_double(x))).run({})
    assert outcome(chained) == outcome(composed)


@pytest.mark.asyncio
async def test_map_skips_failures() -> None:
    calls: list[int] = []
    error = {"message": "e", "can_retry": True}

    def record(x: int) -> int:
        calls.append(x)
        return x

    result = await Task.reject(error).map(record).run({})
    assert calls == []
    match result:
        case Error(err):
            assert err is error
        case _:
            pytest.fail("expected failure")


# Monad laws


@pytest.mark.asyncio
@pytest.mark.parametrize("a", [4, 3])
async def test_left_identity(a: int) -> None:
    assert outcome(await Task.of(a).flat_map(_half).run({})) == outcome(await _half(a).run({}))


@pytest.mark.asyncio
@pytest.mark.parametrize("m", SOURCES)
async def test_right_identity(m: Task[int, str, object]) -> None:
    assert outcome(await m.flat_map(Task.of).run({})) == outcome(await m.run({}))


@pytest.mark.asyncio
@pytest.mark.parametrize("m", SOURCES)
async def test_associativity(m: Task[int, str, object]) -> None:
    left = await m.flat_map(_half).flat_map(_neg).run({})
    right = await m.flat_map(lambda x: _half(x).flat_map(_neg)).run({})
    assert outcome(left) == outcome(right)


@pytest.mark.asyncio
async def test_flat_map_short_circuits() -> None:
    calls: list[int] = []

    def step(x: int) -> Task[int, str, object]:
        calls.append(x)
        return Task.of(x)

    result = await Task.reject("original").flat_map(step).run({})
    assert calls == []
    assert outcome(result) == ("error", "original")


@pytest.mark.asyncio
async def test_flat_map_error_from_continuation() -> None:
    result = await Task.of(3).flat_map(_half).run({})
    assert outcome(result) == ("error", "odd: 3")


# Error channel


@pytest.mark.asyncio
async def test_map_error() -> None:
    assert outcome(await Task.reject("e").map_error(str.upper).run({})) == ("error", "E")
    assert outcome(await Task.of(1).map_error(str.upper).run({})) == ("ok", 1)


@pytest.mark.asyncio
async def test_or_else_recovers() -> None:
    task = Task.reject({"message": "e", "can_retry": True}).or_else(lambda _: Task.of("recovered"))
    assert outcome(await task.run({})) == ("ok", "recovered")


@pytest.mark.asyncio
async def test_or_else_passes_success_through() -> None:
    calls: list[str] = []

    def recover(err: str) -> Task[int, str, object]:
        calls.append(err)
        return Task.of(0)

    assert outcome(await Task.of(5).or_else(recover).run({})) == ("ok", 5)
    assert calls == []


@pytest.mark.asyncio
async def test_or_else_can_fail_again() -> None:
    task = Task.reject("first").or_else(lambda err: Task.reject(f"{err} then second"))
    assert outcome(await task.run({})) == ("error", "first then second")


@pytest.mark.asyncio
@pytest.mark.parametrize("m", SOURCES)
async def test_or_else_map_is_total(m: Task[int, str, object]) -> None:
    result = await m.or_else_map(len).run({})
    assert isinstance(result, Ok)


@pytest.mark.asyncio
async def test_or_else_map_converts_error() -> None:
    assert outcome(await Task.reject("four").or_else_map(len).run({})) == ("ok", 4)


# Scenarios


@pytest.mark.asyncio
async def test_pipeline_scenario() -> None:
    task = Task.of(5).map(lambda x: x * 2).flat_map(lambda x: Task.of(x + 5)).map(lambda x: x / 5)
    assert outcome(await task.run({})) == ("ok", 3.0)


@pytest.mark.asyncio
async def test_documented_pipeline_value() -> None:
    task = Task.of(10).map(lambda x: x * 2).flat_map(lambda x: Task.of(x + 5)).map(lambda x: x / 5)
    assert outcome(await task.run({})) == ("ok", 5.0)


@pytest.mark.asyncio
async def test_runs_are_independent() -> None:
    counter = {"runs": 0}

    async def init(io: object, token: CancelToken | None) -> Result[int, str]:
        counter["runs"] += 1
        await asyncio.sleep(0)
        return Ok(21)

    task = Task.create(init).map(_double)
    first, second = await asyncio.gather(task.run({}), task.run({}))
    assert outcome(first) == outcome(second) == ("ok", 42)
    assert counter["runs"] == 2


# Capabilities and token forwarding


@pytest.mark.asyncio
async def test_io_and_token_reach_every_leaf() -> None:
    seen: list[tuple[object, object]] = []

    async def leaf(io: object, token: CancelToken | None) -> Result[int, str]:
        seen.append((io, token))
        return Ok(1)

    io = define_io(http=lambda uri: None)
    token = CancelToken()
    step = Task.create(leaf)
    task = step.flat_map(lambda _: step).map_error(str).or_else(lambda _: step).flat_map(lambda _: step)
    await task.run(io, token)
    assert seen == [(io, token)] * 3


@pytest.mark.asyncio
async def test_cancelled_leaf_skips_capability() -> None:
    calls: list[str] = []

    async def http(uri: str) -> str:
        calls.append(uri)
        return "body"

    async def init(io, token: CancelToken | None) -> Result[str, str]:
        if token is not None and token.cancelled:
            return Error(f"cancelled: {token.reason}")
        return Ok(await io.http("https://example.org"))

    token = CancelToken()
    token.cancel("shutdown")
    result = await Task.create(init).map(str.upper).run(define_io(http=http), token)
    assert outcome(result) == ("error", "cancelled: shutdown")
    assert calls == []


@pytest.mark.asyncio
async def test_callback_exceptions_propagate() -> None:
    def explode(x: int) -> int:
        raise KeyError(x)

    with pytest.raises(KeyError):
        await Task.of(1).map(explode).run({})


@pytest.mark.asyncio
async def test_missing_capability_is_not_caught() -> None:
    async def init(io, token: CancelToken | None) -> Result[str, str]:
        return Ok(await io.http("x"))

    with pytest.raises(AttributeError):
        await Task.create(init).run(define_io())


# Conversions


@pytest.mark.asyncio
async def test_to_stream_emits_once() -> None:
    items = await collect(Task.of("v").to_stream())
    assert len(items) == 1
    assert items[0].value == "v"
    assert items[0].state == SINGLE

    items = await collect(Task.reject("e").to_stream())
    assert len(items) == 1
    assert items[0].error == "e"
    assert items[0].state == SINGLE


@pytest.mark.asyncio
@pytest.mark.parametrize("m", [Task.of("v"), Task.reject("e")])
async def test_stream_round_trip(m: Task[str, str, object]) -> None:
    assert outcome(await m.to_stream().to_task().run({})) == outcome(await m.run({}))


@pytest.mark.asyncio
async def test_to_lazy_binds_io() -> None:
    async def init(io, token: CancelToken | None) -> Result[str, str]:
        return Ok(await io.http("u"))

    async def http(uri: str) -> str:
        return uri * 2

    lazy = Task.create(init).to_lazy(define_io(http=http))
    assert isinstance(lazy, LazyCoroResult)
    assert outcome(await lazy) == ("ok", "uu")


@pytest.mark.asyncio
async def test_from_lazy() -> None:
    assert outcome(await Task.from_lazy(LazyCoroResult.pure(7)).run(None)) == ("ok", 7)
