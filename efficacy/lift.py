"""
Lift helpers.

Up: bring plain values, Optionals and exception-raising code into a Task.
Down: run a Task and pull the outcome back out.

    from efficacy import lift as L

    parsed = L.catching(lambda: json.loads(raw), on_error=lambda e: ParseError(str(e)))
    value = await L.unsafe(parsed, io)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kungfu import Error, Ok, Result

from .cancel import CancelToken
from .io import NoIO
from .task import Task


# Up


def optional[T, E](
    value: T | None,
    *,
    error: Callable[[], E],
) -> Task[T, E, NoIO]:
    """
    Convert Optional to Task. None becomes Error(error()).

    NOTE: error is a thunk to avoid building the error when value is present.
    """

    async def run(io: NoIO, token: CancelToken | None) -> Result[T, E]:
        if value is None:
            return Error(error())
        return Ok(value)

    return Task.create(run)


def catching[T, E](
    thunk: Callable[[], T],
    *,
    on_error: Callable[[Exception], E],
) -> Task[T, E, NoIO]:
    """
    Execute sync thunk, catch exceptions and convert to Error.

    The thunk runs on every ``run``, not at construction.
    """

    async def run(io: NoIO, token: CancelToken | None) -> Result[T, E]:
        try:
            return Ok(thunk())
        except Exception as exc:
            return Error(on_error(exc))

    return Task.create(run)


def catching_async[T, E, Caps](
    thunk: Callable[[Caps], Awaitable[T]],
    *,
    on_error: Callable[[Exception], E],
) -> Task[T, E, Caps]:
    """
    Call an async capability, catch exceptions and convert to Error.

    Example:
        read = L.catching_async(
            lambda io: io.read_file("config.toml"),
            on_error=lambda e: ConfigError(str(e)),
        )
    """

    async def run(io: Caps, token: CancelToken | None) -> Result[T, E]:
        try:
            return Ok(await thunk(io))
        except Exception as exc:
            return Error(on_error(exc))

    return Task.create(run)


# Down


async def to_result[T, E, Caps](
    task: Task[T, E, Caps],
    io: Caps,
    token: CancelToken | None = None,
) -> Result[T, E]:
    """Run task and return Result."""
    return await task.run(io, token)


async def unsafe[T, E, Caps](
    task: Task[T, E, Caps],
    io: Caps,
    token: CancelToken | None = None,
) -> T:
    """
    Run and unwrap, raises on Error.

    NOTE: Use only when you're certain of success or want to propagate errors.
    """
    result = await task.run(io, token)
    return result.unwrap()


async def or_default[T, E, Caps](
    task: Task[T, E, Caps],
    io: Caps,
    default: T,
    token: CancelToken | None = None,
) -> T:
    """Run and return value or default."""
    result = await task.run(io, token)
    match result:
        case Ok(v):
            return v
        case Error(_):
            return default


__all__ = (
    "catching",
    "catching_async",
    "optional",
    "or_default",
    "to_result",
    "unsafe",
)
