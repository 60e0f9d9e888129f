"""Task

Lazy single-result computation:
- Lazy (nothing runs until ``run``)
- Coro (asynchronous)
- Result[T, E] (success/failure)
- Caps (capabilities injected at run time)

Built on top of kungfu library patterns."""

from __future__ import annotations

import typing
from collections.abc import AsyncIterator, Callable
from typing import assert_never

from kungfu import Error, LazyCoroResult, Ok, Result

from ._types import NoError, TaskInit
from .cancel import CancelToken
from .io import NoIO
from .progress import SINGLE, Progress

if typing.TYPE_CHECKING:
    from .stream import Stream


class Task[T, E, Caps]:
    """Lazy asynchronous computation with typed capability requirements.

    A Task holds a single initializer ``(io, token) -> Awaitable[Result]``.
    Combinators wrap it into a new Task; no Task keeps per-run state, so the
    same value can be run many times, concurrently too.

    ``io`` and ``token`` are forwarded unchanged to every sub-Task. Only the
    leaf initializers (``Task.create``) decide whether to look at the token.

    Monadic laws:
    - Left identity: Task.of(a).flat_map(f) ≡ f(a)
    - Right identity: m.flat_map(Task.of) ≡ m
    - Associativity: m.flat_map(f).flat_map(g) ≡ m.flat_map(x => f(x).flat_map(g))
    """

    __slots__ = ("_init",)

    def __init__(self, init: TaskInit[T, E, Caps], /) -> None:
        """Create Task from an initializer taking ``(io, token)``."""
        self._init = init

    # Constructors

    @staticmethod
    def create[V, Err, C](init: TaskInit[V, Err, C], /) -> Task[V, Err, C]:
        """Leaf Task from an async initializer that may touch capabilities.

        Example:
            def read_config(path: str) -> Task[bytes, str, FileIO]:
                async def init(io: FileIO, token: CancelToken | None) -> Result[bytes, str]:
                    if token is not None and token.cancelled:
                        return Error("cancelled")
                    return Ok(await io.read_file(path))

                return Task.create(init)
        """
        return Task(init)

    @staticmethod
    def of[V](value: V, /) -> Task[V, NoError, NoIO]:
        """Always succeeds with ``value``. Requires nothing."""

        async def wrapper(io: NoIO, token: CancelToken | None) -> Result[V, NoError]:
            return Ok(value)

        return Task(wrapper)

    @staticmethod
    def reject[Err](error: Err, /) -> Task[typing.Never, Err, NoIO]:
        """Always fails with ``error``. Requires nothing."""

        async def wrapper(io: NoIO, token: CancelToken | None) -> Result[typing.Never, Err]:
            return Error(error)

        return Task(wrapper)

    @staticmethod
    def from_result[V, Err](result: Result[V, Err], /) -> Task[V, Err, NoIO]:
        """Lift an already computed Result."""

        async def wrapper(io: NoIO, token: CancelToken | None) -> Result[V, Err]:
            return result

        return Task(wrapper)

    @staticmethod
    def from_lazy[V, Err](lazy: LazyCoroResult[V, Err], /) -> Task[V, Err, NoIO]:
        """Convert kungfu LazyCoroResult into a Task requiring no capabilities."""

        async def wrapper(io: NoIO, token: CancelToken | None) -> Result[V, Err]:
            return await lazy

        return Task(wrapper)

    # Functor operations

    def map[U](self, f: Callable[[T], U], /) -> Task[U, E, Caps]:
        """Apply ``f`` to the success value. Failures pass through untouched."""

        async def wrapper(io: Caps, token: CancelToken | None) -> Result[U, E]:
            result = await self._init(io, token)
            match result:
                case Ok(value):
                    return Ok(f(value))
                case Error(err):
                    return Error(err)
                case _ as unreachable:
                    assert_never(unreachable)

        return Task(wrapper)

    def map_error[F](self, f: Callable[[E], F], /) -> Task[T, F, Caps]:
        """Apply ``f`` to the failure value. Successes pass through untouched."""

        async def wrapper(io: Caps, token: CancelToken | None) -> Result[T, F]:
            result = await self._init(io, token)
            match result:
                case Ok(value):
                    return Ok(value)
                case Error(err):
                    return Error(f(err))
                case _ as unreachable:
                    assert_never(unreachable)

        return Task(wrapper)

    # Monad operations

    def flat_map[U, F, NextCaps](
        self,
        f: Callable[[T], Task[U, F, NextCaps]],
        /,
    ) -> Task[U, E | F, NextCaps]:
        """
        Monadic bind (>>=).

        - On Ok: runs ``f(value)`` with the same io and token
        - On Error: short-circuit, ``f`` is never called

        ``NextCaps`` must cover ``Caps``: the io passed to ``run`` feeds both steps.
        """

        async def wrapper(io: NextCaps, token: CancelToken | None) -> Result[U, E | F]:
            result = await self._init(typing.cast(Caps, io), token)
            match result:
                case Ok(value):
                    return await f(value).run(io, token)
                case Error(err):
                    return Error(err)
                case _ as unreachable:
                    assert_never(unreachable)

        return Task(wrapper)

    def or_else[F, NextCaps](
        self,
        f: Callable[[E], Task[T, F, NextCaps]],
        /,
    ) -> Task[T, F, NextCaps]:
        """Recover from a failure by running ``f(error)``. Successes pass through."""

        async def wrapper(io: NextCaps, token: CancelToken | None) -> Result[T, F]:
            result = await self._init(typing.cast(Caps, io), token)
            match result:
                case Ok(value):
                    return Ok(value)
                case Error(err):
                    return await f(err).run(io, token)
                case _ as unreachable:
                    assert_never(unreachable)

        return Task(wrapper)

    def or_else_map(self, f: Callable[[E], T], /) -> Task[T, NoError, Caps]:
        """Turn any failure into a success value. The result cannot fail."""

        async def wrapper(io: Caps, token: CancelToken | None) -> Result[T, NoError]:
            result = await self._init(io, token)
            match result:
                case Ok(value):
                    return Ok(value)
                case Error(err):
                    return Ok(f(err))
                case _ as unreachable:
                    assert_never(unreachable)

        return Task(wrapper)

    # Conversions

    def to_stream(self) -> Stream[T, E, Caps]:
        """Stream emitting this Task's Result once, tagged ``{total: 1, current: 1}``."""
        from .stream import Stream

        async def emissions(
            io: Caps, token: CancelToken | None
        ) -> AsyncIterator[Progress[T, E]]:
            yield Progress(await self._init(io, token), SINGLE)

        return Stream(emissions)

    def to_lazy(self, io: Caps, token: CancelToken | None = None) -> LazyCoroResult[T, E]:
        """Bind capabilities and token, producing a kungfu LazyCoroResult."""

        async def wrapper() -> Result[T, E]:
            return await self._init(io, token)

        return LazyCoroResult(wrapper)

    # Execution

    async def run(self, io: Caps, token: CancelToken | None = None) -> Result[T, E]:
        """Execute the computation. Every call is an independent run."""
        return await self._init(io, token)

    def __repr__(self) -> str:
        return f"Task({getattr(self._init, '__qualname__', self._init)!r})"


__all__ = ("Task",)
