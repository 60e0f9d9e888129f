"""Stream

Lazy multi-result computation. Running a Stream yields an ordered sequence
of ``Progress`` emissions (Result + position), pulled one at a time through
the ``AsyncIterator`` protocol.

Ordering: emissions leave a combinator in the order they were produced.
``flat_map`` drains each sub-stream completely before pulling the next
source emission. Nothing runs concurrently inside a Stream."""

from __future__ import annotations

import typing
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import assert_never

from kungfu import Error, Ok, Result

from ._errors import EmptyStreamError
from ._types import NoError, StreamInit
from .cancel import CancelToken
from .io import NoIO
from .progress import SINGLE, Progress
from .task import Task


class Stream[T, E, Caps]:
    """Lazy asynchronous sequence of progress-tagged Results.

    Same contract as ``Task``: immutable, stateless between runs, io and
    token forwarded unchanged, only leaf initializers observe the token.
    Stopping iteration early is the other way to cancel a run: every inner
    iterator is closed when the consumer walks away.

    A producer may keep emitting after a failure. Plain iteration sees
    everything; ``flat_map`` and ``or_else`` stop at the first source failure.
    """

    __slots__ = ("_init",)

    def __init__(self, init: StreamInit[T, E, Caps], /) -> None:
        """Create Stream from an initializer returning an async iterator."""
        self._init = init

    # Constructors

    @staticmethod
    def create[V, Err, C](init: StreamInit[V, Err, C], /) -> Stream[V, Err, C]:
        """Leaf Stream from an initializer, usually an async generator function.

        Example:
            def upload(chunks: list[bytes]) -> Stream[int, str, UploadIO]:
                async def init(io: UploadIO, token: CancelToken | None):
                    for index, chunk in enumerate(chunks, start=1):
                        if token is not None and token.cancelled:
                            yield fail("cancelled")
                            return
                        sent = await io.put_chunk(chunk)
                        yield ok(sent, ProgressState(total=len(chunks), current=index))

                return Stream.create(init)
        """
        return Stream(init)

    @staticmethod
    def const[V](value: V, /) -> Stream[V, NoError, NoIO]:
        """Single success tagged ``{total: 1, current: 1}``."""

        async def emissions(
            io: NoIO, token: CancelToken | None
        ) -> AsyncIterator[Progress[V, NoError]]:
            yield Progress(Ok(value), SINGLE)

        return Stream(emissions)

    @staticmethod
    def never[Err](error: Err, /) -> Stream[typing.Never, Err, NoIO]:
        """Single failure without progress metadata."""

        async def emissions(
            io: NoIO, token: CancelToken | None
        ) -> AsyncIterator[Progress[typing.Never, Err]]:
            yield Progress(Error(error))

        return Stream(emissions)

    @staticmethod
    def from_emissions[V, Err](*items: Progress[V, Err]) -> Stream[V, Err, NoIO]:
        """Replay fixed emissions in order."""

        async def emissions(
            io: NoIO, token: CancelToken | None
        ) -> AsyncIterator[Progress[V, Err]]:
            for item in items:
                yield item

        return Stream(emissions)

    # Functor operations

    def map[U](self, f: Callable[[T], U], /) -> Stream[U, E, Caps]:
        """Apply ``f`` to every success emission. Progress is kept."""

        async def emissions(
            io: Caps, token: CancelToken | None
        ) -> AsyncIterator[Progress[U, E]]:
            async with aclosing(self.run(io, token)) as source:
                async for item in source:
                    match item.result:
                        case Ok(value):
                            yield item.with_result(Ok(f(value)))
                        case Error(err):
                            yield item.with_result(Error(err))
                        case _ as unreachable:
                            assert_never(unreachable)

        return Stream(emissions)

    def map_error[F](self, f: Callable[[E], F], /) -> Stream[T, F, Caps]:
        """Apply ``f`` to every failure emission. Progress is kept."""

        async def emissions(
            io: Caps, token: CancelToken | None
        ) -> AsyncIterator[Progress[T, F]]:
            async with aclosing(self.run(io, token)) as source:
                async for item in source:
                    match item.result:
                        case Ok(value):
                            yield item.with_result(Ok(value))
                        case Error(err):
                            yield item.with_result(Error(f(err)))
                        case _ as unreachable:
                            assert_never(unreachable)

        return Stream(emissions)

    # Monad operations

    def flat_map[U, F, NextCaps](
        self,
        f: Callable[[T], Stream[U, F, NextCaps]],
        /,
    ) -> Stream[U, E | F, NextCaps]:
        """
        Splice a sub-stream in place of every success emission.

        - On Ok: ``f(value)`` is run and all its emissions are forwarded
          before the next source emission is pulled
        - On Error: the failure is forwarded once and the source is not
          pulled again

        Sub-stream failures are forwarded like any other emission.
        """

        async def emissions(
            io: NextCaps, token: CancelToken | None
        ) -> AsyncIterator[Progress[U, E | F]]:
            async with aclosing(self.run(typing.cast(Caps, io), token)) as source:
                async for item in source:
                    match item.result:
                        case Ok(value):
                            async with aclosing(f(value).run(io, token)) as inner:
                                async for nested in inner:
                                    yield nested
                        case Error(err):
                            yield item.with_result(Error(err))
                            return
                        case _ as unreachable:
                            assert_never(unreachable)

        return Stream(emissions)

    def or_else[F, NextCaps](
        self,
        f: Callable[[E], Stream[T, F, NextCaps]],
        /,
    ) -> Stream[T, F, NextCaps]:
        """Replace the rest of the run with ``f(error)`` on the first failure."""

        async def emissions(
            io: NextCaps, token: CancelToken | None
        ) -> AsyncIterator[Progress[T, F]]:
            async with aclosing(self.run(typing.cast(Caps, io), token)) as source:
                async for item in source:
                    match item.result:
                        case Ok(value):
                            yield item.with_result(Ok(value))
                        case Error(err):
                            async with aclosing(f(err).run(io, token)) as recovery:
                                async for nested in recovery:
                                    yield nested
                            return
                        case _ as unreachable:
                            assert_never(unreachable)

        return Stream(emissions)

    def or_else_map(self, f: Callable[[E], T], /) -> Stream[T, NoError, Caps]:
        """Turn every failure emission into a success in place. Progress is kept."""

        async def emissions(
            io: Caps, token: CancelToken | None
        ) -> AsyncIterator[Progress[T, NoError]]:
            async with aclosing(self.run(io, token)) as source:
                async for item in source:
                    match item.result:
                        case Ok(value):
                            yield item.with_result(Ok(value))
                        case Error(err):
                            yield item.with_result(Ok(f(err)))
                        case _ as unreachable:
                            assert_never(unreachable)

        return Stream(emissions)

    # Conversions

    def to_task(self) -> Task[T, E, Caps]:
        """
        Drain the stream and resolve to the last emission's Result.

        Raises ``EmptyStreamError`` from ``run`` if nothing was emitted:
        that is a broken producer, not a failure of type ``E``.
        """

        async def wrapper(io: Caps, token: CancelToken | None) -> Result[T, E]:
            last: Progress[T, E] | None = None
            async with aclosing(self.run(io, token)) as source:
                async for item in source:
                    last = item
            if last is None:
                raise EmptyStreamError()
            return last.result

        return Task(wrapper)

    # Execution

    async def run(
        self,
        io: Caps,
        token: CancelToken | None = None,
    ) -> AsyncIterator[Progress[T, E]]:
        """Produce emissions lazily. Every call is an independent run."""
        iterator = self._init(io, token)
        try:
            async for item in iterator:
                yield item
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    def __repr__(self) -> str:
        return f"Stream({getattr(self._init, '__qualname__', self._init)!r})"


__all__ = ("Stream",)
