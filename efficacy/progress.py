"""
Progress - Result tagged with stream position
=============================================

One emission of a Stream: the outcome of a step plus optional
``{total, current}`` metadata describing how far the producer got.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from .result import is_failure as _is_failure


@dataclass(frozen=True, slots=True)
class ProgressState:
    """
    Position of an emission inside its stream.

    Both counters are optional. The producer owns their meaning: nothing
    checks that ``current`` grows or stays below ``total``.
    """

    total: int | None = None
    current: int | None = None

    def __post_init__(self) -> None:
        if self.total is not None and self.total < 0:
            raise ValueError("ProgressState.total must be >= 0")
        if self.current is not None and self.current < 0:
            raise ValueError("ProgressState.current must be >= 0")


# State of a stream that emits exactly once.
SINGLE = ProgressState(total=1, current=1)


class Progress[T, E]:
    """
    Result with progress metadata.

    This is the element type of ``Stream.run``. Pattern-match either on the
    wrapper or on the inner result:

        match emission:
            case Progress(Ok(value), state): ...
            case Progress(Error(err), _): ...
    """

    __slots__ = ("_result", "_state")
    __match_args__ = ("result", "state")

    def __init__(self, result: Result[T, E], state: ProgressState | None = None) -> None:
        self._result = result
        self._state = state

    @property
    def result(self) -> Result[T, E]:
        """The underlying Result."""
        return self._result

    @property
    def state(self) -> ProgressState | None:
        """Progress metadata, if the producer attached any."""
        return self._state

    @property
    def ok(self) -> bool:
        return not _is_failure(self._result)

    @property
    def value(self) -> T:
        """Success value. Raises on a failure emission."""
        match self._result:
            case Ok(value):
                return value
            case _:
                raise ValueError("Progress.value accessed on a failure emission")

    @property
    def error(self) -> E:
        """Failure value. Raises on a success emission."""
        match self._result:
            case Error(error):
                return error
            case _:
                raise ValueError("Progress.error accessed on a success emission")

    def with_result[U, F](self, result: Result[U, F], /) -> Progress[U, F]:
        """Same position, different outcome."""
        return Progress(result, self._state)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Progress):
            return NotImplemented
        return self.ok == other.ok and self._state == other._state and (
            self.value == other.value if self.ok else self.error == other.error
        )

    def __hash__(self) -> int:
        # payloads may be unhashable; equal emissions still share branch and state
        return hash((self.ok, self._state))

    def __repr__(self) -> str:
        return f"Progress({self._result!r}, state={self._state!r})"


def ok[T](value: T, state: ProgressState | None = None) -> Progress[T, typing.Never]:
    """Successful emission."""
    return Progress(Ok(value), state)


def fail[E](error: E, state: ProgressState | None = None) -> Progress[typing.Never, E]:
    """Failed emission."""
    return Progress(Error(error), state)


def is_failure[T, E](progress: Progress[T, E]) -> bool:
    return not progress.ok


__all__ = (
    "SINGLE",
    "Progress",
    "ProgressState",
    "fail",
    "is_failure",
    "ok",
)
