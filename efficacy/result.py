"""
Result algebra
==============

Success/failure union every computation serializes its outcome into.
The union itself is kungfu's ``Result`` (``Ok`` | ``Error``); this module adds
the constructors and predicates used throughout efficacy.
"""

from __future__ import annotations

import typing

from kungfu import Error, Ok, Result


def ok[T](value: T) -> Result[T, typing.Never]:
    """Wrap a successful value."""
    return Ok(value)


def fail[E](error: E) -> Result[typing.Never, E]:
    """Wrap a failure value."""
    return Error(error)


def is_failure[T, E](result: Result[T, E]) -> bool:
    """Check whether a result is the failure branch."""
    match result:
        case Ok(_):
            return False
        case Error(_):
            return True
        case _:
            raise TypeError(f"Expected Result, got {type(result).__name__}")


def is_success[T, E](result: Result[T, E]) -> bool:
    return not is_failure(result)


__all__ = (
    "Error",
    "Ok",
    "Result",
    "fail",
    "is_failure",
    "is_success",
    "ok",
)
