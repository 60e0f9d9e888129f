"""
Core type definitions for efficacy.

Aliases shared by the task, stream and consumer modules.
"""

from __future__ import annotations

import typing
from collections.abc import AsyncIterator, Awaitable, Callable

from kungfu import Result

if typing.TYPE_CHECKING:
    from .cancel import CancelToken
    from .progress import Progress

# ============================================================================
# Type aliases
# ============================================================================

# Predicate = function that tests a value
type Predicate[T] = Callable[[T], bool]

# NoError = failure channel that can never be inhabited
type NoError = typing.Never

# TaskInit = leaf initializer of a Task
type TaskInit[T, E, Caps] = Callable[[Caps, CancelToken | None], Awaitable[Result[T, E]]]

# StreamInit = leaf initializer of a Stream, pulled one emission at a time
type StreamInit[T, E, Caps] = Callable[
    [Caps, CancelToken | None], AsyncIterator[Progress[T, E]]
]

__all__ = (
    "Predicate",
    "NoError",
    "TaskInit",
    "StreamInit",
)
