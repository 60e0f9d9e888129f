"""
Efficacy: lazy, fallible, cancellable async computations with explicit
capability (IO) dependencies.

Architecture:
- Result algebra (kungfu ``Ok`` / ``Error``)
- Task: single-result computation, run with a capability set and a token
- Stream: progress-tagged multi-result computation, same contract
- Consumers built on top: lift helpers, retry, retrying fetch
"""

# Core types
from ._types import NoError, Predicate, StreamInit, TaskInit

# Result algebra
from .result import Error, Ok, Result, fail, is_failure, is_success, ok

# Capabilities
from .io import Capabilities, HttpIO, IOOperation, NoIO, define_io

# Progress
from .progress import SINGLE, Progress, ProgressState
from .progress import fail as progress_fail
from .progress import is_failure as is_progress_failure
from .progress import ok as progress_ok

# Cancellation
from .cancel import CancelToken, sleep

# Computations
from .task import Task
from .stream import Stream

# Lift helpers
from . import lift

# Consumers
from .retry import BackoffStrategy, RetryPolicy, retry
from .fetch import FetchError, Response, fetch

# Errors
from ._errors import EmptyStreamError

__all__ = (
    # Types
    "NoError",
    "Predicate",
    "StreamInit",
    "TaskInit",
    # Result
    "Error",
    "Ok",
    "Result",
    "fail",
    "is_failure",
    "is_success",
    "ok",
    # Capabilities
    "Capabilities",
    "HttpIO",
    "IOOperation",
    "NoIO",
    "define_io",
    # Progress
    "SINGLE",
    "Progress",
    "ProgressState",
    "is_progress_failure",
    "progress_fail",
    "progress_ok",
    # Cancellation
    "CancelToken",
    "sleep",
    # Computations
    "Stream",
    "Task",
    # Lift module
    "lift",
    # Consumers
    "BackoffStrategy",
    "FetchError",
    "Response",
    "RetryPolicy",
    "fetch",
    "retry",
    # Errors
    "EmptyStreamError",
)
