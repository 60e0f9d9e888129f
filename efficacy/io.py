"""
Capability model
================

A capability is a named async operation (``http``, ``read_file``, ...).
A capability set is any object exposing capabilities as attributes.

Computations declare what they need with a ``typing.Protocol`` listing only
the operations they call. Any object with those attributes satisfies the
requirement, so a wide host-provided set can be passed where a narrow one is
expected. This is checked by the type checker only: at runtime the core just
reads attributes, and a missing capability surfaces as ``AttributeError`` at
the call site.
"""

from __future__ import annotations

import typing
from collections.abc import Awaitable, Callable, Iterator, Mapping

# IOOperation = named async operation supplied by the host
type IOOperation = Callable[..., Awaitable[typing.Any]]


class NoIO(typing.Protocol):
    """Empty requirement: satisfied by every object, ``None`` included."""


@typing.runtime_checkable
class HttpIO(typing.Protocol):
    """Requires an ``http(uri, **options)`` capability."""

    async def http(self, uri: str, /, **options: typing.Any) -> typing.Any: ...


class Capabilities:
    """
    Read-only capability set built by ``define_io``.

    Capabilities are reachable as attributes (``io.http``) and by name
    (``io["http"]``).
    """

    __slots__ = ("_operations",)

    def __init__(self, operations: Mapping[str, IOOperation], /) -> None:
        for name, operation in operations.items():
            if not callable(operation):
                raise TypeError(f"Capability {name!r} is not callable: {operation!r}")
        object.__setattr__(self, "_operations", dict(operations))

    def __getattr__(self, name: str) -> IOOperation:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._operations[name]
        except KeyError:
            raise AttributeError(f"No capability named {name!r}") from None

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Capabilities are read-only")

    def __getitem__(self, name: str) -> IOOperation:
        return self._operations[name]

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def narrow(self, *names: str) -> Capabilities:
        """Subset holding only ``names``. Unknown names raise KeyError."""
        return Capabilities({name: self._operations[name] for name in names})

    def __repr__(self) -> str:
        return f"Capabilities({', '.join(self._operations)})"


def define_io(**operations: IOOperation) -> Capabilities:
    """
    Build a capability set from keyword arguments.

    Example:
        io = define_io(http=httpx.AsyncClient().get)
        result = await fetch("https://example.org").run(io)
    """
    return Capabilities(operations)


__all__ = (
    "Capabilities",
    "HttpIO",
    "IOOperation",
    "NoIO",
    "define_io",
)
