from __future__ import annotations


class EmptyStreamError(RuntimeError):
    """Stream finished without a single emission."""

    def __init__(self) -> None:
        super().__init__("Stream yielded no results")


__all__ = ("EmptyStreamError",)
