from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class FakeResponse:
    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(slots=True)
class FakeServer:
    """Answers 503 a few times before serving ``pages``."""

    pages: dict[str, str] = field(default_factory=dict)
    delay_seconds: float = 0.0
    failures_before_ok: int = 0

    async def http(self, uri: str, /, **options: object) -> FakeResponse:
        await asyncio.sleep(self.delay_seconds)
        if self.failures_before_ok > 0:
            self.failures_before_ok -= 1
            return FakeResponse(503)
        body = self.pages.get(uri)
        if body is None:
            return FakeResponse(404)
        return FakeResponse(200, body)


def banner(title: str) -> None:  # pragma: no cover (examples only)
    print(f"\n== {title} ==")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:  # pragma: no cover (examples only)
    asyncio.run(main())
