from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from _infra import banner, run

from efficacy import CancelToken, Progress, ProgressState, Stream, progress_fail, progress_ok


def count_words(lines: list[str]) -> Stream[int, str, object]:
    async def init(io: object, token: CancelToken | None) -> AsyncIterator[Progress[int, str]]:
        for index, line in enumerate(lines, start=1):
            if token is not None and token.cancelled:
                yield progress_fail(f"cancelled at line {index}")
                return
            await asyncio.sleep(0)
            yield progress_ok(len(line.split()), ProgressState(total=len(lines), current=index))

    return Stream.create(init)


async def main() -> None:
    banner("02_stream_progress: progress emissions + to_task")

    lines = ["the quick brown fox", "jumps over", "the lazy dog"]
    stream = count_words(lines).map(lambda n: f"{n} words")

    async for item in stream.run(None):
        state = item.state
        print(f"[{state.current}/{state.total}] {item.value}" if state else item)

    # The Task view keeps only the final emission.
    print(await count_words(lines).to_task().run(None))


if __name__ == "__main__":
    run(main)
