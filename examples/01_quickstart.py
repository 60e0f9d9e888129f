from __future__ import annotations

from _infra import banner, run

from efficacy import Task
from kungfu import Error, Ok


async def main() -> None:
    banner("01_quickstart: of + map + flat_map + or_else")

    pipeline = (
        Task.of(10)
        .map(lambda x: x * 2)
        .flat_map(lambda x: Task.of(x + 5) if x < 100 else Task.reject("too big"))
        .map(lambda x: x / 5)
    )

    # Nothing has run yet: a Task is a description until run() gets its capabilities.
    match await pipeline.run({}):
        case Ok(value):
            print(f"value: {value}")
        case Error(err):
            print(f"error: {err!r}")

    recovered = Task.reject({"message": "e", "can_retry": True}).or_else(lambda _: Task.of("recovered"))
    print(await recovered.run({}))


if __name__ == "__main__":
    run(main)
