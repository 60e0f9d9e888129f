from __future__ import annotations

import logging

from _infra import FakeServer, banner, run

from efficacy import CancelToken, FetchError, RetryPolicy, define_io, fetch
from kungfu import Error, Ok


async def main() -> None:
    banner("03_retrying_fetch: http capability + backoff + cancellation")
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    server = FakeServer(pages={"/users/42": '{"name": "ada"}'}, failures_before_ok=2)
    io = define_io(http=server.http)
    policy: RetryPolicy[FetchError] = RetryPolicy.exponential(initial=0.05, max_delay=0.2, ceiling=1.0)

    match await fetch("/users/42", policy=policy).run(io):
        case Ok(response):
            print(f"got {response.status_code}: {response.body}")
        case Error(err):
            print(f"failed: {err}")

    token = CancelToken()
    token.cancel("shutting down")
    print(await fetch("/users/42", policy=policy).run(io, token))


if __name__ == "__main__":
    run(main)
