"""Fan-out helper for independent upstream fetches."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Mapping

from loguru import logger

log = logger.bind(module="core.fetch")

__all__ = ["fetch_all"]


def fetch_all(tasks: Mapping[str, Callable[[], Any]], *, max_workers: int = 4) -> dict[str, Any]:
    """Run named zero-argument callables concurrently and join their results.

    The first failure cancels every task that has not started yet and is
    re-raised unchanged; callers never receive a partial result set.
    """
    if not tasks:
        return {}

    workers = max(1, min(int(max_workers), len(tasks)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gitviz-fetch") as executor:
        futures: dict[Future[Any], str] = {executor.submit(fn): name for name, fn in tasks.items()}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for future, name in futures.items():
            if future not in done or future.exception() is None:
                continue
            exc = future.exception()
            for other in pending:
                other.cancel()
            log.debug("Fetch {} failed; cancelled {} pending fetch(es)", name, len(pending))
            raise exc

    return {name: future.result() for future, name in futures.items()}
