from __future__ import annotations

import threading

import pytest

from gitviz.core.fetch import fetch_all
from gitviz.errors import UpstreamNotFound


def test_fetch_all_joins_results_by_name() -> None:
    results = fetch_all({"a": lambda: 1, "b": lambda: "two", "c": lambda: [3]}, max_workers=3)
    assert results == {"a": 1, "b": "two", "c": [3]}


def test_fetch_all_with_no_tasks() -> None:
    assert fetch_all({}) == {}


def test_fetch_all_runs_tasks_concurrently() -> None:
    barrier = threading.Barrier(2, timeout=5)

    def task() -> bool:
        # Both tasks must be in flight at once for the barrier to release.
        barrier.wait()
        return True

    assert fetch_all({"x": task, "y": task}, max_workers=2) == {"x": True, "y": True}


def test_fetch_all_reraises_failure_instead_of_partial_results() -> None:
    def failing() -> None:
        raise UpstreamNotFound("gone", status_code=404)

    with pytest.raises(UpstreamNotFound) as excinfo:
        fetch_all({"ok": lambda: "fine", "fail": failing}, max_workers=2)
    assert excinfo.value.status_code == 404


def test_fetch_all_reports_failures_in_task_order() -> None:
    def first() -> None:
        raise UpstreamNotFound("first")

    def second() -> None:
        raise RuntimeError("second")

    # A single worker finishes "first" before "second" can start.
    with pytest.raises(UpstreamNotFound, match="first"):
        fetch_all({"first": first, "second": second}, max_workers=1)
