from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Generator

import sys
import threading

import httpx
import pytest


ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from gitviz.config import Settings
from gitviz.github.client import GitHubClient

GITHUB_BASE_URL = "http://github.local"


@pytest.fixture
def settings() -> Generator[Settings, None, None]:
    """Return a fresh Settings instance for each test.

    Tests can freely mutate fields on this object without affecting others.
    """

    yield Settings(github_api_base_url=GITHUB_BASE_URL, fetch_max_workers=2)


Route = tuple[int, Any] | Callable[[httpx.Request], httpx.Response]


class FakeGitHub:
    """In-memory GitHub API served through `httpx.MockTransport`.

    Routes are keyed by URL path. Unknown paths answer 404 like GitHub does.
    A route value is either `(status, json_payload)` or a callable taking the
    request, which may also raise `httpx` transport errors.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def add(self, path: str, payload: Any = None, *, status: int = 200) -> None:
        self.routes[path] = (status, payload)

    def add_handler(self, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[path] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"}, request=request)
        if callable(route):
            return route(request)
        status, payload = route
        if payload is None:
            return httpx.Response(status, content=b"", request=request)
        return httpx.Response(status, json=payload, request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self, **kwargs: Any) -> GitHubClient:
        return GitHubClient("test-token", base_url=GITHUB_BASE_URL, transport=self.transport, **kwargs)

    def paths(self) -> list[str]:
        with self._lock:
            return [r.url.path for r in self.requests]

    # Payload builders -------------------------------------------------

    @staticmethod
    def repository(
        name: str = "hello",
        owner: str = "octo",
        default_branch: str = "main",
        *,
        account: dict[str, Any] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Repository payload; `account` becomes the nested `owner` object."""
        payload = {"id": 1, "name": name, "full_name": f"{owner}/{name}", "default_branch": default_branch}
        if account is not None:
            payload["owner"] = account
        payload.update(extra)
        return payload

    @staticmethod
    def branch(name: str, sha: str, *, protected: bool = False) -> dict[str, Any]:
        return {"name": name, "commit": {"sha": sha, "url": f"https://api/commits/{sha}"}, "protected": protected}

    @staticmethod
    def commit(
        sha: str,
        parents: list[str] | None = None,
        *,
        date: str = "2024-03-10T12:00:00Z",
        login: str | None = "alice",
        name: str = "Alice",
        message: str = "change",
    ) -> dict[str, Any]:
        return {
            "sha": sha,
            "html_url": f"https://github.local/octo/hello/commit/{sha}",
            "commit": {
                "message": message,
                "author": {"name": name, "email": f"{name.lower()}@example.com", "date": date},
            },
            "author": {"login": login, "avatar_url": f"https://avatars/{login}"} if login else None,
            "parents": [{"sha": p, "url": f"https://api/commits/{p}"} for p in (parents or [])],
        }

    @staticmethod
    def pull(
        number: int,
        *,
        head: str,
        base: str = "main",
        state: str = "closed",
        created_at: str = "2024-03-01T09:00:00Z",
        merged_at: str | None = None,
        closed_at: str | None = None,
        merge_commit_sha: str | None = None,
        login: str = "alice",
    ) -> dict[str, Any]:
        return {
            "id": 1000 + number,
            "number": number,
            "title": f"PR {number}",
            "state": state,
            "created_at": created_at,
            "updated_at": created_at,
            "closed_at": closed_at or merged_at,
            "merged_at": merged_at,
            "merge_commit_sha": merge_commit_sha,
            "user": {"login": login, "avatar_url": f"https://avatars/{login}"},
            "head": {"ref": head},
            "base": {"ref": base},
        }


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
