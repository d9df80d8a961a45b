"""GitHub REST client bound to one caller-supplied credential.

The credential is opaque: it is forwarded as a bearer token and never parsed or
logged. HTTP failures are classified into the `gitviz.errors` taxonomy here so
the builders above only deal with domain errors.
"""

from __future__ import annotations

from datetime import datetime, timezone
from operator import attrgetter
from typing import TYPE_CHECKING, Any, Callable, Hashable, Mapping, TypeVar
from urllib.parse import quote

from loguru import logger
from pydantic import BaseModel

from gitviz.config import Settings
from gitviz.errors import (
    StatisticsPending,
    UpstreamError,
    UpstreamNotFound,
    UpstreamUnauthorized,
    UpstreamUnavailable,
)
from gitviz.github.models import (
    GitHubBranch,
    GitHubCommit,
    GitHubContributor,
    GitHubPullRequest,
    GitHubRepository,
    GitHubSearchResult,
    parse_model,
    parse_models,
)
from gitviz.net.http import HttpCallError, HttpClient

if TYPE_CHECKING:
    import httpx

log = logger.bind(module="github.client")

__all__ = ["GitHubClient", "classify_http_error", "format_github_timestamp"]

GITHUB_ACCEPT = "application/vnd.github+json"

_M = TypeVar("_M", bound=BaseModel)


def classify_http_error(exc: HttpCallError, *, what: str) -> UpstreamError:
    """Map a transport-level failure onto the upstream error taxonomy."""
    status = exc.status_code
    if status == 404:
        return UpstreamNotFound(f"GitHub {what} not found", status_code=status)
    if status in (401, 403):
        return UpstreamUnauthorized(f"GitHub rejected the credential for {what}", status_code=status)
    return UpstreamUnavailable(f"GitHub {what} request failed: {exc.message}", status_code=status)


def format_github_timestamp(value: datetime) -> str:
    """Render a datetime in GitHub's `Z` timestamp form; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubClient:
    """Read-only client for the handful of GitHub endpoints GitViz uses."""

    def __init__(
        self,
        credential: str,
        *,
        base_url: str = "https://api.github.com",
        timeout_seconds: float = 10.0,
        user_agent: str = "gitviz",
        page_size: int = 100,
        max_pages: int = 1,
        transport: "httpx.BaseTransport | None" = None,
    ) -> None:
        credential = (credential or "").strip()
        if not credential:
            raise UpstreamUnauthorized("A GitHub credential is required.")
        self.page_size = max(1, min(int(page_size), 100))
        self.max_pages = max(1, int(max_pages))
        self._http = HttpClient(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            headers={"Authorization": f"Bearer {credential}"},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        credential: str,
        settings: Settings,
        *,
        transport: "httpx.BaseTransport | None" = None,
    ) -> "GitHubClient":
        return cls(
            credential,
            base_url=settings.github_api_base_url,
            timeout_seconds=settings.github_timeout_seconds,
            user_agent=settings.github_user_agent,
            page_size=settings.github_page_size,
            max_pages=settings.github_max_pages,
            transport=transport,
        )

    # Transport helpers -----------------------------------------------

    def _get(self, path: str, *, what: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            return self._http.get_json(path, params=params, headers={"Accept": GITHUB_ACCEPT})
        except HttpCallError as exc:
            error = classify_http_error(exc, what=what)
            log.warning("GitHub {} failed: {}", what, error.message)
            raise error from exc

    def _get_pages(
        self,
        path: str,
        model: type[_M],
        *,
        what: str,
        params: Mapping[str, Any] | None = None,
        key: Callable[[_M], Hashable] | None = None,
    ) -> list[_M]:
        """Collect up to `max_pages` pages of a list endpoint.

        Listings can shift between page requests, so an item already seen under
        `key` is skipped when it shows up again on a later page.
        """
        items: list[_M] = []
        seen: set[Hashable] = set()
        for page in range(1, self.max_pages + 1):
            query = dict(params or {})
            query["per_page"] = self.page_size
            query["page"] = page
            batch = parse_models(model, self._get(path, what=what, params=query), what=what)
            for item in batch:
                if key is not None:
                    ident = key(item)
                    if ident in seen:
                        continue
                    seen.add(ident)
                items.append(item)
            if len(batch) < self.page_size:
                break
        else:
            log.debug("GitHub {} truncated at {} page(s) of {}", what, self.max_pages, self.page_size)
        return items

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    # Endpoints -------------------------------------------------------

    def get_repository(self, owner: str, repo: str) -> GitHubRepository:
        payload = self._get(self._repo_path(owner, repo), what="repository")
        return parse_model(GitHubRepository, payload, what="repository")

    def list_user_repositories(self) -> list[GitHubRepository]:
        """Repositories visible to the credential's owner, most recently updated first."""
        return self._get_pages(
            "user/repos",
            GitHubRepository,
            what="repositories",
            params={"sort": "updated", "direction": "desc"},
            key=attrgetter("full_name"),
        )

    def list_branches(self, owner: str, repo: str) -> list[GitHubBranch]:
        return self._get_pages(
            f"{self._repo_path(owner, repo)}/branches",
            GitHubBranch,
            what="branches",
            key=attrgetter("name"),
        )

    def list_commits(self, owner: str, repo: str, *, since: datetime, until: datetime) -> list[GitHubCommit]:
        params = {"since": format_github_timestamp(since), "until": format_github_timestamp(until)}
        return self._get_pages(
            f"{self._repo_path(owner, repo)}/commits",
            GitHubCommit,
            what="commits",
            params=params,
            key=attrgetter("sha"),
        )

    def get_commit_page(
        self,
        owner: str,
        repo: str,
        *,
        sha: str | None = None,
        path: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        per_page: int = 30,
    ) -> list[GitHubCommit]:
        """Fetch a single page of commits filtered the way the commits API allows."""
        params: dict[str, Any] = {"per_page": max(1, min(int(per_page), 100))}
        if sha:
            params["sha"] = sha
        if path:
            params["path"] = path
        if since is not None:
            params["since"] = format_github_timestamp(since)
        if until is not None:
            params["until"] = format_github_timestamp(until)
        payload = self._get(f"{self._repo_path(owner, repo)}/commits", what="commits", params=params)
        return parse_models(GitHubCommit, payload, what="commits")

    def list_pull_requests(
        self,
        owner: str,
        repo: str,
        *,
        state: str = "closed",
        sort: str = "updated",
        direction: str = "desc",
    ) -> list[GitHubPullRequest]:
        params = {"state": state, "sort": sort, "direction": direction}
        return self._get_pages(
            f"{self._repo_path(owner, repo)}/pulls",
            GitHubPullRequest,
            what="pull requests",
            params=params,
            key=attrgetter("id"),
        )

    def list_contributors(self, owner: str, repo: str) -> list[GitHubContributor]:
        return self._get_pages(
            f"{self._repo_path(owner, repo)}/contributors",
            GitHubContributor,
            what="contributors",
            key=attrgetter("id"),
        )

    def search_issue_count(self, query: str) -> int:
        """Return `total_count` for an issue search (only one result is requested)."""
        payload = self._get("search/issues", what="issue search", params={"q": query, "per_page": 1})
        return parse_model(GitHubSearchResult, payload, what="issue search").total_count

    def get_code_frequency(self, owner: str, repo: str) -> list[tuple[int, int, int]]:
        """Return weekly `(unix_ts, additions, deletions)` rows.

        GitHub answers 202 while it computes the statistics; that surfaces as
        `StatisticsPending`. A repository with no history answers 204, which
        yields no rows.
        """
        what = "code frequency"
        try:
            response = self._http.request(
                "GET",
                f"{self._repo_path(owner, repo)}/stats/code_frequency",
                headers={"Accept": GITHUB_ACCEPT},
            )
            status = response.status_code
            payload = None if status in (202, 204) else HttpClient.decode_json(response)
        except HttpCallError as exc:
            error = classify_http_error(exc, what=what)
            log.warning("GitHub {} failed: {}", what, error.message)
            raise error from exc

        if status == 202 or payload == {}:
            raise StatisticsPending("GitHub is computing statistics. Please try again in a moment.", status_code=202)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise UpstreamUnavailable(f"Malformed {what} response: expected a JSON array")
        rows: list[tuple[int, int, int]] = []
        for row in payload:
            if not isinstance(row, list) or len(row) != 3:
                raise UpstreamUnavailable(f"Malformed {what} response: expected [week, additions, deletions]")
            try:
                rows.append((int(row[0]), int(row[1]), int(row[2])))
            except (TypeError, ValueError) as exc:
                raise UpstreamUnavailable(f"Malformed {what} response: non-numeric value") from exc
        return rows
