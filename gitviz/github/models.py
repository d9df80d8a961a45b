"""Typed records for the GitHub REST responses GitViz consumes.

Only the fields the visualizations read are declared; everything else in the
upstream payload is ignored. Validation happens once, at the deserialization
boundary, so the graph builder never sees a half-shaped object.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitviz.errors import UpstreamUnavailable

__all__ = [
    "GitHubBranch",
    "GitHubCommit",
    "GitHubContributor",
    "GitHubPullRequest",
    "GitHubRepository",
    "GitHubSearchResult",
    "GitHubUser",
    "parse_model",
    "parse_models",
]


class _GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GitHubUser(_GitHubModel):
    login: str
    id: int | None = None
    avatar_url: str | None = None
    html_url: str | None = None


class GitHubRepository(_GitHubModel):
    name: str
    full_name: str
    default_branch: str
    id: int | None = None
    description: str | None = None
    language: str | None = None
    private: bool = False
    archived: bool = False
    html_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0
    owner: GitHubUser | None = None


class GitHubCommitRef(_GitHubModel):
    sha: str
    url: str | None = None
    html_url: str | None = None


class GitHubBranch(_GitHubModel):
    name: str
    commit: GitHubCommitRef
    protected: bool = False


class GitHubGitActor(_GitHubModel):
    name: str | None = None
    email: str | None = None
    date: datetime


class GitHubGitCommit(_GitHubModel):
    message: str = ""
    author: GitHubGitActor
    committer: GitHubGitActor | None = None


class GitHubCommit(_GitHubModel):
    sha: str
    html_url: str | None = None
    commit: GitHubGitCommit
    # Null when the commit email is not linked to a GitHub account.
    author: GitHubUser | None = None
    committer: GitHubUser | None = None
    parents: list[GitHubCommitRef] = Field(default_factory=list)


class GitHubPullRequestRef(_GitHubModel):
    ref: str
    sha: str | None = None


class GitHubPullRequest(_GitHubModel):
    id: int
    number: int
    title: str = ""
    state: str
    created_at: datetime
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    merged_at: datetime | None = None
    merge_commit_sha: str | None = None
    draft: bool = False
    html_url: str | None = None
    diff_url: str | None = None
    user: GitHubUser | None = None
    head: GitHubPullRequestRef
    base: GitHubPullRequestRef


class GitHubContributor(_GitHubModel):
    id: int
    login: str
    avatar_url: str | None = None
    html_url: str | None = None
    contributions: int = 0


class GitHubSearchResult(_GitHubModel):
    total_count: int


_M = TypeVar("_M", bound=BaseModel)


def parse_model(model: type[_M], payload: Any, *, what: str) -> _M:
    """Validate a single upstream object, mapping failures to UpstreamUnavailable."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise UpstreamUnavailable(f"Malformed {what} response: {exc.error_count()} validation error(s)") from exc


def parse_models(model: type[_M], payload: Any, *, what: str) -> list[_M]:
    """Validate a JSON array of upstream objects."""
    if not isinstance(payload, list):
        raise UpstreamUnavailable(f"Malformed {what} response: expected a JSON array")
    return [parse_model(model, item, what=what) for item in payload]
