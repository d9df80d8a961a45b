"""Repository browsing response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from gitviz.api.schemas import ApiOutModel


class OwnerOut(ApiOutModel):
    id: int | None = None
    login: str
    avatar_url: str | None = None
    html_url: str | None = None


class AccountOut(ApiOutModel):
    id: int | None = None
    login: str
    avatar_url: str | None = None


class RepositoryListingOut(ApiOutModel):
    id: int | None = None
    name: str
    full_name: str
    description: str | None = None
    language: str | None = None
    visibility: Literal["public", "private"]
    is_archived: bool = False
    default_branch: str
    html_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    owner: OwnerOut | None = None


class RepositoryListOut(ApiOutModel):
    repositories: list[RepositoryListingOut]


class RepositoryDetailsOut(RepositoryListingOut):
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0


class CommitPointerOut(ApiOutModel):
    sha: str
    url: str | None = None


class BranchOut(ApiOutModel):
    name: str
    protected: bool = False
    commit: CommitPointerOut


class RefPointerOut(ApiOutModel):
    ref: str
    sha: str | None = None


class PullRequestListItemOut(ApiOutModel):
    id: int
    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    merged_at: datetime | None = None
    draft: bool = False
    user: AccountOut | None = None
    html_url: str | None = None
    diff_url: str | None = None
    base: RefPointerOut
    head: RefPointerOut


class GitActorOut(ApiOutModel):
    name: str | None = None
    email: str | None = None
    date: datetime


class GitCommitOut(ApiOutModel):
    message: str
    author: GitActorOut
    committer: GitActorOut | None = None


class CommitListItemOut(ApiOutModel):
    sha: str
    html_url: str | None = None
    commit: GitCommitOut
    author: AccountOut | None = None
    committer: AccountOut | None = None


class ContributorOut(ApiOutModel):
    id: int
    login: str
    avatar_url: str | None = None
    html_url: str | None = None
    contributions: int = 0
