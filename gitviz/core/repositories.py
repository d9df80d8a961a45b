"""Repository browsing: the caller's repositories and per-repository listings.

These are single upstream calls reshaped into flat records for the dashboard's
list and detail views. Nothing is aggregated here; the visualizations live in
`gitviz.core.network` and `gitviz.core.activity`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from loguru import logger

from gitviz.core.activity import PULL_REQUEST_STATES, require_repo
from gitviz.errors import InvalidRequest
from gitviz.github.client import GitHubClient
from gitviz.github.models import (
    GitHubBranch,
    GitHubCommit,
    GitHubContributor,
    GitHubGitActor,
    GitHubPullRequest,
    GitHubPullRequestRef,
    GitHubRepository,
    GitHubUser,
)

log = logger.bind(module="core.repositories")

__all__ = [
    "BranchSummary",
    "CommitPointer",
    "CommitSummary",
    "GitActor",
    "GitCommitSummary",
    "OwnerRef",
    "PullRequestSummary",
    "RefPointer",
    "RepositoryContributor",
    "RepositoryDetails",
    "RepositoryListing",
    "UserRef",
    "get_repository_details",
    "list_repositories",
    "list_repository_branches",
    "list_repository_commits",
    "list_repository_contributors",
    "list_repository_pull_requests",
    "to_branch_summary",
    "to_commit_summary",
    "to_contributor",
    "to_pull_request_summary",
    "to_repository_details",
    "to_repository_listing",
]

Visibility = Literal["public", "private"]

MAX_COMMITS_PER_PAGE = 100


@dataclass(frozen=True, slots=True)
class OwnerRef:
    id: int | None
    login: str
    avatar_url: str | None = None
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class UserRef:
    id: int | None
    login: str
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryListing:
    id: int | None
    name: str
    full_name: str
    description: str | None
    language: str | None
    visibility: Visibility
    is_archived: bool
    default_branch: str
    html_url: str | None
    created_at: datetime | None
    updated_at: datetime | None
    pushed_at: datetime | None
    owner: OwnerRef | None


@dataclass(frozen=True, slots=True)
class RepositoryDetails(RepositoryListing):
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0


@dataclass(frozen=True, slots=True)
class CommitPointer:
    sha: str
    url: str | None = None


@dataclass(frozen=True, slots=True)
class BranchSummary:
    name: str
    protected: bool
    commit: CommitPointer


@dataclass(frozen=True, slots=True)
class RefPointer:
    ref: str
    sha: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    id: int
    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime | None
    closed_at: datetime | None
    merged_at: datetime | None
    draft: bool
    user: UserRef | None
    html_url: str | None
    diff_url: str | None
    base: RefPointer
    head: RefPointer


@dataclass(frozen=True, slots=True)
class GitActor:
    name: str | None
    email: str | None
    date: datetime


@dataclass(frozen=True, slots=True)
class GitCommitSummary:
    message: str
    author: GitActor
    committer: GitActor | None = None


@dataclass(frozen=True, slots=True)
class CommitSummary:
    sha: str
    html_url: str | None
    commit: GitCommitSummary
    # Platform accounts; null when the commit email is not linked to one.
    author: UserRef | None = None
    committer: UserRef | None = None


@dataclass(frozen=True, slots=True)
class RepositoryContributor:
    id: int
    login: str
    avatar_url: str | None
    html_url: str | None
    contributions: int


# Reshaping ------------------------------------------------------------


def _owner(user: GitHubUser | None) -> OwnerRef | None:
    if user is None:
        return None
    return OwnerRef(id=user.id, login=user.login, avatar_url=user.avatar_url, html_url=user.html_url)


def _user(user: GitHubUser | None) -> UserRef | None:
    if user is None:
        return None
    return UserRef(id=user.id, login=user.login, avatar_url=user.avatar_url)


def _listing_fields(repo: GitHubRepository) -> dict[str, object]:
    return {
        "id": repo.id,
        "name": repo.name,
        "full_name": repo.full_name,
        "description": repo.description,
        "language": repo.language,
        "visibility": "private" if repo.private else "public",
        "is_archived": repo.archived,
        "default_branch": repo.default_branch,
        "html_url": repo.html_url,
        "created_at": repo.created_at,
        "updated_at": repo.updated_at,
        "pushed_at": repo.pushed_at,
        "owner": _owner(repo.owner),
    }


def to_repository_listing(repo: GitHubRepository) -> RepositoryListing:
    return RepositoryListing(**_listing_fields(repo))


def to_repository_details(repo: GitHubRepository) -> RepositoryDetails:
    return RepositoryDetails(
        **_listing_fields(repo),
        forks_count=repo.forks_count,
        stargazers_count=repo.stargazers_count,
        watchers_count=repo.watchers_count,
        open_issues_count=repo.open_issues_count,
    )


def to_branch_summary(branch: GitHubBranch) -> BranchSummary:
    return BranchSummary(
        name=branch.name,
        protected=bool(branch.protected),
        commit=CommitPointer(sha=branch.commit.sha, url=branch.commit.url),
    )


def _ref(ref: GitHubPullRequestRef) -> RefPointer:
    return RefPointer(ref=ref.ref, sha=ref.sha)


def to_pull_request_summary(pr: GitHubPullRequest) -> PullRequestSummary:
    return PullRequestSummary(
        id=pr.id,
        number=pr.number,
        title=pr.title,
        state=pr.state,
        created_at=pr.created_at,
        updated_at=pr.updated_at,
        closed_at=pr.closed_at,
        merged_at=pr.merged_at,
        draft=pr.draft,
        user=_user(pr.user),
        html_url=pr.html_url,
        diff_url=pr.diff_url,
        base=_ref(pr.base),
        head=_ref(pr.head),
    )


def _actor(actor: GitHubGitActor | None) -> GitActor | None:
    if actor is None:
        return None
    return GitActor(name=actor.name, email=actor.email, date=actor.date)


def to_commit_summary(commit: GitHubCommit) -> CommitSummary:
    return CommitSummary(
        sha=commit.sha,
        html_url=commit.html_url,
        commit=GitCommitSummary(
            message=commit.commit.message,
            author=GitActor(
                name=commit.commit.author.name,
                email=commit.commit.author.email,
                date=commit.commit.author.date,
            ),
            committer=_actor(commit.commit.committer),
        ),
        author=_user(commit.author),
        committer=_user(commit.committer),
    )


def to_contributor(contributor: GitHubContributor) -> RepositoryContributor:
    return RepositoryContributor(
        id=contributor.id,
        login=contributor.login,
        avatar_url=contributor.avatar_url,
        html_url=contributor.html_url,
        contributions=contributor.contributions,
    )


# Operations -----------------------------------------------------------


def list_repositories(client: GitHubClient) -> list[RepositoryListing]:
    """Repositories visible to the caller's credential, most recently updated first."""
    repositories = [to_repository_listing(r) for r in client.list_user_repositories()]
    log.debug("Listed {} repositories", len(repositories))
    return repositories


def get_repository_details(client: GitHubClient, owner: str, repo: str) -> RepositoryDetails:
    owner, repo = require_repo(owner, repo)
    return to_repository_details(client.get_repository(owner, repo))


def list_repository_branches(client: GitHubClient, owner: str, repo: str) -> list[BranchSummary]:
    owner, repo = require_repo(owner, repo)
    return [to_branch_summary(b) for b in client.list_branches(owner, repo)]


def list_repository_pull_requests(
    client: GitHubClient,
    owner: str,
    repo: str,
    *,
    state: str = "all",
) -> list[PullRequestSummary]:
    """Pull requests in `state`, most recently updated first.

    Raises:
        InvalidRequest: empty owner/repo, or a state outside open/closed/all.
    """
    owner, repo = require_repo(owner, repo)
    state = (state or "all").strip().lower()
    if state not in PULL_REQUEST_STATES:
        raise InvalidRequest(f"Unsupported pull request state {state!r}")
    pulls = client.list_pull_requests(owner, repo, state=state, sort="updated", direction="desc")
    return [to_pull_request_summary(pr) for pr in pulls]


def list_repository_commits(
    client: GitHubClient,
    owner: str,
    repo: str,
    *,
    sha: str | None = None,
    path: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    per_page: int = 30,
) -> list[CommitSummary]:
    """One page of commits; `per_page` is capped at 100."""
    owner, repo = require_repo(owner, repo)
    if per_page < 1:
        raise InvalidRequest("per_page must be at least 1")
    commits = client.get_commit_page(
        owner,
        repo,
        sha=sha,
        path=path,
        since=since,
        until=until,
        per_page=min(per_page, MAX_COMMITS_PER_PAGE),
    )
    return [to_commit_summary(c) for c in commits]


def list_repository_contributors(client: GitHubClient, owner: str, repo: str) -> list[RepositoryContributor]:
    owner, repo = require_repo(owner, repo)
    return [to_contributor(c) for c in client.list_contributors(owner, repo)]
