"""Repository browsing endpoints: the caller's repositories and their listings."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gitviz.api.deps import get_github_client
from gitviz.api.errors import raise_http_error
from gitviz.api.schemas.repositories import (
    BranchOut,
    CommitListItemOut,
    ContributorOut,
    PullRequestListItemOut,
    RepositoryDetailsOut,
    RepositoryListingOut,
    RepositoryListOut,
)
from gitviz.core.repositories import (
    get_repository_details,
    list_repositories,
    list_repository_branches,
    list_repository_commits,
    list_repository_contributors,
    list_repository_pull_requests,
)
from gitviz.errors import GitVizError
from gitviz.github.client import GitHubClient

router = APIRouter()

ClientDep = Annotated[GitHubClient, Depends(get_github_client)]


@router.get("/repositories", response_model=RepositoryListOut)
def get_repositories(client: ClientDep) -> RepositoryListOut:
    try:
        repositories = list_repositories(client)
    except GitVizError as exc:
        raise_http_error(exc, action="fetch repositories")
    return RepositoryListOut(repositories=[RepositoryListingOut.model_validate(r) for r in repositories])


@router.get("/repositories/{owner}/{repo}", response_model=RepositoryDetailsOut)
def get_repository(owner: str, repo: str, client: ClientDep) -> RepositoryDetailsOut:
    try:
        details = get_repository_details(client, owner, repo)
    except GitVizError as exc:
        raise_http_error(exc, action="fetch repository details")
    return RepositoryDetailsOut.model_validate(details)


@router.get("/repositories/{owner}/{repo}/branches", response_model=list[BranchOut])
def get_branches(owner: str, repo: str, client: ClientDep) -> list[BranchOut]:
    try:
        branches = list_repository_branches(client, owner, repo)
    except GitVizError as exc:
        raise_http_error(exc, action="fetch branches")
    return [BranchOut.model_validate(b) for b in branches]


@router.get("/repositories/{owner}/{repo}/pulls", response_model=list[PullRequestListItemOut])
def get_pull_requests(
    owner: str,
    repo: str,
    client: ClientDep,
    state: str = Query(default="all"),
) -> list[PullRequestListItemOut]:
    try:
        pulls = list_repository_pull_requests(client, owner, repo, state=state)
    except GitVizError as exc:
        raise_http_error(exc, action="fetch pull requests")
    return [PullRequestListItemOut.model_validate(pr) for pr in pulls]


@router.get("/repositories/{owner}/{repo}/commits", response_model=list[CommitListItemOut])
def get_commits(
    owner: str,
    repo: str,
    client: ClientDep,
    sha: str | None = Query(default=None),
    path: str | None = Query(default=None),
    since: datetime | None = Query(default=None),
    until: datetime | None = Query(default=None),
    per_page: int = Query(default=30, ge=1),
) -> list[CommitListItemOut]:
    try:
        commits = list_repository_commits(
            client,
            owner,
            repo,
            sha=sha,
            path=path,
            since=since,
            until=until,
            per_page=per_page,
        )
    except GitVizError as exc:
        raise_http_error(exc, action="fetch commits")
    return [CommitListItemOut.model_validate(c) for c in commits]


@router.get("/repositories/{owner}/{repo}/contributors", response_model=list[ContributorOut])
def get_contributors(owner: str, repo: str, client: ClientDep) -> list[ContributorOut]:
    try:
        contributors = list_repository_contributors(client, owner, repo)
    except GitVizError as exc:
        raise_http_error(exc, action="fetch contributors")
    return [ContributorOut.model_validate(c) for c in contributors]
