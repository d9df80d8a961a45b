"""Visualization response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import Field

from gitviz.api.schemas import ApiOutModel


class TimeRangeOut(ApiOutModel):
    start_date: date
    end_date: date


class RepositoryOut(ApiOutModel):
    name: str
    full_name: str
    default_branch: str


class CommitAuthorOut(ApiOutModel):
    name: str | None = None
    email: str | None = None
    date: datetime
    login: str | None = None
    avatar_url: str | None = None


class ParentRefOut(ApiOutModel):
    sha: str
    url: str | None = None
    html_url: str | None = None


class CommitDataOut(ApiOutModel):
    sha: str
    html_url: str | None = None
    message: str
    author: CommitAuthorOut
    parents: list[ParentRefOut] = Field(default_factory=list)


class BranchDataOut(ApiOutModel):
    name: str
    sha: str
    protected: bool = False
    is_default: bool = False


class UserRefOut(ApiOutModel):
    login: str | None = None
    avatar_url: str | None = None


class MergeDataOut(ApiOutModel):
    id: int
    number: int
    title: str
    source_branch: str
    target_branch: str
    merged_at: datetime
    merge_commit_sha: str | None = None
    author: UserRefOut


class GraphNodeOut(ApiOutModel):
    id: str
    type: Literal["commit", "branch"]
    data: CommitDataOut | BranchDataOut


class GraphEdgeOut(ApiOutModel):
    source: str
    target: str
    type: Literal["commit", "branch", "merge"]
    data: MergeDataOut | None = None


class GraphOut(ApiOutModel):
    nodes: list[GraphNodeOut]
    edges: list[GraphEdgeOut]


class NetworkGraphOut(ApiOutModel):
    repository: RepositoryOut
    graph: GraphOut
    time_range: TimeRangeOut


class DailyCommitsOut(ApiOutModel):
    date: date
    commits: int


class ContributorSummaryOut(ApiOutModel):
    id: int
    login: str
    avatar_url: str | None = None
    total_commits: int
    total_contributions: int
    commits_in_time_range: int
    activity: list[DailyCommitsOut]


class DailyActivityOut(ApiOutModel):
    date: date
    total_commits: int
    by_author: dict[str, int]


class ContributorActivityOut(ApiOutModel):
    time_range: TimeRangeOut
    contribution_summary: list[ContributorSummaryOut]
    time_series_data: list[DailyActivityOut]


class PullRequestSummaryOut(ApiOutModel):
    total: int
    open: int
    closed: int
    merged: int


class PullRequestAuthorOut(PullRequestSummaryOut):
    author: str
    avatar_url: str | None = None


class PullRequestDayOut(PullRequestSummaryOut):
    date: date


class PullRequestOut(ApiOutModel):
    id: int
    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    merged_at: datetime | None = None
    user: UserRefOut
    base: str
    head: str


class PullRequestActivityOut(ApiOutModel):
    time_range: TimeRangeOut
    summary: PullRequestSummaryOut
    by_author: list[PullRequestAuthorOut]
    time_series: list[PullRequestDayOut]
    pull_requests: list[PullRequestOut]


class WeeklyChangeOut(ApiOutModel):
    week: date
    additions: int
    deletions: int


class CumulativeWeekOut(ApiOutModel):
    week: date
    total_additions: int
    total_deletions: int


class CodeFrequencySummaryOut(ApiOutModel):
    total_additions: int
    total_deletions: int


class CodeFrequencyOut(ApiOutModel):
    weekly_data: list[WeeklyChangeOut]
    cumulative_data: list[CumulativeWeekOut]
    summary: CodeFrequencySummaryOut


class PendingOut(ApiOutModel):
    message: str
