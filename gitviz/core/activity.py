"""Contributor and pull-request activity summaries over a time window."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Sequence

from loguru import logger

from gitviz.core.fetch import fetch_all
from gitviz.core.time_range import DEFAULT_TIME_RANGE, TimeRange, resolve_time_range
from gitviz.errors import InvalidRequest
from gitviz.github.client import GitHubClient
from gitviz.github.models import GitHubCommit, GitHubContributor, GitHubPullRequest

log = logger.bind(module="core.activity")

__all__ = [
    "ContributorActivity",
    "ContributorSummary",
    "DailyActivity",
    "DailyCommits",
    "PullRequestActivity",
    "PullRequestAuthorStats",
    "PullRequestDailyStats",
    "PullRequestItem",
    "PullRequestStateCounts",
    "PULL_REQUEST_STATES",
    "require_repo",
    "build_contributor_activity",
    "build_pull_request_activity",
    "summarize_contributors",
    "summarize_pull_requests",
]

PULL_REQUEST_STATES = ("open", "closed", "all")


def require_repo(owner: str, repo: str) -> tuple[str, str]:
    owner = (owner or "").strip()
    repo = (repo or "").strip()
    if not owner or not repo:
        raise InvalidRequest("Repository owner and name are required")
    return owner, repo


# Contributors -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DailyCommits:
    date: date
    commits: int


@dataclass(frozen=True, slots=True)
class ContributorSummary:
    id: int
    login: str
    avatar_url: str | None
    total_commits: int
    total_contributions: int
    commits_in_time_range: int
    activity: tuple[DailyCommits, ...] = ()


@dataclass(frozen=True, slots=True)
class DailyActivity:
    date: date
    total_commits: int
    by_author: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ContributorActivity:
    time_range: TimeRange
    contribution_summary: tuple[ContributorSummary, ...]
    time_series: tuple[DailyActivity, ...]


def _commit_author_key(commit: GitHubCommit) -> str:
    if commit.author is not None:
        return commit.author.login
    return commit.commit.author.name or "unknown"


def summarize_contributors(
    contributors: Sequence[GitHubContributor],
    commits: Sequence[GitHubCommit],
    *,
    time_range: TimeRange,
) -> ContributorActivity:
    """Group in-window commits by author and day.

    Only listed contributors with at least one in-window commit appear in the
    summary; the daily series counts every commit, linked account or not.
    """
    per_author: Counter[str] = Counter()
    per_author_day: dict[str, Counter[date]] = defaultdict(Counter)
    per_day: Counter[date] = Counter()
    per_day_author: dict[date, Counter[str]] = defaultdict(Counter)

    for commit in commits:
        author = _commit_author_key(commit)
        day = commit.commit.author.date.date()
        per_author[author] += 1
        per_author_day[author][day] += 1
        per_day[day] += 1
        per_day_author[day][author] += 1

    summary = [
        ContributorSummary(
            id=c.id,
            login=c.login,
            avatar_url=c.avatar_url,
            total_commits=per_author[c.login],
            total_contributions=c.contributions,
            commits_in_time_range=per_author[c.login],
            activity=tuple(
                DailyCommits(date=day, commits=count) for day, count in sorted(per_author_day[c.login].items())
            ),
        )
        for c in contributors
        if per_author.get(c.login)
    ]
    summary.sort(key=lambda s: s.commits_in_time_range, reverse=True)

    series = tuple(
        DailyActivity(date=day, total_commits=per_day[day], by_author=dict(per_day_author[day]))
        for day in sorted(per_day)
    )
    return ContributorActivity(time_range=time_range, contribution_summary=tuple(summary), time_series=series)


def build_contributor_activity(
    client: GitHubClient,
    owner: str,
    repo: str,
    time_range_key: str | None = DEFAULT_TIME_RANGE,
    *,
    today: date | None = None,
    max_workers: int = 4,
) -> ContributorActivity:
    owner, repo = require_repo(owner, repo)
    time_range = resolve_time_range(time_range_key, today=today)
    fetched = fetch_all(
        {
            "contributors": lambda: client.list_contributors(owner, repo),
            "commits": lambda: client.list_commits(owner, repo, since=time_range.since, until=time_range.until),
        },
        max_workers=max_workers,
    )
    activity = summarize_contributors(fetched["contributors"], fetched["commits"], time_range=time_range)
    log.info(
        "Contributor activity for {}/{} contributors={} days={}",
        owner,
        repo,
        len(activity.contribution_summary),
        len(activity.time_series),
    )
    return activity


# Pull requests ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PullRequestItem:
    id: int
    number: int
    title: str
    state: str
    created_at: datetime
    updated_at: datetime | None
    closed_at: datetime | None
    merged_at: datetime | None
    user_login: str | None
    user_avatar_url: str | None
    base: str
    head: str

    @property
    def outcome(self) -> str:
        """Return `open`, `merged`, `closed`, or `other` for a closed PR with no timestamps."""
        if self.state == "open":
            return "open"
        if self.merged_at is not None:
            return "merged"
        if self.closed_at is not None:
            return "closed"
        return "other"


@dataclass(slots=True)
class PullRequestStateCounts:
    total: int = 0
    open: int = 0
    closed: int = 0
    merged: int = 0

    def count(self, item: PullRequestItem) -> None:
        self.total += 1
        outcome = item.outcome
        if outcome == "open":
            self.open += 1
        elif outcome == "merged":
            self.merged += 1
        elif outcome == "closed":
            self.closed += 1


@dataclass(slots=True)
class PullRequestAuthorStats(PullRequestStateCounts):
    author: str = ""
    avatar_url: str | None = None


@dataclass(slots=True)
class PullRequestDailyStats(PullRequestStateCounts):
    date: date | None = None


@dataclass(frozen=True, slots=True)
class PullRequestActivity:
    time_range: TimeRange
    summary: PullRequestStateCounts
    by_author: tuple[PullRequestAuthorStats, ...]
    time_series: tuple[PullRequestDailyStats, ...]
    pull_requests: tuple[PullRequestItem, ...]


def _to_item(pr: GitHubPullRequest) -> PullRequestItem:
    return PullRequestItem(
        id=pr.id,
        number=pr.number,
        title=pr.title,
        state=pr.state,
        created_at=pr.created_at,
        updated_at=pr.updated_at,
        closed_at=pr.closed_at,
        merged_at=pr.merged_at,
        user_login=pr.user.login if pr.user else None,
        user_avatar_url=pr.user.avatar_url if pr.user else None,
        base=pr.base.ref,
        head=pr.head.ref,
    )


def summarize_pull_requests(
    pulls: Sequence[GitHubPullRequest],
    *,
    time_range: TimeRange,
    closed_total: int,
    merged_total: int,
    list_limit: int = 50,
) -> PullRequestActivity:
    """Aggregate pull requests created inside the window.

    `closed`/`merged` in the summary come from the search totals, which are
    not capped by the page size of the list endpoint.
    """
    items = [_to_item(pr) for pr in pulls if time_range.contains(pr.created_at)]

    by_author: dict[str, PullRequestAuthorStats] = {}
    by_day: dict[date, PullRequestDailyStats] = {}
    open_count = 0
    for item in items:
        if item.outcome == "open":
            open_count += 1
        login = item.user_login or "unknown"
        author_stats = by_author.get(login)
        if author_stats is None:
            author_stats = by_author[login] = PullRequestAuthorStats(author=login, avatar_url=item.user_avatar_url)
        author_stats.count(item)

        day = item.created_at.date()
        day_stats = by_day.get(day)
        if day_stats is None:
            day_stats = by_day[day] = PullRequestDailyStats(date=day)
        day_stats.count(item)

    summary = PullRequestStateCounts(total=len(items), open=open_count, closed=closed_total, merged=merged_total)
    return PullRequestActivity(
        time_range=time_range,
        summary=summary,
        by_author=tuple(sorted(by_author.values(), key=lambda s: s.total, reverse=True)),
        time_series=tuple(by_day[day] for day in sorted(by_day)),
        pull_requests=tuple(items[: max(0, int(list_limit))]),
    )


def build_pull_request_activity(
    client: GitHubClient,
    owner: str,
    repo: str,
    time_range_key: str | None = DEFAULT_TIME_RANGE,
    *,
    state: str = "all",
    today: date | None = None,
    list_limit: int = 50,
    max_workers: int = 4,
) -> PullRequestActivity:
    """Summarize pull-request activity; all three upstream queries must succeed."""
    owner, repo = require_repo(owner, repo)
    state = (state or "all").strip().lower()
    if state not in PULL_REQUEST_STATES:
        raise InvalidRequest(f"Unsupported pull request state {state!r}")
    time_range = resolve_time_range(time_range_key, today=today)

    window = f"{time_range.start_date.isoformat()}..{time_range.end_date.isoformat()}"
    closed_query = f"repo:{owner}/{repo} is:pr is:closed closed:{window}"
    merged_query = f"repo:{owner}/{repo} is:pr is:merged merged:{window}"

    fetched = fetch_all(
        {
            "pulls": lambda: client.list_pull_requests(owner, repo, state=state, sort="created", direction="desc"),
            "closed": lambda: client.search_issue_count(closed_query),
            "merged": lambda: client.search_issue_count(merged_query),
        },
        max_workers=max_workers,
    )
    activity = summarize_pull_requests(
        fetched["pulls"],
        time_range=time_range,
        closed_total=fetched["closed"],
        merged_total=fetched["merged"],
        list_limit=list_limit,
    )
    log.info(
        "Pull request activity for {}/{} total={} open={} closed={} merged={}",
        owner,
        repo,
        activity.summary.total,
        activity.summary.open,
        activity.summary.closed,
        activity.summary.merged,
    )
    return activity
