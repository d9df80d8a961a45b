"""Weekly additions/deletions with running totals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Sequence

from loguru import logger

from gitviz.errors import InvalidRequest
from gitviz.github.client import GitHubClient

log = logger.bind(module="core.code_frequency")

__all__ = ["CodeFrequency", "CumulativeWeek", "WeeklyChange", "build_code_frequency", "summarize_code_frequency"]


@dataclass(frozen=True, slots=True)
class WeeklyChange:
    week: date
    additions: int
    deletions: int


@dataclass(frozen=True, slots=True)
class CumulativeWeek:
    week: date
    total_additions: int
    total_deletions: int


@dataclass(frozen=True, slots=True)
class CodeFrequency:
    weekly: tuple[WeeklyChange, ...]
    cumulative: tuple[CumulativeWeek, ...]

    @property
    def total_additions(self) -> int:
        return self.cumulative[-1].total_additions if self.cumulative else 0

    @property
    def total_deletions(self) -> int:
        return self.cumulative[-1].total_deletions if self.cumulative else 0


def summarize_code_frequency(rows: Sequence[tuple[int, int, int]]) -> CodeFrequency:
    # GitHub reports deletions as negative numbers.
    weekly = tuple(
        WeeklyChange(
            week=datetime.fromtimestamp(ts, tz=timezone.utc).date(),
            additions=additions,
            deletions=abs(deletions),
        )
        for ts, additions, deletions in rows
    )
    cumulative: list[CumulativeWeek] = []
    added = deleted = 0
    for w in weekly:
        added += w.additions
        deleted += w.deletions
        cumulative.append(CumulativeWeek(week=w.week, total_additions=added, total_deletions=deleted))
    return CodeFrequency(weekly=weekly, cumulative=tuple(cumulative))


def build_code_frequency(client: GitHubClient, owner: str, repo: str) -> CodeFrequency:
    """Raises `StatisticsPending` while GitHub is still computing the stats."""
    owner = (owner or "").strip()
    repo = (repo or "").strip()
    if not owner or not repo:
        raise InvalidRequest("Repository owner and name are required")
    result = summarize_code_frequency(client.get_code_frequency(owner, repo))
    log.info("Code frequency for {}/{} weeks={}", owner, repo, len(result.weekly))
    return result
