"""Repository network graph: commits, branches and merges as one directed graph.

The builder fetches four independent views of a repository (metadata, branch
heads, commits inside a time window, merged pull requests) and joins them into
nodes and edges for a force-directed renderer:

- commit nodes are keyed by sha; branch nodes by `branch-<name>` so the two
  id spaces never collide;
- `commit` edges run parent -> child exactly as GitHub reports the parents;
- `branch` edges run from a branch node to its head commit;
- `merge` edges run between the source and target branch nodes of a merged
  pull request whose merge commit was fetched.

A branch whose head lies outside the commit window gets no node at all, and
any edge with an endpoint missing from the node set is dropped at the end.
The builder keeps no state between calls and never returns a partial graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Sequence

from loguru import logger

from gitviz.core.fetch import fetch_all
from gitviz.core.time_range import DEFAULT_TIME_RANGE, TimeRange, resolve_time_range
from gitviz.errors import InvalidRequest
from gitviz.github.client import GitHubClient
from gitviz.github.models import GitHubBranch, GitHubCommit, GitHubPullRequest, GitHubRepository

log = logger.bind(module="core.network")

__all__ = [
    "BRANCH_NODE_PREFIX",
    "BranchRecord",
    "CommitAuthor",
    "CommitRecord",
    "GraphEdge",
    "GraphNode",
    "MergeRecord",
    "NetworkGraph",
    "ParentRef",
    "RepositorySummary",
    "assemble_graph",
    "branch_node_id",
    "build_network_graph",
    "collect_merges",
    "to_branch_records",
    "to_commit_records",
]

BRANCH_NODE_PREFIX = "branch-"

NodeType = Literal["commit", "branch"]
EdgeType = Literal["commit", "branch", "merge"]


def branch_node_id(name: str) -> str:
    return f"{BRANCH_NODE_PREFIX}{name}"


@dataclass(frozen=True, slots=True)
class RepositorySummary:
    name: str
    full_name: str
    default_branch: str


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str | None
    email: str | None
    date: datetime
    login: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class ParentRef:
    sha: str
    url: str | None = None
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class CommitRecord:
    sha: str
    message: str
    author: CommitAuthor
    parents: tuple[ParentRef, ...] = ()
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class BranchRecord:
    name: str
    sha: str
    protected: bool
    is_default: bool


@dataclass(frozen=True, slots=True)
class MergeRecord:
    id: int
    number: int
    title: str
    source_branch: str
    target_branch: str
    merged_at: datetime
    merge_commit_sha: str | None
    author_login: str | None = None
    author_avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class GraphNode:
    id: str
    type: NodeType
    data: CommitRecord | BranchRecord


@dataclass(frozen=True, slots=True)
class GraphEdge:
    source: str
    target: str
    type: EdgeType
    data: MergeRecord | None = None


@dataclass(frozen=True, slots=True)
class NetworkGraph:
    repository: RepositorySummary
    time_range: TimeRange
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    @property
    def start_date(self) -> date:
        return self.time_range.start_date

    @property
    def end_date(self) -> date:
        return self.time_range.end_date


@dataclass(slots=True)
class _GraphAccumulator:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    node_ids: set[str] = field(default_factory=set)

    def add_node(self, node: GraphNode) -> None:
        self.nodes.append(node)
        self.node_ids.add(node.id)

    def add_edge(self, edge: GraphEdge) -> None:
        self.edges.append(edge)


# Upstream reshaping ---------------------------------------------------


def to_branch_records(branches: Sequence[GitHubBranch], *, default_branch: str) -> list[BranchRecord]:
    """Flatten branch heads; `is_default` is derived by name equality."""
    return [
        BranchRecord(
            name=b.name,
            sha=b.commit.sha,
            protected=bool(b.protected),
            is_default=b.name == default_branch,
        )
        for b in branches
    ]


def to_commit_records(commits: Sequence[GitHubCommit]) -> list[CommitRecord]:
    records: list[CommitRecord] = []
    for c in commits:
        actor = c.commit.author
        records.append(
            CommitRecord(
                sha=c.sha,
                html_url=c.html_url,
                message=c.commit.message,
                author=CommitAuthor(
                    name=actor.name,
                    email=actor.email,
                    date=actor.date,
                    login=c.author.login if c.author else None,
                    avatar_url=c.author.avatar_url if c.author else None,
                ),
                parents=tuple(ParentRef(sha=p.sha, url=p.url, html_url=p.html_url) for p in c.parents),
            )
        )
    return records


def collect_merges(pulls: Sequence[GitHubPullRequest], *, time_range: TimeRange) -> list[MergeRecord]:
    """Keep pull requests merged on or after the window start.

    Only the lower bound applies; merges after `end_date` are kept.
    """
    merges: list[MergeRecord] = []
    for pr in pulls:
        if pr.merged_at is None or pr.merged_at < time_range.since:
            continue
        merges.append(
            MergeRecord(
                id=pr.id,
                number=pr.number,
                title=pr.title,
                source_branch=pr.head.ref,
                target_branch=pr.base.ref,
                merged_at=pr.merged_at,
                merge_commit_sha=pr.merge_commit_sha,
                author_login=pr.user.login if pr.user else None,
                author_avatar_url=pr.user.avatar_url if pr.user else None,
            )
        )
    return merges


# Assembly -------------------------------------------------------------


def assemble_graph(
    *,
    repository: RepositorySummary,
    time_range: TimeRange,
    commits: Sequence[CommitRecord],
    branches: Sequence[BranchRecord],
    merges: Sequence[MergeRecord],
) -> NetworkGraph:
    """Join already-fetched records into a graph with no dangling edges."""
    acc = _GraphAccumulator()

    # One node per sha; a repeated commit keeps its first occurrence.
    unique: list[CommitRecord] = []
    for commit in commits:
        if commit.sha in acc.node_ids:
            continue
        acc.add_node(GraphNode(id=commit.sha, type="commit", data=commit))
        unique.append(commit)
    commit_shas = set(acc.node_ids)

    for commit in unique:
        for parent in commit.parents:
            acc.add_edge(GraphEdge(source=parent.sha, target=commit.sha, type="commit"))

    for branch in branches:
        if branch.sha not in commit_shas:
            continue
        node_id = branch_node_id(branch.name)
        acc.add_node(GraphNode(id=node_id, type="branch", data=branch))
        acc.add_edge(GraphEdge(source=node_id, target=branch.sha, type="branch"))

    for merge in merges:
        if merge.merge_commit_sha not in commit_shas:
            continue
        acc.add_edge(
            GraphEdge(
                source=branch_node_id(merge.source_branch),
                target=branch_node_id(merge.target_branch),
                type="merge",
                data=merge,
            )
        )

    kept = [e for e in acc.edges if e.source in acc.node_ids and e.target in acc.node_ids]
    pruned = len(acc.edges) - len(kept)
    if pruned:
        log.debug("Pruned {} edge(s) with endpoints outside the node set", pruned)

    return NetworkGraph(
        repository=repository,
        time_range=time_range,
        nodes=tuple(acc.nodes),
        edges=tuple(kept),
    )


def build_network_graph(
    client: GitHubClient,
    owner: str,
    repo: str,
    time_range_key: str | None = DEFAULT_TIME_RANGE,
    *,
    today: date | None = None,
    max_workers: int = 4,
) -> NetworkGraph:
    """Fetch a repository's recent history and build its network graph.

    Raises:
        InvalidRequest: owner or repo is empty (no network call is made).
        UpstreamNotFound / UpstreamUnauthorized / UpstreamUnavailable: any
            fetch failed; remaining unstarted fetches are cancelled.
    """
    owner = (owner or "").strip()
    repo = (repo or "").strip()
    if not owner or not repo:
        raise InvalidRequest("Repository owner and name are required")

    time_range = resolve_time_range(time_range_key, today=today)
    log.debug("Building network graph for {}/{} window={}", owner, repo, time_range)

    metadata: GitHubRepository = client.get_repository(owner, repo)
    fetched = fetch_all(
        {
            "branches": lambda: client.list_branches(owner, repo),
            "commits": lambda: client.list_commits(owner, repo, since=time_range.since, until=time_range.until),
            "pulls": lambda: client.list_pull_requests(owner, repo, state="closed", sort="updated", direction="desc"),
        },
        max_workers=max_workers,
    )

    graph = assemble_graph(
        repository=RepositorySummary(
            name=metadata.name,
            full_name=metadata.full_name,
            default_branch=metadata.default_branch,
        ),
        time_range=time_range,
        commits=to_commit_records(fetched["commits"]),
        branches=to_branch_records(fetched["branches"], default_branch=metadata.default_branch),
        merges=collect_merges(fetched["pulls"], time_range=time_range),
    )
    log.info(
        "Network graph for {} window={}..{} nodes={} edges={}",
        metadata.full_name,
        time_range.start_date,
        time_range.end_date,
        len(graph.nodes),
        len(graph.edges),
    )
    return graph
