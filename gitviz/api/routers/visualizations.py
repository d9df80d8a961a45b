"""Visualization endpoints consumed by the React dashboard."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger

from gitviz.api.deps import get_github_client
from gitviz.api.errors import raise_http_error
from gitviz.api.schemas.visualizations import (
    BranchDataOut,
    CodeFrequencyOut,
    CodeFrequencySummaryOut,
    CommitDataOut,
    ContributorActivityOut,
    ContributorSummaryOut,
    CumulativeWeekOut,
    DailyActivityOut,
    GraphEdgeOut,
    GraphNodeOut,
    GraphOut,
    MergeDataOut,
    NetworkGraphOut,
    PendingOut,
    PullRequestActivityOut,
    PullRequestAuthorOut,
    PullRequestDayOut,
    PullRequestOut,
    PullRequestSummaryOut,
    RepositoryOut,
    TimeRangeOut,
    UserRefOut,
    WeeklyChangeOut,
)
from gitviz.config import Settings, get_settings
from gitviz.core.activity import (
    PullRequestItem,
    build_contributor_activity,
    build_pull_request_activity,
)
from gitviz.core.code_frequency import build_code_frequency
from gitviz.core.network import (
    BranchRecord,
    GraphEdge,
    GraphNode,
    NetworkGraph,
    build_network_graph,
)
from gitviz.core.time_range import pick_time_range_key
from gitviz.errors import GitVizError, StatisticsPending
from gitviz.github.client import GitHubClient

log = logger.bind(module="api.visualizations")

router = APIRouter()

ClientDep = Annotated[GitHubClient, Depends(get_github_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
TimeRangeParam = Annotated[str | None, Query(alias="timeRange")]


def _node_out(node: GraphNode) -> GraphNodeOut:
    if isinstance(node.data, BranchRecord):
        data: CommitDataOut | BranchDataOut = BranchDataOut.model_validate(node.data)
    else:
        data = CommitDataOut.model_validate(node.data)
    return GraphNodeOut(id=node.id, type=node.type, data=data)


def _edge_out(edge: GraphEdge) -> GraphEdgeOut:
    merge = edge.data
    data = None
    if merge is not None:
        data = MergeDataOut(
            id=merge.id,
            number=merge.number,
            title=merge.title,
            source_branch=merge.source_branch,
            target_branch=merge.target_branch,
            merged_at=merge.merged_at,
            merge_commit_sha=merge.merge_commit_sha,
            author=UserRefOut(login=merge.author_login, avatar_url=merge.author_avatar_url),
        )
    return GraphEdgeOut(source=edge.source, target=edge.target, type=edge.type, data=data)


def network_graph_out(graph: NetworkGraph) -> NetworkGraphOut:
    return NetworkGraphOut(
        repository=RepositoryOut.model_validate(graph.repository),
        graph=GraphOut(
            nodes=[_node_out(n) for n in graph.nodes],
            edges=[_edge_out(e) for e in graph.edges],
        ),
        time_range=TimeRangeOut.model_validate(graph.time_range),
    )


def _pull_request_out(item: PullRequestItem) -> PullRequestOut:
    return PullRequestOut(
        id=item.id,
        number=item.number,
        title=item.title,
        state=item.state,
        created_at=item.created_at,
        updated_at=item.updated_at,
        closed_at=item.closed_at,
        merged_at=item.merged_at,
        user=UserRefOut(login=item.user_login, avatar_url=item.user_avatar_url),
        base=item.base,
        head=item.head,
    )


@router.get("/visualizations/{owner}/{repo}/network", response_model=NetworkGraphOut)
def get_network_graph(
    owner: str,
    repo: str,
    client: ClientDep,
    settings: SettingsDep,
    time_range: TimeRangeParam = None,
) -> NetworkGraphOut:
    try:
        graph = build_network_graph(
            client,
            owner,
            repo,
            pick_time_range_key(time_range, default=settings.default_time_range),
            max_workers=settings.fetch_max_workers,
        )
    except GitVizError as exc:
        raise_http_error(exc, action="generate network graph")
    return network_graph_out(graph)


@router.get("/visualizations/{owner}/{repo}/contributor-activity", response_model=ContributorActivityOut)
def get_contributor_activity(
    owner: str,
    repo: str,
    client: ClientDep,
    settings: SettingsDep,
    time_range: TimeRangeParam = None,
) -> ContributorActivityOut:
    try:
        activity = build_contributor_activity(
            client,
            owner,
            repo,
            pick_time_range_key(time_range, default=settings.default_time_range),
            max_workers=settings.fetch_max_workers,
        )
    except GitVizError as exc:
        raise_http_error(exc, action="generate contributor activity")
    return ContributorActivityOut(
        time_range=TimeRangeOut.model_validate(activity.time_range),
        contribution_summary=[ContributorSummaryOut.model_validate(s) for s in activity.contribution_summary],
        time_series_data=[DailyActivityOut.model_validate(d) for d in activity.time_series],
    )


@router.get("/visualizations/{owner}/{repo}/pull-requests", response_model=PullRequestActivityOut)
def get_pull_request_activity(
    owner: str,
    repo: str,
    client: ClientDep,
    settings: SettingsDep,
    time_range: TimeRangeParam = None,
    state: str = Query(default="all"),
) -> PullRequestActivityOut:
    try:
        activity = build_pull_request_activity(
            client,
            owner,
            repo,
            pick_time_range_key(time_range, default=settings.default_time_range),
            state=state,
            list_limit=settings.pr_list_limit,
            max_workers=settings.fetch_max_workers,
        )
    except GitVizError as exc:
        raise_http_error(exc, action="generate pull request visualization")
    return PullRequestActivityOut(
        time_range=TimeRangeOut.model_validate(activity.time_range),
        summary=PullRequestSummaryOut.model_validate(activity.summary),
        by_author=[PullRequestAuthorOut.model_validate(a) for a in activity.by_author],
        time_series=[PullRequestDayOut.model_validate(d) for d in activity.time_series],
        pull_requests=[_pull_request_out(item) for item in activity.pull_requests],
    )


@router.get(
    "/visualizations/{owner}/{repo}/code-frequency",
    response_model=CodeFrequencyOut,
    responses={202: {"model": PendingOut}},
)
def get_code_frequency(owner: str, repo: str, client: ClientDep) -> CodeFrequencyOut | JSONResponse:
    try:
        result = build_code_frequency(client, owner, repo)
    except StatisticsPending as exc:
        log.info("Code frequency for {}/{} is still being computed upstream", owner, repo)
        return JSONResponse(status_code=202, content=PendingOut(message=exc.message).model_dump(by_alias=True))
    except GitVizError as exc:
        raise_http_error(exc, action="generate code frequency visualization")
    return CodeFrequencyOut(
        weekly_data=[WeeklyChangeOut.model_validate(w) for w in result.weekly],
        cumulative_data=[CumulativeWeekOut.model_validate(c) for c in result.cumulative],
        summary=CodeFrequencySummaryOut(
            total_additions=result.total_additions,
            total_deletions=result.total_deletions,
        ),
    )
