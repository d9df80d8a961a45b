from __future__ import annotations

from datetime import date, datetime, timezone

import httpx
import pytest

import gitviz.core.network as network_mod
from gitviz.core.network import (
    BranchRecord,
    CommitAuthor,
    CommitRecord,
    MergeRecord,
    ParentRef,
    RepositorySummary,
    assemble_graph,
    branch_node_id,
    build_network_graph,
    to_branch_records,
)
from gitviz.core.time_range import resolve_time_range
from gitviz.errors import InvalidRequest, UpstreamNotFound, UpstreamUnauthorized, UpstreamUnavailable
from gitviz.github.models import GitHubBranch

TODAY = date(2024, 3, 15)
WINDOW = resolve_time_range("1m", today=TODAY)
REPO = RepositorySummary(name="hello", full_name="octo/hello", default_branch="main")


def _commit(sha: str, *parents: str) -> CommitRecord:
    return CommitRecord(
        sha=sha,
        message=f"commit {sha}",
        author=CommitAuthor(name="Alice", email="alice@example.com", date=datetime(2024, 3, 1, tzinfo=timezone.utc)),
        parents=tuple(ParentRef(sha=p) for p in parents),
    )


def _branch(name: str, sha: str) -> BranchRecord:
    return BranchRecord(name=name, sha=sha, protected=False, is_default=name == "main")


def _merge(source: str, target: str, sha: str | None) -> MergeRecord:
    return MergeRecord(
        id=1,
        number=1,
        title="merge",
        source_branch=source,
        target_branch=target,
        merged_at=datetime(2024, 3, 2, tzinfo=timezone.utc),
        merge_commit_sha=sha,
    )


def _assert_no_dangling_edges(graph) -> None:
    ids = {n.id for n in graph.nodes}
    for edge in graph.edges:
        assert edge.source in ids, edge
        assert edge.target in ids, edge


def test_branch_nodes_only_for_heads_inside_commit_window() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("a"), _commit("b", "a")],
        branches=[_branch("main", "a"), _branch("feature", "c")],
        merges=[],
    )

    branch_ids = [n.id for n in graph.nodes if n.type == "branch"]
    assert branch_ids == ["branch-main"]
    assert [(e.source, e.target, e.type) for e in graph.edges if e.type == "branch"] == [
        ("branch-main", "a", "branch")
    ]
    _assert_no_dangling_edges(graph)


def test_parent_edges_outside_window_are_pruned() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("x", "y")],
        branches=[],
        merges=[],
    )

    assert [n.id for n in graph.nodes] == ["x"]
    assert graph.edges == ()


def test_parent_edges_follow_reported_parents() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("m", "a", "b"), _commit("a", "root"), _commit("b", "root"), _commit("root")],
        branches=[],
        merges=[],
    )

    edges = {(e.source, e.target) for e in graph.edges}
    assert edges == {("a", "m"), ("b", "m"), ("root", "a"), ("root", "b")}
    assert all(e.type == "commit" for e in graph.edges)
    # Commit nodes keep the fetched order.
    assert [n.id for n in graph.nodes] == ["m", "a", "b", "root"]


def test_merge_edges_require_fetched_merge_commit() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("a"), _commit("b", "a")],
        branches=[_branch("main", "b"), _branch("feature", "a")],
        merges=[_merge("feature", "main", "b"), _merge("feature", "main", "old-sha")],
    )

    merges = [e for e in graph.edges if e.type == "merge"]
    assert len(merges) == 1
    edge = merges[0]
    assert (edge.source, edge.target) == ("branch-feature", "branch-main")
    assert edge.data is not None and edge.data.merge_commit_sha == "b"
    _assert_no_dangling_edges(graph)


def test_merge_edges_to_branches_without_nodes_are_pruned() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("a"), _commit("b", "a")],
        branches=[_branch("main", "b")],
        # The source branch was deleted after merging, so it has no node.
        merges=[_merge("feature", "main", "b")],
    )

    assert not [e for e in graph.edges if e.type == "merge"]
    _assert_no_dangling_edges(graph)


def test_edges_are_emitted_in_kind_order() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("a"), _commit("b", "a")],
        branches=[_branch("main", "b"), _branch("feature", "a")],
        merges=[_merge("feature", "main", "b")],
    )

    assert [e.type for e in graph.edges] == ["commit", "branch", "branch", "merge"]


def test_repeated_commits_yield_one_node_and_one_parent_edge() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("a"), _commit("b", "a"), _commit("b", "a")],
        branches=[],
        merges=[],
    )

    assert [n.id for n in graph.nodes] == ["a", "b"]
    assert [(e.source, e.target) for e in graph.edges] == [("a", "b")]


def test_branch_node_ids_do_not_collide_with_shas() -> None:
    graph = assemble_graph(
        repository=REPO,
        time_range=WINDOW,
        commits=[_commit("main")],
        branches=[_branch("main", "main")],
        merges=[],
    )

    assert [n.id for n in graph.nodes] == ["main", branch_node_id("main")]


def test_default_flag_is_name_equality() -> None:
    branches = [
        GitHubBranch.model_validate({"name": name, "commit": {"sha": "a"}})
        for name in ("main", "Main", "feature/main", "dev")
    ]

    records = to_branch_records(branches, default_branch="main")

    assert {r.name: r.is_default for r in records} == {
        "main": True,
        "Main": False,
        "feature/main": False,
        "dev": False,
    }


# End-to-end against a fake upstream ------------------------------------


def _serve_repo(fake_github, *, commits, branches, pulls) -> None:
    fake_github.add("/repos/octo/hello", fake_github.repository())
    fake_github.add("/repos/octo/hello/branches", branches)
    fake_github.add("/repos/octo/hello/commits", commits)
    fake_github.add("/repos/octo/hello/pulls", pulls)


def test_build_network_graph_end_to_end(fake_github) -> None:
    _serve_repo(
        fake_github,
        commits=[
            fake_github.commit("m", ["b", "f"]),
            fake_github.commit("f", ["b"], login=None, name="Bob"),
            fake_github.commit("b", ["outside"]),
        ],
        branches=[
            fake_github.branch("main", "m", protected=True),
            fake_github.branch("feature/x", "f"),
            fake_github.branch("stale", "ancient"),
        ],
        pulls=[
            fake_github.pull(1, head="feature/x", merged_at="2024-03-12T10:00:00Z", merge_commit_sha="m"),
            fake_github.pull(2, head="old", merged_at="2024-01-02T10:00:00Z", merge_commit_sha="m"),
            fake_github.pull(3, head="closed-unmerged", closed_at="2024-03-12T10:00:00Z"),
        ],
    )

    graph = build_network_graph(fake_github.client(), "octo", "hello", "1m", today=TODAY)

    assert graph.repository == REPO
    assert (graph.start_date, graph.end_date) == (date(2024, 2, 15), TODAY)

    node_ids = [n.id for n in graph.nodes]
    assert node_ids == ["m", "f", "b", "branch-main", "branch-feature/x"]
    main = next(n for n in graph.nodes if n.id == "branch-main")
    assert main.data.is_default is True
    assert main.data.protected is True

    edges = [(e.source, e.target, e.type) for e in graph.edges]
    assert edges == [
        ("b", "m", "commit"),
        ("f", "m", "commit"),
        ("b", "f", "commit"),
        ("branch-main", "m", "branch"),
        ("branch-feature/x", "f", "branch"),
        ("branch-feature/x", "branch-main", "merge"),
    ]
    merge = graph.edges[-1].data
    assert merge.number == 1 and merge.author_login == "alice"

    bob = next(n for n in graph.nodes if n.id == "f")
    assert bob.data.author.login is None
    assert bob.data.author.name == "Bob"
    _assert_no_dangling_edges(graph)


def test_build_network_graph_queries_upstream_with_window(fake_github) -> None:
    _serve_repo(fake_github, commits=[], branches=[], pulls=[])

    build_network_graph(fake_github.client(), "octo", "hello", "bogus", today=TODAY)

    by_path = {r.url.path: r for r in fake_github.requests}
    commits_params = dict(by_path["/repos/octo/hello/commits"].url.params)
    assert commits_params["since"] == "2023-12-15T00:00:00Z"
    assert commits_params["until"] == "2024-03-15T23:59:59Z"
    pulls_params = dict(by_path["/repos/octo/hello/pulls"].url.params)
    assert pulls_params["state"] == "closed"
    assert pulls_params["per_page"] == "100"
    # Repository metadata is fetched before anything else.
    assert fake_github.paths()[0] == "/repos/octo/hello"


def test_overlapping_commit_pages_do_not_duplicate_nodes(fake_github) -> None:
    _serve_repo(fake_github, commits=[], branches=[], pulls=[])

    def commit_pages(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        # The listing shifted between requests, so "b" is served twice.
        if page == 1:
            payload = [fake_github.commit("a"), fake_github.commit("b", ["a"])]
        else:
            payload = [fake_github.commit("b", ["a"])]
        return httpx.Response(200, json=payload, request=request)

    fake_github.add_handler("/repos/octo/hello/commits", commit_pages)

    graph = build_network_graph(fake_github.client(page_size=2, max_pages=3), "octo", "hello", "1m", today=TODAY)

    assert [n.id for n in graph.nodes] == ["a", "b"]
    assert [(e.source, e.target, e.type) for e in graph.edges] == [("a", "b", "commit")]


def test_merges_after_window_end_are_kept(fake_github) -> None:
    _serve_repo(
        fake_github,
        commits=[fake_github.commit("m"), fake_github.commit("f")],
        branches=[fake_github.branch("main", "m"), fake_github.branch("feature", "f")],
        pulls=[fake_github.pull(1, head="feature", merged_at="2030-01-01T00:00:00Z", merge_commit_sha="m")],
    )

    graph = build_network_graph(fake_github.client(), "octo", "hello", "1m", today=TODAY)

    assert [e.type for e in graph.edges].count("merge") == 1


def test_missing_owner_or_repo_fails_before_network(fake_github) -> None:
    with pytest.raises(InvalidRequest):
        build_network_graph(fake_github.client(), " ", "hello")
    with pytest.raises(InvalidRequest):
        build_network_graph(fake_github.client(), "octo", "")
    assert fake_github.requests == []


def test_missing_repository_stops_before_other_fetches(fake_github) -> None:
    with pytest.raises(UpstreamNotFound):
        build_network_graph(fake_github.client(), "octo", "missing", today=TODAY)
    assert fake_github.paths() == ["/repos/octo/missing"]


def test_rejected_credential_is_unauthorized(fake_github) -> None:
    fake_github.add("/repos/octo/hello", {"message": "Bad credentials"}, status=401)

    with pytest.raises(UpstreamUnauthorized):
        build_network_graph(fake_github.client(), "octo", "hello", today=TODAY)


def test_commit_fetch_not_found_aborts_build(fake_github, monkeypatch) -> None:
    fake_github.add("/repos/octo/hello", fake_github.repository())
    fake_github.add("/repos/octo/hello/branches", [fake_github.branch("main", "a")])
    fake_github.add("/repos/octo/hello/pulls", [])
    # No commits route: the fake answers 404.

    assembled: list[object] = []
    monkeypatch.setattr(network_mod, "assemble_graph", lambda **kw: assembled.append(kw))

    with pytest.raises(UpstreamNotFound):
        build_network_graph(fake_github.client(), "octo", "hello", today=TODAY)
    assert assembled == []


def test_server_error_on_any_fetch_is_unavailable(fake_github) -> None:
    _serve_repo(fake_github, commits=[], branches=[], pulls=[])
    fake_github.add("/repos/octo/hello/pulls", {"message": "boom"}, status=500)

    with pytest.raises(UpstreamUnavailable):
        build_network_graph(fake_github.client(), "octo", "hello", today=TODAY)
