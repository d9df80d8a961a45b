from __future__ import annotations

"""Build a repository network graph from the command line.

Prints the same JSON body the API serves (camelCase) to stdout and a short
summary to stderr.

Usage (with uv):

    GITHUB_TOKEN=... uv run python script/network_graph.py octocat hello-world --time-range 1m
"""

import argparse
import os
import sys
from typing import Sequence

from loguru import logger
from rich.console import Console

from gitviz.api.routers.visualizations import network_graph_out
from gitviz.config import get_settings
from gitviz.core.network import build_network_graph
from gitviz.core.time_range import TIME_RANGE_KEYS, pick_time_range_key
from gitviz.errors import GitVizError
from gitviz.github.client import GitHubClient

console = Console(stderr=True)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print a repository's commit/branch/merge network graph as JSON.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("owner", help="Repository owner (user or organisation).")
    parser.add_argument("repo", help="Repository name.")
    parser.add_argument(
        "--time-range",
        default=None,
        help=(
            f"One of {', '.join(TIME_RANGE_KEYS)}; missing or unknown values fall back to "
            "$GITVIZ_DEFAULT_TIME_RANGE."
        ),
    )
    parser.add_argument(
        "--token",
        default=os.getenv("GITHUB_TOKEN", ""),
        help="GitHub token (defaults to $GITHUB_TOKEN).",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(list(argv) if argv is not None else None)
    settings = get_settings()

    logger.remove()
    logger.add(sys.stderr, level=(settings.log_level or "INFO").upper(), backtrace=False, diagnose=False)

    try:
        client = GitHubClient.from_settings(args.token, settings)
        graph = build_network_graph(
            client,
            args.owner,
            args.repo,
            pick_time_range_key(args.time_range, default=settings.default_time_range),
            max_workers=settings.fetch_max_workers,
        )
    except GitVizError as exc:
        console.log(f"[bold red]Network graph failed[/] {type(exc).__name__}: {exc}")
        return 1

    body = network_graph_out(graph)
    sys.stdout.write(body.model_dump_json(by_alias=True, indent=args.indent or None))
    sys.stdout.write("\n")
    console.log(
        f"[bold green]Network graph[/] {graph.repository.full_name} "
        f"{graph.start_date}..{graph.end_date} nodes={len(graph.nodes)} edges={len(graph.edges)}"
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
