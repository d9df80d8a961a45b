from __future__ import annotations

"""Entry script for running the GitViz visualization API.

Configures Loguru from ``Settings.log_level``, routes standard-library logging
(used by Uvicorn) through Loguru, and serves ``gitviz.api.app:app``.

Usage (with uv):

    uv run python script/run_api.py --port 5000
"""

import argparse
import logging
import sys
from typing import Sequence

from loguru import logger
from rich.console import Console

from gitviz.config import get_settings

console = Console()


class _LoguruInterceptHandler(logging.Handler):
    """Bridge standard-library logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _configure_logging() -> str:
    settings = get_settings()
    level = (settings.log_level or "INFO").upper()

    logger.remove()
    logger.add(sys.stderr, level=level, backtrace=False, diagnose=False)

    handler = _LoguruInterceptHandler()
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = [handler]
        uv_logger.propagate = False
    logging.captureWarnings(True)
    return level


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the GitViz visualization API.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind host.")
    parser.add_argument("--port", type=int, default=5000, help="Bind port.")
    parser.add_argument("--reload", action="store_true", help="Reload on source changes (development only).")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(list(argv) if argv is not None else None)
    level = _configure_logging()

    import uvicorn

    console.log(f"[bold green]GitViz API online[/] host={args.host} port={args.port} log_level={level}")
    uvicorn.run(
        "gitviz.api.app:app",
        host=str(args.host),
        port=int(args.port),
        reload=bool(args.reload),
        log_config=None,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
