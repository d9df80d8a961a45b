"""Translation of classified GitViz failures into HTTP errors."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException
from loguru import logger

from gitviz.errors import GitVizError, InvalidRequest, UpstreamNotFound, UpstreamUnauthorized

log = logger.bind(module="api.errors")

__all__ = ["raise_http_error"]


def raise_http_error(exc: GitVizError, *, action: str) -> NoReturn:
    """Raise the `HTTPException` matching `exc`; `action` names what failed."""
    if isinstance(exc, InvalidRequest):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, UpstreamNotFound):
        raise HTTPException(status_code=404, detail="Repository not found") from exc
    if isinstance(exc, UpstreamUnauthorized):
        raise HTTPException(status_code=401, detail="GitHub credential rejected") from exc
    log.warning("Failed to {}: {}", action, exc)
    raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc
