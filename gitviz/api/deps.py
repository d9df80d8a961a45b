"""FastAPI dependencies: settings, caller credential and the GitHub client."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from gitviz.config import Settings, get_settings
from gitviz.github.client import GitHubClient

__all__ = ["get_github_client", "require_credential"]


def require_credential(authorization: Annotated[str | None, Header()] = None) -> str:
    """Return the bearer token from the Authorization header.

    The token is treated as opaque and handed to the GitHub client unchanged.
    """
    scheme, _, token = (authorization or "").strip().partition(" ")
    token = token.strip()
    if scheme.lower() not in ("bearer", "token") or not token:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer credential.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_github_client(
    credential: Annotated[str, Depends(require_credential)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GitHubClient:
    return GitHubClient.from_settings(credential, settings)
