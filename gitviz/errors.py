"""Error taxonomy shared by the graph builder, the activity views and the API.

Every failure is terminal for the current build; nothing here is retried. The
API layer maps each class to an HTTP status, while library callers only need
to catch `GitVizError`.
"""

from __future__ import annotations

__all__ = [
    "GitVizError",
    "InvalidRequest",
    "StatisticsPending",
    "UpstreamError",
    "UpstreamNotFound",
    "UpstreamUnauthorized",
    "UpstreamUnavailable",
]


class GitVizError(RuntimeError):
    """Base class for classified GitViz failures."""


class InvalidRequest(GitVizError):
    """Raised before any network call when the request itself is unusable."""


class UpstreamError(GitVizError):
    """Raised when the GitHub API call fails.

    `status_code` is the upstream HTTP status when one was received, and None
    for transport failures or malformed payloads.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.status_code = status_code


class UpstreamNotFound(UpstreamError):
    """The repository (or another addressed resource) does not exist."""


class UpstreamUnauthorized(UpstreamError):
    """The credential was rejected (expired, revoked, or lacking scope)."""


class UpstreamUnavailable(UpstreamError):
    """Any other upstream failure: network, rate limit, 5xx, malformed body."""


class StatisticsPending(UpstreamError):
    """GitHub is still computing repository statistics; try again later."""
