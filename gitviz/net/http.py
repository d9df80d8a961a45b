"""Thin httpx layer shared by the upstream clients.

`HttpClient` owns base URL, timeout, redirect and default-header handling, and
turns every transport failure or non-2xx answer into an `HttpCallError` that
records the status code and the request that failed. It knows nothing about
GitHub beyond the common REST convention of a JSON `{"message": ...}` error
body; `gitviz.github.client` maps `HttpCallError` onto the domain taxonomy.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

import httpx

__all__ = ["HttpCallError", "HttpClient"]

_MIN_TIMEOUT_SECONDS = 0.1
_ERROR_EXCERPT_CHARS = 512


class HttpCallError(RuntimeError):
    """A request that failed in transport or came back with a 4xx/5xx status.

    `status_code` is None when no response was received at all.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = str(message)
        self.status_code = status_code
        self.method = method
        self.url = url

    def __str__(self) -> str:
        where = f"{self.method} {self.url}: " if self.method and self.url else ""
        if self.status_code is None:
            return f"{where}{self.message}"
        return f"{where}{self.message} (status={self.status_code})"


def _describe_error(response: httpx.Response) -> str:
    """Pick the most useful one-line description of an error response.

    REST APIs such as GitHub answer errors with `{"message": ...}`; anything
    else is reduced to a short excerpt of the body.
    """
    text = response.text.strip()
    try:
        payload = json.loads(text) if text.startswith("{") else None
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    if len(text) > _ERROR_EXCERPT_CHARS:
        text = text[: _ERROR_EXCERPT_CHARS - 3].rstrip() + "..."
    return text or response.reason_phrase or "HTTP request failed"


class HttpClient:
    """Sync JSON-over-HTTP client with one configuration for every call.

    A fresh `httpx.Client` is opened per request, so a single instance can be
    shared by the worker threads that fan out upstream fetches. The timeout
    applies to each request and never drops below `_MIN_TIMEOUT_SECONDS`.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        follow_redirects: bool = True,
        user_agent: str | None = None,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/" if base_url else None
        self.timeout = httpx.Timeout(max(_MIN_TIMEOUT_SECONDS, float(timeout_seconds)))
        self.follow_redirects = follow_redirects
        self.transport = transport
        self.headers = dict(headers or {})
        if user_agent:
            self.headers.setdefault("User-Agent", user_agent)

    def _open(self) -> httpx.Client:
        options: dict[str, Any] = {
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
            "headers": self.headers,
        }
        if self.base_url:
            options["base_url"] = self.base_url
        if self.transport is not None:
            options["transport"] = self.transport
        return httpx.Client(**options)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the 2xx response.

        Raises:
            ValueError: `path` is empty.
            HttpCallError: transport failure or a 4xx/5xx status.
        """
        path = path.strip()
        if not path:
            raise ValueError("path must be non-empty.")
        method = method.upper()

        with self._open() as client:
            try:
                response = client.request(method, path, params=params, headers=headers)
            except httpx.RequestError as exc:
                raise HttpCallError(
                    f"HTTP request failed: {exc}",
                    method=method,
                    url=path,
                ) from exc
        if response.is_error:
            raise HttpCallError(
                _describe_error(response),
                status_code=response.status_code,
                method=method,
                url=str(response.request.url),
            )
        return response

    @staticmethod
    def decode_json(response: httpx.Response) -> Any:
        """Parse a response body as JSON; an empty body decodes to None."""
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise HttpCallError(
                f"Invalid JSON response: {exc}",
                status_code=response.status_code,
                method=response.request.method,
                url=str(response.request.url),
            ) from exc

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """GET `path` and decode its JSON body (None when the body is empty)."""
        merged = {"Accept": "application/json", **(headers or {})}
        response = self.request("GET", path, params=params, headers=merged)
        return self.decode_json(response)
