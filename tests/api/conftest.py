from __future__ import annotations

from typing import Annotated

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from gitviz.api.app import create_app
from gitviz.api.deps import get_github_client, require_credential
from gitviz.config import get_settings
from gitviz.github.client import GitHubClient


@pytest.fixture
def api(fake_github, settings) -> TestClient:
    """API client whose GitHub calls go to the in-memory fake."""
    app = create_app(settings)

    def _client(credential: Annotated[str, Depends(require_credential)]) -> GitHubClient:
        return GitHubClient.from_settings(credential, settings, transport=fake_github.transport)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_github_client] = _client
    return TestClient(app)
