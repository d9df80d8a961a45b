from __future__ import annotations

import pytest
from pydantic import ValidationError

from gitviz.config import Settings


def test_defaults_match_github_limits(monkeypatch) -> None:
    for name in ("GITHUB_PAGE_SIZE", "GITHUB_MAX_PAGES", "GITVIZ_DEFAULT_TIME_RANGE", "API_CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.github_api_base_url == "https://api.github.com"
    assert settings.github_page_size == 100
    assert settings.github_max_pages == 1
    assert settings.default_time_range == "3m"
    assert "http://localhost:5173" in settings.api_cors_origins


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_PAGE_SIZE", "30")
    monkeypatch.setenv("GITHUB_MAX_PAGES", "4")
    monkeypatch.setenv("API_CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings(_env_file=None)

    assert settings.github_page_size == 30
    assert settings.github_max_pages == 4
    assert settings.api_cors_origins == ["https://a.example", "https://b.example"]


def test_cors_origins_accept_json_list(monkeypatch) -> None:
    monkeypatch.setenv("API_CORS_ORIGINS", '["https://c.example"]')

    assert Settings(_env_file=None).api_cors_origins == ["https://c.example"]


def test_page_size_above_github_maximum_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_PAGE_SIZE", "500")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_export_safe_summarizes_upstream_settings(settings) -> None:
    exported = settings.export_safe()
    assert exported["github_page_size"] == settings.github_page_size


def test_default_time_range_must_be_a_known_window(monkeypatch) -> None:
    monkeypatch.setenv("GITVIZ_DEFAULT_TIME_RANGE", "2w")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_default_time_range_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("GITVIZ_DEFAULT_TIME_RANGE", "6m")

    assert Settings(_env_file=None).default_time_range == "6m"
