"""Shared fixtures: isolated settings, a temporary SQLite database and a test client."""

import os

import pytest
from fastapi.testclient import TestClient

# The app module builds its middleware at import time; keep a developer's shell
# API_KEY from switching on authentication for the whole suite.
os.environ.pop("API_KEY", None)

from app.config import get_settings  # noqa: E402
from meeting_insights.core.validation import ActionItem, AnalysisResult  # noqa: E402


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'meetings.db'}"


@pytest.fixture
def test_env(monkeypatch, database_url):
    """Point settings at a throwaway database and a dummy provider key."""
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.delenv("API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client(test_env):
    """TestClient with the app lifespan (database setup) running."""
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def analysis_result() -> AnalysisResult:
    return AnalysisResult(
        action_items=[
            ActionItem(owner="Bob", task="Ship the release", deadline="Friday"),
            ActionItem(owner="Alice", task="Announce the launch", deadline=None),
        ],
        decisions=["Ship by Friday"],
        sentiment="Positive",
    )
