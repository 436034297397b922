"""Pytest configuration and shared fixtures.

Usage Guide:
- For GitHub API payloads: import dict factories from tests.factories
- For triage tests: use the fake_client fixture (AsyncMock GitHubClient)
"""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from disfork.config import get_settings
from disfork.github.client import GitHubClient


# -----------------------------------------------------------------------------
# Settings Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the developer's environment out of the settings under test."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_client() -> MagicMock:
    """A GitHubClient double whose API methods are AsyncMocks."""
    client = MagicMock(spec=GitHubClient)
    client.get_repository = AsyncMock()
    client.list_branches = AsyncMock()
    client.compare_branches = AsyncMock()
    client.delete_repository = AsyncMock(return_value=True)
    return client
