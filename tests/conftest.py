"""Root conftest — shared test infrastructure.

Provides:
- anyio backend selection (asyncio only)
- Autouse cache reset so installation tokens / viewers never leak between tests
- A mocked shared GitHub HTTP client
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from app.services.github.cache import clear_all_caches


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_github_caches():
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def mock_github_client():
    """Patch the shared GitHub client used by read operations and app auth."""
    client = AsyncMock()
    with (
        patch("app.services.github.read_operations.get_github_client", return_value=client),
        patch("app.services.github.app_auth.get_github_client", return_value=client),
    ):
        yield client
