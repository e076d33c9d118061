"""API test fixtures: an app client wired to a fake GitHub.

Dependency overrides replace credential resolution, the viewer lookup and
the summarizer; the real aggregation pipeline runs on top of a mocked
GitHubReadOperations so routes are exercised end to end.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_github_access, get_summarizer, get_viewer
from app.main import app
from app.schemas.commit_summary import CommitSummary
from app.services.activity.types import Viewer
from app.services.github import AuthMode, GitHubAccess, GitHubReadOperations, RateLimitStatus
from app.services.interpreter import CommitSummarizer
from tests.helpers.factories import make_commits, make_repo

OCTOCAT = Viewer(login="octocat", name="The Octocat", avatar_url="https://avatars.example/octocat")


@pytest.fixture
def repo_commits() -> dict:
    """Commits per repository served by the fake GitHub; tests may replace entries."""
    return {
        "acme/api": make_commits(3, "acme/api"),
        "acme/web": make_commits(2, "acme/web"),
    }


@pytest.fixture
def github(repo_commits) -> AsyncMock:
    mock = AsyncMock(spec=GitHubReadOperations)
    mock.get_rate_limit.return_value = RateLimitStatus(limit=5000, remaining=4800, reset=1700000000)

    async def list_user_repos(affiliation):
        return [make_repo(name) for name in repo_commits] if affiliation == "owner" else []

    async def list_commits(full_name, since, until, author=None):
        commits = repo_commits.get(full_name, [])
        if author:
            commits = [c for c in commits if author in (c.author_login, c.author_name)]
        return commits

    mock.list_user_repos.side_effect = list_user_repos
    mock.list_user_orgs.return_value = []
    mock.list_org_repos.return_value = []
    mock.list_commits.side_effect = list_commits
    return mock


@pytest.fixture
def summarizer() -> AsyncMock:
    mock = AsyncMock(spec=CommitSummarizer)
    mock.summarize.return_value = CommitSummary(
        key_themes=["Authentication"],
        overall_summary="The team shipped OAuth login.",
    )
    return mock


@pytest.fixture
def viewer() -> Viewer:
    return OCTOCAT


@pytest.fixture
async def api_client(github, summarizer, viewer):
    """Client with GitHub access, viewer and summarizer overridden."""
    app.dependency_overrides[get_github_access] = lambda: GitHubAccess(github=github, mode=AuthMode.OAUTH)
    app.dependency_overrides[get_viewer] = lambda: viewer
    app.dependency_overrides[get_summarizer] = lambda: summarizer

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def raw_client():
    """Client with no overrides: real credential extraction."""
    app.dependency_overrides.clear()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
