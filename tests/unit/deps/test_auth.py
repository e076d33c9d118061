"""Unit tests for auth dependencies: credential extraction, viewer and access resolution."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from app.api.deps.auth import get_credential, get_github_access, get_viewer
from app.core.exceptions import (
    APIError,
    GitHubAppConfigurationError,
    GitHubAuthRequiredError,
    InstallationForbiddenError,
    InvalidGitHubTokenError,
    MissingGitHubTokenError,
    NotAuthenticatedError,
    ValidationError,
)
from app.services.activity.types import Viewer
from app.services.github import (
    GitHubAPIError,
    GitHubAppConfigError,
    GitHubInstallationAccessError,
    GitHubUser,
    Installation,
    OAuthAndInstallation,
    OAuthToken,
)


def _request(authorization: str | None = None) -> MagicMock:
    request = MagicMock()
    request.headers = {"authorization": authorization} if authorization else {}
    return request


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


# ---------------------------------------------------------------------------
# get_credential
# ---------------------------------------------------------------------------


@pytest.mark.anyio
class TestGetCredential:
    async def test_bearer_token(self):
        credential = await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), None, None)

        assert credential == OAuthToken("gho_x")

    async def test_token_with_installation_header(self):
        credential = await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), "42", None)

        assert credential == OAuthAndInstallation(token="gho_x", installation_ids=(42,))

    async def test_token_with_installation_cookie(self):
        credential = await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), None, "7")

        assert credential == OAuthAndInstallation(token="gho_x", installation_ids=(7,))

    async def test_header_wins_over_cookie(self):
        credential = await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), "42", "7")

        assert credential == OAuthAndInstallation(token="gho_x", installation_ids=(42,))

    async def test_several_installations(self):
        credential = await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), "42, 43,", None)

        assert credential == OAuthAndInstallation(token="gho_x", installation_ids=(42, 43))

    @pytest.mark.parametrize(("header", "cookie"), [("42", None), (None, "7")])
    async def test_installation_without_token_is_forbidden(self, header, cookie):
        with pytest.raises(MissingGitHubTokenError) as exc_info:
            await get_credential(_request(), None, header, cookie)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "MISSING_GITHUB_TOKEN"

    async def test_nothing_is_not_authenticated(self):
        with pytest.raises(NotAuthenticatedError) as exc_info:
            await get_credential(_request(), None, None, None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["code"] == "NOT_AUTHENTICATED"

    @pytest.mark.parametrize("installation", [None, "42"])
    async def test_unusable_authorization_header(self, installation):
        with pytest.raises(GitHubAuthRequiredError) as exc_info:
            await get_credential(_request("Basic dXNlcjpwYXNz"), None, installation, None)

        assert exc_info.value.detail["code"] == "GITHUB_AUTH_ERROR"

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", "42,x"])
    async def test_invalid_installation_id(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            await get_credential(_request("Bearer gho_x"), _bearer("gho_x"), raw, None)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail["code"] == "INVALID_INSTALLATION_ID"


# ---------------------------------------------------------------------------
# get_viewer
# ---------------------------------------------------------------------------


@pytest.mark.anyio
class TestGetViewer:
    async def test_installation_only_is_anonymous(self, mock_github_client):
        viewer = await get_viewer(Installation((42,)))

        assert viewer == Viewer()
        assert viewer.is_known is False
        mock_github_client.get.assert_not_awaited()

    async def test_resolves_and_caches(self):
        user = GitHubUser(login="octocat", name="The Octocat", avatar_url="https://a/o")
        with patch("app.api.deps.auth.GitHubReadOperations") as MockOps:
            MockOps.return_value.get_authenticated_user = AsyncMock(return_value=user)

            first = await get_viewer(OAuthToken("gho_x"))
            second = await get_viewer(OAuthAndInstallation(token="gho_x", installation_ids=(1,)))

        assert first == second == Viewer(login="octocat", name="The Octocat", avatar_url="https://a/o")
        MockOps.return_value.get_authenticated_user.assert_awaited_once()

    async def test_rejected_token_requires_sign_out(self):
        with patch("app.api.deps.auth.GitHubReadOperations") as MockOps:
            MockOps.return_value.get_authenticated_user = AsyncMock(
                side_effect=GitHubAPIError("Invalid or expired GitHub token", 401)
            )

            with pytest.raises(InvalidGitHubTokenError) as exc_info:
                await get_viewer(OAuthToken("gho_revoked"))

        assert exc_info.value.detail["code"] == "INVALID_GITHUB_TOKEN"
        assert exc_info.value.detail["signOutRequired"] is True

    async def test_rate_limit_is_not_a_sign_out(self):
        with patch("app.api.deps.auth.GitHubReadOperations") as MockOps:
            MockOps.return_value.get_authenticated_user = AsyncMock(
                side_effect=GitHubAPIError("GitHub API rate limit exceeded", 403, rate_limit_reset=1700000000)
            )

            with pytest.raises(APIError) as exc_info:
                await get_viewer(OAuthToken("gho_x"))

        assert not isinstance(exc_info.value, InvalidGitHubTokenError)
        assert exc_info.value.detail["rateLimitReset"] == 1700000000

    async def test_network_failure(self):
        with patch("app.api.deps.auth.GitHubReadOperations") as MockOps:
            MockOps.return_value.get_authenticated_user = AsyncMock(side_effect=httpx.ConnectError("down"))

            with pytest.raises(GitHubAuthRequiredError):
                await get_viewer(OAuthToken("gho_x"))


# ---------------------------------------------------------------------------
# get_github_access
# ---------------------------------------------------------------------------


@pytest.mark.anyio
class TestGetGitHubAccess:
    async def test_app_not_configured(self):
        with patch(
            "app.api.deps.auth.resolve_access",
            AsyncMock(side_effect=GitHubAppConfigError("GitHub App is not configured")),
        ):
            with pytest.raises(GitHubAppConfigurationError) as exc_info:
                await get_github_access(OAuthAndInstallation(token="gho_x", installation_ids=(42,)))

        assert exc_info.value.status_code == 403

    async def test_unknown_installation(self):
        with patch(
            "app.api.deps.auth.resolve_access",
            AsyncMock(side_effect=GitHubAPIError("GitHub resource not found: installation 42", 404)),
        ):
            with pytest.raises(GitHubAuthRequiredError) as exc_info:
                await get_github_access(OAuthAndInstallation(token="gho_x", installation_ids=(42,)))

        assert exc_info.value.detail["upstreamStatus"] == 404

    async def test_foreign_installation_is_forbidden(self):
        with patch(
            "app.api.deps.auth.resolve_access",
            AsyncMock(side_effect=GitHubInstallationAccessError([424242])),
        ):
            with pytest.raises(InstallationForbiddenError) as exc_info:
                await get_github_access(OAuthAndInstallation(token="gho_x", installation_ids=(424242,)))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "INSTALLATION_NOT_ACCESSIBLE"
        assert exc_info.value.detail["installationIds"] == [424242]
