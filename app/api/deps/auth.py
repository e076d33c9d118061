"""GitHub credential and identity dependencies.

This module provides:
- Credential extraction (Bearer OAuth token, installation ids from header or cookie)
- Viewer resolution (the OAuth principal, cached per token)
- Access resolution (verified installations preferred over the OAuth token)
"""

import logging
from typing import Annotated

import httpx
from fastapi import Cookie, Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.errors import raise_for_github_error
from app.core.exceptions import (
    APIError,
    GitHubAuthRequiredError,
    InvalidGitHubTokenError,
    MissingGitHubTokenError,
    NotAuthenticatedError,
    ValidationError,
)
from app.services.activity.types import Viewer
from app.services.github import (
    Credential,
    GitHubAccess,
    GitHubAPIError,
    GitHubAppConfigError,
    GitHubInstallationAccessError,
    GitHubReadOperations,
    build_credential,
    oauth_token_of,
    resolve_access,
)
from app.services.github.cache import get_or_fetch, make_cache_key, viewer_cache

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

INSTALLATION_HEADER = "X-GitHub-Installation-Id"
INSTALLATION_COOKIE = "github_installation_id"


def _parse_installation_ids(raw: str | None) -> list[int]:
    """Parse a comma-separated list of installation ids."""
    if raw is None:
        return []

    installation_ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            installation_id = int(part)
        except ValueError:
            raise ValidationError(
                f"Installation id must be numeric, got {part!r}", code="INVALID_INSTALLATION_ID"
            ) from None
        if installation_id <= 0:
            raise ValidationError(
                f"Installation id must be positive, got {installation_id}",
                code="INVALID_INSTALLATION_ID",
            )
        installation_ids.append(installation_id)
    return installation_ids


async def get_credential(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    installation_header: Annotated[str | None, Header(alias=INSTALLATION_HEADER)] = None,
    installation_cookie: Annotated[str | None, Cookie(alias=INSTALLATION_COOKIE)] = None,
) -> Credential:
    """
    Build the request's GitHub credential.

    Installation ids are only honoured alongside a user token; the token is
    what proves the caller may use them.

    Raises:
        NotAuthenticatedError: No credential material at all (401)
        GitHubAuthRequiredError: An Authorization header that isn't a usable
            Bearer token (401)
        MissingGitHubTokenError: Installation ids without a user token (403)
    """
    token = credentials.credentials.strip() if credentials else None
    installation_ids = _parse_installation_ids(installation_header or installation_cookie)

    if request.headers.get("authorization") and not token:
        # Something was sent, just not something we can use
        raise GitHubAuthRequiredError()

    if installation_ids and not token:
        logger.info(f"Installation id(s) {installation_ids} sent without a GitHub user token")
        raise MissingGitHubTokenError("Using a GitHub App installation requires signing in with GitHub")

    credential = build_credential(token or None, installation_ids)
    if credential is None:
        raise NotAuthenticatedError()
    return credential


async def _fetch_viewer(token: str) -> Viewer:
    user = await GitHubReadOperations(token).get_authenticated_user()
    return Viewer(login=user.login, name=user.name, avatar_url=user.avatar_url)


async def get_viewer(credential: Credential = Depends(get_credential)) -> Viewer:
    """
    Resolve the GitHub user behind the credential's OAuth token.

    Installation-only credentials yield an anonymous Viewer. The lookup also
    validates the token: a token GitHub rejects means the client must sign out.
    """
    token = oauth_token_of(credential)
    if token is None:
        return Viewer()

    try:
        return await get_or_fetch(
            viewer_cache,
            make_cache_key("viewer", token),
            lambda: _fetch_viewer(token),
            label="viewer",
        )
    except GitHubAPIError as e:
        if e.is_auth_error:
            logger.info("GitHub rejected OAuth token during viewer lookup")
            raise InvalidGitHubTokenError(e.message) from e
        raise_for_github_error(e, APIError)
    except httpx.HTTPError as e:
        logger.error(f"GitHub unreachable during viewer lookup: {e!r}")
        raise GitHubAuthRequiredError(f"Could not verify GitHub token: {e}") from e


async def get_github_access(credential: Credential = Depends(get_credential)) -> GitHubAccess:
    """Resolve the clients backing repository access (installations preferred)."""
    try:
        return await resolve_access(credential)
    except (GitHubAppConfigError, GitHubInstallationAccessError, GitHubAPIError, httpx.HTTPError) as e:
        raise_for_github_error(e, GitHubAuthRequiredError)


CurrentCredential = Annotated[Credential, Depends(get_credential)]
CurrentViewer = Annotated[Viewer, Depends(get_viewer)]
CurrentAccess = Annotated[GitHubAccess, Depends(get_github_access)]
