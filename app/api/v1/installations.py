"""GitHub App installations endpoint.

Lists the signed-in user's installations of this GitHub App so the client
can pick some (and send their ids as X-GitHub-Installation-Id afterwards).
"""

import logging

import httpx
from fastapi import APIRouter

from app.api.deps import CurrentCredential
from app.api.errors import raise_for_github_error
from app.config.settings import settings
from app.core.exceptions import APIError, MissingGitHubTokenError
from app.schemas.activity import InstallationOut, InstallationsResponse
from app.services.github import GitHubAPIError, get_user_app_installations, oauth_token_of

logger = logging.getLogger(__name__)

router = APIRouter(tags=["installations"])


def _install_url() -> str | None:
    if not settings.github_app_slug:
        return None
    return f"https://github.com/apps/{settings.github_app_slug}/installations/new"


@router.get(
    "/installations",
    response_model=InstallationsResponse,
    response_model_exclude_none=True,
)
async def list_installations(credential: CurrentCredential) -> dict:
    """List the caller's installations of this GitHub App."""
    token = oauth_token_of(credential)
    if token is None:
        raise MissingGitHubTokenError("Listing installations requires a GitHub user token")

    try:
        installations = await get_user_app_installations(token)
    except (GitHubAPIError, httpx.HTTPError) as e:
        raise_for_github_error(e, APIError)

    logger.info(f"Found {len(installations)} installations of this app")

    return InstallationsResponse(
        installations=[InstallationOut.from_installation(i) for i in installations],
        install_url=_install_url(),
    ).to_payload()
