"""
GitHub App authentication.

Exchanges an installation id for a short-lived installation access token:
sign an App JWT (RS256) with the App's private key, then POST it to
/app/installations/{id}/access_tokens. Tokens are cached for 50 minutes.

Installation ids arriving with a user token are checked against that user's
installations of this App before any token is minted.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from jose import jwt

from app.config.settings import settings
from app.services.github.cache import (
    get_or_fetch,
    installation_token_cache,
    make_cache_key,
    user_installations_cache,
)
from app.services.github.credentials import (
    AuthMode,
    Credential,
    installation_ids_of,
    oauth_token_of,
)
from app.services.github.exceptions import GitHubAppConfigError, GitHubInstallationAccessError
from app.services.github.helpers import handle_error_response
from app.services.github.http_client import get_github_client
from app.services.github.read_operations import GitHubReadOperations
from app.services.github.types import GitHubInstallation

logger = logging.getLogger(__name__)

# GitHub rejects App JWTs valid for more than 10 minutes; backdate for clock drift
JWT_BACKDATE_SECONDS = 60
JWT_LIFETIME_SECONDS = 540


def _load_private_key(raw: str) -> str:
    # Keys stored in single-line env vars carry literal "\n" sequences
    return raw.replace("\\n", "\n")


def _require_app_config() -> None:
    if not settings.github_app_enabled:
        raise GitHubAppConfigError(
            "GitHub App is not configured (GITHUB_APP_ID / GITHUB_APP_PRIVATE_KEY missing)"
        )


def create_app_jwt(app_id: str, private_key: str, now: int | None = None) -> str:
    """
    Sign a GitHub App JWT.

    Args:
        app_id: GitHub App id (the JWT issuer)
        private_key: PEM-encoded RSA private key
        now: Current unix time (injectable for tests)

    Returns:
        Encoded JWT valid for about nine minutes
    """
    issued_at = int(time.time()) if now is None else now
    claims = {
        "iat": issued_at - JWT_BACKDATE_SECONDS,
        "exp": issued_at + JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(claims, _load_private_key(private_key), algorithm="RS256")


async def _request_installation_token(installation_id: int) -> str:
    _require_app_config()

    try:
        app_jwt = create_app_jwt(settings.github_app_id, settings.github_app_private_key)
    except Exception as e:
        # jose raises JWKError / JWSError for malformed keys
        raise GitHubAppConfigError(f"GitHub App private key is unusable: {e}") from e

    client = get_github_client()
    response = await client.post(
        f"/app/installations/{installation_id}/access_tokens",
        headers={"Authorization": f"Bearer {app_jwt}"},
    )
    handle_error_response(response, f"installation {installation_id}", expected_status=201)

    logger.info(f"Issued installation access token for installation {installation_id}")
    token: str = response.json()["token"]
    return token


async def get_installation_token(installation_id: int) -> str:
    """Get a (cached) installation access token for the installation."""
    return await get_or_fetch(
        installation_token_cache,
        make_cache_key("installation", installation_id),
        lambda: _request_installation_token(installation_id),
        label=f"installation token {installation_id}",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Installation checks
# ─────────────────────────────────────────────────────────────────────────────


def is_app_installation(installation: GitHubInstallation) -> bool:
    """True when the installation belongs to this server's GitHub App."""
    if settings.github_app_slug and installation.app_slug == settings.github_app_slug:
        return True
    if settings.github_app_id and str(installation.app_id) == settings.github_app_id:
        return True
    # Without App configuration there is nothing to filter on
    return not (settings.github_app_slug or settings.github_app_id)


async def _fetch_user_app_installations(token: str) -> list[GitHubInstallation]:
    installations = await GitHubReadOperations(token).list_user_installations()
    return [i for i in installations if is_app_installation(i)]


async def get_user_app_installations(token: str) -> list[GitHubInstallation]:
    """This App's installations visible to a user token (cached 5 minutes)."""
    return await get_or_fetch(
        user_installations_cache,
        make_cache_key("user-installations", token),
        lambda: _fetch_user_app_installations(token),
        label="user installations",
    )


async def verify_installations(
    token: str,
    installation_ids: tuple[int, ...],
) -> dict[int, GitHubInstallation]:
    """
    Check that every requested installation is visible to the user token.

    Returns:
        The matching installations keyed by id

    Raises:
        GitHubInstallationAccessError: If any id is not among the user's installations
        GitHubAPIError: If GitHub rejects the user token or the listing fails
    """
    available = {i.installation_id: i for i in await get_user_app_installations(token)}
    denied = [i for i in installation_ids if i not in available]
    if denied:
        logger.warning(
            f"Rejected installation id(s) {denied}; user can access {sorted(available)}"
        )
        raise GitHubInstallationAccessError(denied)
    return {i: available[i] for i in installation_ids}


# ─────────────────────────────────────────────────────────────────────────────
# Access resolution
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class InstallationAccess:
    """One installation's token-bound client and the account it covers."""

    installation_id: int
    github: GitHubReadOperations
    account_login: str | None = None


@dataclass
class GitHubAccess:
    """Resolved repository access for a credential.

    ``github`` is the primary client: the first installation's in App mode,
    the OAuth client otherwise. ``oauth`` is kept alongside installations so
    repositories outside every installed account stay reachable.
    """

    github: GitHubReadOperations
    mode: AuthMode
    installations: list[InstallationAccess] = field(default_factory=list)
    oauth: GitHubReadOperations | None = None

    def client_for(self, full_name: str) -> GitHubReadOperations:
        """Pick the client for a repository: its owner's installation, else OAuth."""
        owner = full_name.split("/", 1)[0].lower()
        for installation in self.installations:
            if installation.account_login and installation.account_login.lower() == owner:
                return installation.github
        return self.oauth or self.github


async def resolve_access(credential: Credential) -> GitHubAccess:
    """
    Build the clients that back repository and commit access.

    Installations are preferred whenever the credential carries any. With a
    user token they are first checked against the user's installations;
    installation-only credentials come from in-process callers and are used
    as given.

    Raises:
        GitHubAppConfigError: Installations requested but the App is not configured
        GitHubInstallationAccessError: A requested installation is not the user's
        GitHubAPIError: Upstream failure while checking or minting tokens
    """
    installation_ids = installation_ids_of(credential)
    oauth_token = oauth_token_of(credential)
    oauth = GitHubReadOperations(oauth_token) if oauth_token else None

    if not installation_ids:
        if oauth is None:
            # Unreachable for a well-formed Credential
            raise ValueError("Credential carries neither an OAuth token nor an installation id")
        return GitHubAccess(github=oauth, mode=AuthMode.OAUTH)

    _require_app_config()

    accounts: dict[int, str | None] = dict.fromkeys(installation_ids)
    if oauth_token:
        verified = await verify_installations(oauth_token, installation_ids)
        accounts = {i: verified[i].account_login for i in installation_ids}

    tokens = await asyncio.gather(*(get_installation_token(i) for i in installation_ids))
    installations = [
        InstallationAccess(installation_id=i, github=GitHubReadOperations(token), account_login=accounts[i])
        for i, token in zip(installation_ids, tokens, strict=True)
    ]
    logger.debug(f"Resolved access through installations {list(installation_ids)}")
    return GitHubAccess(
        github=installations[0].github,
        mode=AuthMode.GITHUB_APP,
        installations=installations,
        oauth=oauth,
    )
