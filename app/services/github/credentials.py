"""
GitHub credentials.

A request carries an OAuth token, one or more GitHub App installation ids, or
both. These are alternative authorization contexts for the same logical view:
repository and commit access prefers the installations, while identity
(/user) and installation listings need the OAuth token.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class AuthMode(str, Enum):
    """Which token exchange path backs repository access."""

    OAUTH = "oauth"
    GITHUB_APP = "github_app"


@dataclass(frozen=True)
class OAuthToken:
    token: str


@dataclass(frozen=True)
class Installation:
    installation_ids: tuple[int, ...]


@dataclass(frozen=True)
class OAuthAndInstallation:
    token: str
    installation_ids: tuple[int, ...]


Credential = OAuthToken | Installation | OAuthAndInstallation


def build_credential(token: str | None, installation_ids: Iterable[int] = ()) -> Credential | None:
    """Combine whatever credential material a request carried; None if nothing."""
    ids = tuple(dict.fromkeys(installation_ids))
    if token and ids:
        return OAuthAndInstallation(token=token, installation_ids=ids)
    if token:
        return OAuthToken(token=token)
    if ids:
        return Installation(installation_ids=ids)
    return None


def oauth_token_of(credential: Credential) -> str | None:
    if isinstance(credential, (OAuthToken, OAuthAndInstallation)):
        return credential.token
    return None


def installation_ids_of(credential: Credential) -> tuple[int, ...]:
    if isinstance(credential, (Installation, OAuthAndInstallation)):
        return credential.installation_ids
    return ()
