"""Translate service-layer failures into API errors.

Services raise plain exceptions that carry upstream detail; routes call these
helpers at the request boundary so every failure reaches the client as a
structured body with a machine-readable code.
"""

import logging
from typing import NoReturn

import anthropic
import httpx

from app.core.exceptions import (
    APIError,
    CommitFetchFailedError,
    GitHubAppConfigurationError,
    GitHubAuthRequiredError,
    InstallationForbiddenError,
    MissingGitHubTokenError,
    RepositoryFetchFailedError,
    ServerConfigError,
    SummaryFailedError,
)
from app.services.activity.exceptions import (
    ActivityError,
    CommitFetchError,
    RepositoryDiscoveryError,
    ViewerRequiredError,
)
from app.services.github import GitHubAPIError, GitHubAppConfigError, GitHubInstallationAccessError
from app.services.interpreter import InterpreterError, InterpreterNotConfiguredError

logger = logging.getLogger(__name__)


def raise_for_github_error(exc: Exception, fallback: type[APIError]) -> NoReturn:
    """
    Raise the API error matching a GitHub-side failure.

    An upstream 401 always asks the client to re-authenticate; rate limits
    pass the reset time through; anything else becomes ``fallback``.
    """
    if isinstance(exc, GitHubAppConfigError):
        logger.error(f"GitHub App misconfigured: {exc}")
        raise GitHubAppConfigurationError(str(exc)) from exc

    if isinstance(exc, GitHubInstallationAccessError):
        raise InstallationForbiddenError(str(exc), installationIds=exc.installation_ids) from exc

    if isinstance(exc, GitHubAPIError):
        if exc.is_auth_error:
            raise GitHubAuthRequiredError(exc.message) from exc
        raise fallback(
            exc.message,
            upstreamStatus=exc.status_code,
            rateLimitReset=exc.rate_limit_reset,
        ) from exc

    if isinstance(exc, httpx.HTTPError):
        raise fallback(f"GitHub request failed: {exc}") from exc

    raise fallback(str(exc)) from exc


def raise_for_activity_error(exc: ActivityError) -> NoReturn:
    """Raise the API error for an activity pipeline failure."""
    if isinstance(exc, ViewerRequiredError):
        raise MissingGitHubTokenError(exc.message) from exc

    if isinstance(exc, RepositoryDiscoveryError):
        fallback: type[APIError] = RepositoryFetchFailedError
    elif isinstance(exc, CommitFetchError):
        fallback = CommitFetchFailedError
    else:
        fallback = APIError

    if exc.cause is not None:
        raise_for_github_error(exc.cause, fallback)
    raise fallback(exc.message) from exc


def raise_for_summary_error(exc: Exception) -> NoReturn:
    """Raise the API error for a failed single-summary request."""
    if isinstance(exc, InterpreterNotConfiguredError):
        logger.error(f"Summary requested but summarizer is not configured: {exc}")
        raise ServerConfigError(str(exc)) from exc

    if isinstance(exc, (InterpreterError, anthropic.APIError)):
        logger.error(f"Summary generation failed: {exc}")
        raise SummaryFailedError(str(exc)) from exc

    raise exc
