"""
GitHub API helper utilities.

Provides rate limit handling and error response processing for GitHub API calls.
"""

import logging

import httpx

from app.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)

# Warn when fewer calls than this remain in the current window
LOW_RATE_LIMIT_THRESHOLD = 100


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def handle_error_response(
    response: httpx.Response,
    resource: str,
    expected_status: int = 200,
) -> None:
    """
    Handle common error responses from GitHub API.

    Args:
        response: The HTTP response from GitHub API
        resource: Resource description for error context (e.g. "acme/api commits")
        expected_status: Status code that counts as success

    Raises:
        GitHubAPIError: For authentication, authorization, rate limit or other API errors
    """
    if response.status_code == expected_status:
        return

    rate_info = RateLimitInfo(response)

    if response.status_code == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    elif response.status_code == 404:
        raise GitHubAPIError(f"Resource not found: {resource}", 404)
    elif response.status_code in (403, 429):
        if rate_info.is_exhausted or response.status_code == 429:
            raise GitHubAPIError(
                "GitHub API rate limit exceeded",
                response.status_code,
                rate_limit_reset=rate_info.reset_timestamp,
            )
        raise GitHubAPIError(f"GitHub API forbidden: {resource}", 403)
    elif response.status_code == 409:
        # GitHub answers 409 for commit listings on empty repositories
        raise GitHubAPIError(f"Repository is empty: {resource}", 409)
    else:
        raise GitHubAPIError(
            f"GitHub API error: {response.status_code} ({resource})", response.status_code
        )


def log_rate_limit_status(remaining: int, limit: int, reset: int | None) -> None:
    """Log the current rate limit budget, warning when it runs low."""
    if remaining < LOW_RATE_LIMIT_THRESHOLD:
        logger.warning(
            f"GitHub API rate limit running low: {remaining}/{limit} remaining "
            f"(resets at {reset})"
        )
    else:
        logger.debug(f"GitHub API rate limit: {remaining}/{limit} remaining")
