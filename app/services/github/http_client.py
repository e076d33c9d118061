"""
Shared HTTP client for GitHub API operations.

One pooled AsyncClient serves every GitHub call in the process: repository
discovery, commit listings, identity lookups and installation token exchange.
Tokens differ per request, so only the API-wide headers live on the client.
"""

import logging

import httpx

from app.config.settings import settings

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"

DEFAULT_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": API_VERSION,
    "User-Agent": "commit-digest",
}

_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """
    Get or create the shared HTTP client for GitHub API calls.

    Relative paths resolve against ``settings.github_api_url``; absolute URLs
    (Link header continuations) are used as-is. Redirects are followed so
    renamed or transferred repositories keep resolving.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            base_url=settings.github_api_url,
            headers=DEFAULT_HEADERS,
            timeout=httpx.Timeout(30.0, connect=5.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            http2=True,
            follow_redirects=True,
        )
        logger.debug(f"Created GitHub HTTP client for {settings.github_api_url}")
    return _client


async def close_github_client() -> None:
    """Close the shared HTTP client. Called from the app lifespan on shutdown."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.debug("Closed GitHub HTTP client")
