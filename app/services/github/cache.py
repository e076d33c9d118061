"""
TTL caching for GitHub credentials and identity.

Small in-memory caches keep per-request overhead down:
- Installation tokens: 50 minutes (GitHub issues them for 60)
- Viewer identity: 5 minutes (one /user call per token, not per request)
- A user token's App installations: 5 minutes (installation id checks)

Keys derived from secrets are hashed so raw tokens never sit in cache keys.
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

T = TypeVar("T")

_installation_token_cache: TTLCache[str, Any] = TTLCache(maxsize=256, ttl=3000)  # 50 min
_viewer_cache: TTLCache[str, Any] = TTLCache(maxsize=1024, ttl=300)  # 5 min
_user_installations_cache: TTLCache[str, Any] = TTLCache(maxsize=1024, ttl=300)  # 5 min


def make_cache_key(namespace: str, value: str | int) -> str:
    """Build an opaque cache key from a namespace and a (possibly secret) value."""
    return hashlib.md5(f"{namespace}:{value}".encode()).hexdigest()


async def get_or_fetch(
    cache: TTLCache[str, Any],
    key: str,
    fetch: Callable[[], Awaitable[T]],
    label: str,
) -> T:
    """
    Return the cached value for key, or await fetch() and store its result.

    Failures are not cached; the next caller retries the fetch.
    """
    if key in cache:
        logger.debug(f"Cache HIT: {label}")
        cached_result: T = cache[key]
        return cached_result

    logger.debug(f"Cache MISS: {label}")
    result = await fetch()
    cache[key] = result
    return result


def clear_all_caches() -> None:
    """Clear all GitHub caches. Useful for testing or after credential revocation."""
    _installation_token_cache.clear()
    _viewer_cache.clear()
    _user_installations_cache.clear()
    logger.debug("Cleared all GitHub caches")


def get_cache_stats() -> dict[str, dict[str, int]]:
    """Get current cache statistics for monitoring."""
    return {
        "installation_tokens": {
            "size": len(_installation_token_cache),
            "maxsize": _installation_token_cache.maxsize,
        },
        "viewers": {"size": len(_viewer_cache), "maxsize": _viewer_cache.maxsize},
        "user_installations": {
            "size": len(_user_installations_cache),
            "maxsize": _user_installations_cache.maxsize,
        },
    }


installation_token_cache = _installation_token_cache
viewer_cache = _viewer_cache
user_installations_cache = _user_installations_cache
