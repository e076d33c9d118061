"""
GitHub service package.

Re-exports public types and classes.
Usage: `from app.services.github import GitHubReadOperations, GitHubCommit`

Module structure:
- read_operations.py: Paginated read-only API operations
- app_auth.py: GitHub App JWT / installation token exchange, access resolution
- credentials.py: Credential tagged union (OAuth token / installation / both)
- helpers.py: Rate limit handling and error utilities
- cache.py: TTL caches for installation tokens and viewer identity
- types.py: Data types
- exceptions.py: Custom exceptions
"""

from app.services.github.app_auth import (
    GitHubAccess,
    InstallationAccess,
    create_app_jwt,
    get_installation_token,
    get_user_app_installations,
    is_app_installation,
    resolve_access,
    verify_installations,
)
from app.services.github.cache import clear_all_caches as clear_github_caches
from app.services.github.cache import get_cache_stats as get_github_cache_stats
from app.services.github.credentials import (
    AuthMode,
    Credential,
    Installation,
    OAuthAndInstallation,
    OAuthToken,
    build_credential,
    installation_ids_of,
    oauth_token_of,
)
from app.services.github.exceptions import (
    GitHubAPIError,
    GitHubAppConfigError,
    GitHubInstallationAccessError,
)
from app.services.github.helpers import RateLimitInfo, handle_error_response
from app.services.github.http_client import close_github_client
from app.services.github.read_operations import GitHubReadOperations
from app.services.github.types import (
    GitHubCommit,
    GitHubInstallation,
    GitHubRepo,
    GitHubUser,
    RateLimitStatus,
)

__all__ = [
    # Operations
    "GitHubReadOperations",
    # Access resolution
    "GitHubAccess",
    "InstallationAccess",
    "create_app_jwt",
    "get_installation_token",
    "get_user_app_installations",
    "is_app_installation",
    "resolve_access",
    "verify_installations",
    # Credentials
    "AuthMode",
    "Credential",
    "Installation",
    "OAuthAndInstallation",
    "OAuthToken",
    "build_credential",
    "installation_ids_of",
    "oauth_token_of",
    # HTTP client lifecycle
    "close_github_client",
    # Cache management
    "clear_github_caches",
    "get_github_cache_stats",
    # Utilities
    "handle_error_response",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
    "GitHubAppConfigError",
    "GitHubInstallationAccessError",
    # Types
    "GitHubCommit",
    "GitHubInstallation",
    "GitHubRepo",
    "GitHubUser",
    "RateLimitStatus",
]
