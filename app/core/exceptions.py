from typing import Any

from fastapi import HTTPException, status


class APIError(HTTPException):
    """HTTP error with a machine-readable code.

    ``detail`` is a dict rendered verbatim as the JSON response body, so every
    failure the client sees has the same shape: {"error", "code", ...}.
    """

    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "API_ERROR"
    error: str = "Request failed"

    def __init__(
        self,
        message: str | None = None,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ):
        detail: dict[str, Any] = {"error": self.error, "code": self.code}
        if message:
            detail["message"] = message
        detail.update({k: v for k, v in extra.items() if v is not None})
        super().__init__(status_code=self.status_code_default, detail=detail, headers=headers)


class NotAuthenticatedError(APIError):
    """No credential material at all."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"
    error = "Unauthorized"


class GitHubAuthRequiredError(APIError):
    """Credential material is present but unusable, or GitHub rejected it."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code = "GITHUB_AUTH_ERROR"
    error = "GitHub authentication required. Please sign in again."


class MissingGitHubTokenError(APIError):
    """The operation needs a user OAuth token, not just an installation."""

    status_code_default = status.HTTP_403_FORBIDDEN
    code = "MISSING_GITHUB_TOKEN"
    error = "GitHub user token required"


class InvalidGitHubTokenError(APIError):
    """GitHub rejected the OAuth token; the client should sign out."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_GITHUB_TOKEN"
    error = "GitHub token is invalid or expired"

    def __init__(self, message: str | None = None):
        super().__init__(message, signOutRequired=True)


class InstallationForbiddenError(APIError):
    """The user token cannot see a requested App installation."""

    status_code_default = status.HTTP_403_FORBIDDEN
    code = "INSTALLATION_NOT_ACCESSIBLE"
    error = "GitHub App installation not accessible"


class GitHubAppConfigurationError(APIError):
    status_code_default = status.HTTP_403_FORBIDDEN
    code = "GITHUB_APP_CONFIG_ERROR"
    error = "GitHub App is not configured"


class RepositoryFetchFailedError(APIError):
    code = "GITHUB_REPO_ERROR"
    error = "Failed to fetch repositories"


class CommitFetchFailedError(APIError):
    code = "GITHUB_COMMIT_ERROR"
    error = "Failed to fetch commits"


class SummaryFailedError(APIError):
    code = "SUMMARY_ERROR"
    error = "Failed to generate summary"


class ServerConfigError(APIError):
    code = "SERVER_CONFIG_ERROR"
    error = "Server configuration error"


class ValidationError(APIError):
    """Raised when request validation fails."""

    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "INVALID_REQUEST"
    error = "Invalid request"

    def __init__(self, message: str, code: str | None = None):
        if code:
            self.code = code
        super().__init__(message)


class ClientDisconnectedError(Exception):
    """The client went away before the response was ready."""
