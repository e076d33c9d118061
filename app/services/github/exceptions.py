"""Exceptions for GitHub service."""


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)

    @property
    def is_auth_error(self) -> bool:
        """True when GitHub rejected the credential itself."""
        return self.status_code == 401

    @property
    def is_rate_limited(self) -> bool:
        return self.rate_limit_reset is not None


class GitHubAppConfigError(Exception):
    """GitHub App credentials are missing or unusable.

    Raised when an installation id is supplied but the server has no App id /
    private key to mint an installation access token with.
    """


class GitHubInstallationAccessError(Exception):
    """Requested installations are not visible to the signed-in user."""

    def __init__(self, installation_ids: list[int]):
        self.installation_ids = installation_ids
        ids = ", ".join(str(i) for i in installation_ids)
        super().__init__(f"Installation(s) {ids} are not available to the signed-in GitHub user")
