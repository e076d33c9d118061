"""Data types for GitHub API responses."""

from dataclasses import dataclass


@dataclass
class GitHubRepo:
    """Normalized GitHub repository data.

    ``full_name`` ("owner/name", exactly as GitHub returns it) is the identity
    used for deduplication and filtering.
    """

    github_id: int
    name: str
    full_name: str
    owner_login: str
    is_private: bool
    language: str | None
    updated_at: str
    url: str
    description: str | None = None


@dataclass
class GitHubCommit:
    """A commit decorated with the repository it was listed from."""

    sha: str
    message: str
    author_name: str
    author_email: str | None
    author_login: str | None  # Absent when the commit email maps to no GitHub account
    date: str  # ISO 8601
    repository: str  # Owning repo full name
    url: str
    author_avatar_url: str | None = None

    @property
    def day(self) -> str:
        """Calendar date (YYYY-MM-DD) of the commit, or "" when undated."""
        return self.date[:10]

    @property
    def organization(self) -> str:
        return self.repository.split("/", 1)[0]


@dataclass
class GitHubUser:
    """Authenticated GitHub user (the OAuth principal)."""

    login: str
    name: str | None
    avatar_url: str | None
    email: str | None = None


@dataclass
class GitHubInstallation:
    """A GitHub App installation visible to the authenticated user."""

    installation_id: int
    app_id: int
    app_slug: str
    account_login: str
    account_type: str  # "User" or "Organization"
    account_avatar_url: str | None
    repository_selection: str  # "all" or "selected"
    html_url: str | None


@dataclass
class RateLimitStatus:
    """Core REST API budget from /rate_limit."""

    limit: int
    remaining: int
    reset: int | None
