"""
GitHub API read operations.

Provides the read-only listings the activity pipeline depends on:
- Repositories (by affiliation, by organization, by installation)
- Organization memberships
- Commits in a time window
- Authenticated user, installations and rate limit status

Every listing follows GitHub's Link header until exhausted; callers only ever
see the fully-paginated result.
"""

import logging
from typing import Any

from app.services.github.helpers import RateLimitInfo, handle_error_response
from app.services.github.http_client import get_github_client
from app.services.github.types import (
    GitHubCommit,
    GitHubInstallation,
    GitHubRepo,
    GitHubUser,
    RateLimitStatus,
)

logger = logging.getLogger(__name__)

PER_PAGE = 100
# Upper bound on Link-header pages followed for a single listing
MAX_PAGES = 50


class GitHubReadOperations:
    """
    Read-only operations for GitHub API.

    The token may be a user OAuth token or an installation access token; the
    endpoints used differ by mode but the request mechanics are identical.
    Uses the shared HTTP client singleton for connection pooling.
    """

    def __init__(self, token: str):
        self.token = token
        self._headers = {"Authorization": f"Bearer {token}"}

    # ─────────────────────────────────────────────────────────────────────
    # Normalization
    # ─────────────────────────────────────────────────────────────────────

    def _normalize_repo(self, data: dict[str, Any]) -> GitHubRepo:
        """Convert GitHub API response to GitHubRepo dataclass."""
        owner = data.get("owner") or {}
        full_name = data["full_name"]
        return GitHubRepo(
            github_id=data["id"],
            name=data["name"],
            full_name=full_name,
            owner_login=owner.get("login") or full_name.split("/", 1)[0],
            is_private=data.get("private", False),
            language=data.get("language"),
            updated_at=data.get("updated_at") or "",
            url=data.get("html_url", ""),
            description=data.get("description"),
        )

    def _normalize_commit(self, data: dict[str, Any], repository: str) -> GitHubCommit:
        """Convert a commit listing item, tagging it with its repository."""
        commit = data.get("commit") or {}
        git_author = commit.get("author") or {}
        git_committer = commit.get("committer") or {}
        # Top-level "author" is the linked GitHub account; null for unlinked emails
        account = data.get("author") or {}
        return GitHubCommit(
            sha=data["sha"],
            message=commit.get("message", ""),
            author_name=git_author.get("name") or account.get("login") or "Unknown",
            author_email=git_author.get("email"),
            author_login=account.get("login"),
            author_avatar_url=account.get("avatar_url"),
            date=git_author.get("date") or git_committer.get("date") or "",
            repository=repository,
            url=data.get("html_url", ""),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Pagination
    # ─────────────────────────────────────────────────────────────────────

    async def _get_all_pages(
        self,
        path: str,
        resource: str,
        params: dict[str, str | int] | None = None,
        items_key: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every page of a GitHub listing.

        Args:
            path: API path (relative to the client's base URL)
            resource: Description used in error messages
            params: Query parameters for the first request
            items_key: Key holding the items when the listing is wrapped in an
                object (e.g. "repositories" for installation listings)

        Returns:
            All items across pages, in provider order
        """
        client = get_github_client()
        url: str | None = path
        query: dict[str, str | int] | None = {"per_page": PER_PAGE, **(params or {})}
        items: list[dict[str, Any]] = []
        pages = 0

        while url:
            response = await client.get(url, headers=self._headers, params=query)
            handle_error_response(response, resource)

            data = response.json()
            items.extend(data[items_key] if items_key else data)

            pages += 1
            if pages >= MAX_PAGES:
                logger.warning(f"Stopped paginating {resource} after {pages} pages")
                break

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            query = None

        return items

    # ─────────────────────────────────────────────────────────────────────
    # Repository listings
    # ─────────────────────────────────────────────────────────────────────

    async def list_user_repos(self, affiliation: str) -> list[GitHubRepo]:
        """
        List repositories for the authenticated user.

        Args:
            affiliation: "owner", "collaborator" or "organization_member"
        """
        data = await self._get_all_pages(
            "/user/repos",
            f"user repositories ({affiliation})",
            params={"affiliation": affiliation, "visibility": "all", "sort": "updated"},
        )
        return [self._normalize_repo(r) for r in data]

    async def list_user_orgs(self) -> list[str]:
        """List logins of organizations the authenticated user belongs to."""
        data = await self._get_all_pages("/user/orgs", "user organizations")
        return [org["login"] for org in data]

    async def list_org_repos(self, org: str) -> list[GitHubRepo]:
        """List every repository of an organization visible to the token."""
        data = await self._get_all_pages(
            f"/orgs/{org}/repos",
            f"{org} repositories",
            params={"type": "all", "sort": "updated"},
        )
        return [self._normalize_repo(r) for r in data]

    async def list_installation_repos(self) -> list[GitHubRepo]:
        """List repositories granted to the installation behind the token."""
        data = await self._get_all_pages(
            "/installation/repositories",
            "installation repositories",
            items_key="repositories",
        )
        return [self._normalize_repo(r) for r in data]

    # ─────────────────────────────────────────────────────────────────────
    # Commits
    # ─────────────────────────────────────────────────────────────────────

    async def list_commits(
        self,
        full_name: str,
        since: str,
        until: str,
        author: str | None = None,
    ) -> list[GitHubCommit]:
        """
        List commits of a repository within a time window.

        Args:
            full_name: Repository "owner/name"
            since: ISO 8601 timestamp (inclusive)
            until: ISO 8601 timestamp (inclusive)
            author: GitHub login or commit email to filter by

        Returns:
            Commits in provider order (newest first), each tagged with full_name
        """
        params: dict[str, str | int] = {"since": since, "until": until}
        if author:
            params["author"] = author

        data = await self._get_all_pages(
            f"/repos/{full_name}/commits",
            f"{full_name} commits",
            params=params,
        )
        return [self._normalize_commit(c, full_name) for c in data]

    # ─────────────────────────────────────────────────────────────────────
    # Identity & account
    # ─────────────────────────────────────────────────────────────────────

    async def get_authenticated_user(self) -> GitHubUser:
        """Fetch the user behind an OAuth token."""
        client = get_github_client()
        response = await client.get("/user", headers=self._headers, timeout=10.0)
        handle_error_response(response, "authenticated user")

        data = response.json()
        return GitHubUser(
            login=data["login"],
            name=data.get("name"),
            avatar_url=data.get("avatar_url"),
            email=data.get("email"),
        )

    async def list_user_installations(self) -> list[GitHubInstallation]:
        """List GitHub App installations the authenticated user can access."""
        data = await self._get_all_pages(
            "/user/installations",
            "user installations",
            items_key="installations",
        )
        installations = []
        for item in data:
            account = item.get("account") or {}
            installations.append(
                GitHubInstallation(
                    installation_id=item["id"],
                    app_id=item.get("app_id", 0),
                    app_slug=item.get("app_slug", ""),
                    account_login=account.get("login", ""),
                    account_type=account.get("type", "User"),
                    account_avatar_url=account.get("avatar_url"),
                    repository_selection=item.get("repository_selection", "all"),
                    html_url=item.get("html_url"),
                )
            )
        return installations

    async def get_rate_limit(self) -> RateLimitStatus:
        """Fetch the core REST API rate limit budget for this token."""
        client = get_github_client()
        response = await client.get("/rate_limit", headers=self._headers, timeout=10.0)
        handle_error_response(response, "rate limit")

        core = response.json().get("resources", {}).get("core", {})
        reset = core.get("reset")
        if reset is None:
            reset = RateLimitInfo(response).reset_timestamp
        return RateLimitStatus(
            limit=core.get("limit", 0),
            remaining=core.get("remaining", 0),
            reset=reset,
        )
