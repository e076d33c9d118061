"""Batched commit fetching across repositories.

Repositories are fetched in fixed-size batches: every request in a batch runs
concurrently and the batch is awaited as a whole before the next one starts.
A repository that fails is logged and contributes no commits. With several
App installations, each repository is read through the one covering its owner.

When an author filter yields nothing at all, the fetch is retried:
1. with the first repository owner's login (display names often differ from logins)
2. with no author filter (all commits)
The result reports whether the commits returned are still author-filtered.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from app.config.settings import settings
from app.services.activity.types import DateRange
from app.services.github import (
    Credential,
    GitHubAccess,
    GitHubAPIError,
    GitHubCommit,
    GitHubReadOperations,
    GitHubRepo,
    resolve_access,
)

logger = logging.getLogger(__name__)


@dataclass
class CommitFetchResult:
    """Merged commits plus the author filter that produced them."""

    commits: list[GitHubCommit]
    author_filter: str | None

    @property
    def author_filter_applied(self) -> bool:
        return self.author_filter is not None


class CommitFetcher:
    """Fetches commits for many repositories under one access context.

    ``route`` maps a repository full name to the client allowed to read it;
    without one every repository goes through ``github``.
    """

    def __init__(
        self,
        github: GitHubReadOperations,
        batch_size: int | None = None,
        route: Callable[[str], GitHubReadOperations] | None = None,
    ):
        self.github = github
        self.batch_size = batch_size or settings.commit_fetch_batch_size
        self.route = route

    @classmethod
    def from_access(cls, access: GitHubAccess, batch_size: int | None = None) -> "CommitFetcher":
        route = access.client_for if access.installations else None
        return cls(access.github, batch_size, route=route)

    def client_for(self, full_name: str) -> GitHubReadOperations:
        return self.route(full_name) if self.route else self.github

    async def fetch_repo_commits(
        self,
        full_name: str,
        date_range: DateRange,
        author: str | None = None,
    ) -> list[GitHubCommit]:
        """Fetch one repository's commits; upstream failures yield []."""
        try:
            return await self.client_for(full_name).list_commits(
                full_name,
                since=date_range.since_timestamp,
                until=date_range.until_timestamp,
                author=author,
            )
        except GitHubAPIError as e:
            logger.warning(f"Skipping {full_name}: {e.message}")
            return []
        except httpx.HTTPError as e:
            logger.warning(f"Skipping {full_name}: request failed ({e!r})")
            return []

    async def _fetch_all(
        self,
        repos: list[GitHubRepo],
        date_range: DateRange,
        author: str | None,
    ) -> list[GitHubCommit]:
        commits: list[GitHubCommit] = []
        for start in range(0, len(repos), self.batch_size):
            batch = repos[start : start + self.batch_size]
            results = await asyncio.gather(
                *(self.fetch_repo_commits(repo.full_name, date_range, author) for repo in batch)
            )
            for repo_commits in results:
                commits.extend(repo_commits)
        return commits

    async def fetch_commits(
        self,
        repos: list[GitHubRepo],
        date_range: DateRange,
        author: str | None = None,
    ) -> CommitFetchResult:
        """
        Fetch and merge commits for repos, applying the author fallback.

        Args:
            repos: Repositories in the order their commits should be merged
            date_range: Inclusive window
            author: Optional author filter (GitHub login or name)

        Returns:
            CommitFetchResult in batch / repository / provider order
        """
        commits = await self._fetch_all(repos, date_range, author)
        if commits or not author or not repos:
            return CommitFetchResult(commits, author_filter=author)

        owner_login = repos[0].owner_login
        if owner_login and owner_login != author:
            logger.info(f"No commits for author {author!r}, retrying as owner {owner_login!r}")
            commits = await self._fetch_all(repos, date_range, owner_login)
            if commits:
                return CommitFetchResult(commits, author_filter=owner_login)

        logger.info(f"No commits for author {author!r}, falling back to all authors")
        commits = await self._fetch_all(repos, date_range, None)
        return CommitFetchResult(commits, author_filter=None)


async def fetch_commits(
    credential: Credential,
    repos: list[GitHubRepo],
    date_range: DateRange,
    author: str | None = None,
) -> CommitFetchResult:
    """Resolve the credential's access path and fetch commits for repos."""
    access = await resolve_access(credential)
    return await CommitFetcher.from_access(access).fetch_commits(repos, date_range, author)
