"""Repository discovery.

Enumerates every repository a credential can see:
- OAuth: owned + collaborator + every organization's repositories
- GitHub App installations: each installation's repository listing, merged

Results are deduplicated by full name (last-seen record wins). Any listing
failure aborts discovery; partial repository sets are never returned.
"""

import asyncio
import logging

import httpx

from app.services.activity.exceptions import RepositoryDiscoveryError
from app.services.github import (
    AuthMode,
    Credential,
    GitHubAccess,
    GitHubAPIError,
    GitHubReadOperations,
    GitHubRepo,
    resolve_access,
)
from app.services.github.helpers import log_rate_limit_status

logger = logging.getLogger(__name__)


def dedupe_repositories(repos: list[GitHubRepo]) -> list[GitHubRepo]:
    """Deduplicate by full_name. Later records replace earlier ones in place."""
    by_name: dict[str, GitHubRepo] = {}
    for repo in repos:
        by_name[repo.full_name] = repo
    return list(by_name.values())


class RepositoryDiscovery:
    """Lists the repositories visible to one resolved GitHub access context."""

    def __init__(
        self,
        github: GitHubReadOperations,
        mode: AuthMode,
        installation_clients: list[GitHubReadOperations] | None = None,
    ):
        self.github = github
        self.mode = mode
        self.installation_clients = installation_clients or [github]

    @classmethod
    def from_access(cls, access: GitHubAccess) -> "RepositoryDiscovery":
        return cls(access.github, access.mode, [i.github for i in access.installations])

    async def discover(self) -> list[GitHubRepo]:
        """
        Discover all visible repositories.

        Raises:
            RepositoryDiscoveryError: If any underlying listing fails
        """
        await self._check_rate_limit()

        try:
            if self.mode == AuthMode.GITHUB_APP:
                repos = await self._discover_installation_repos()
            else:
                repos = await self._discover_user_repos()
        except GitHubAPIError as e:
            logger.error(f"Repository discovery failed ({self.mode.value}): {e.message}")
            raise RepositoryDiscoveryError(e.message, cause=e) from e
        except httpx.HTTPError as e:
            logger.error(f"GitHub unreachable during repository discovery: {e!r}")
            raise RepositoryDiscoveryError(f"GitHub request failed: {e}", cause=e) from e

        unique = dedupe_repositories(repos)
        logger.info(
            f"Discovered {len(unique)} repositories via {self.mode.value} "
            f"({len(repos) - len(unique)} duplicates dropped)"
        )
        return unique

    async def _discover_installation_repos(self) -> list[GitHubRepo]:
        listings = await asyncio.gather(
            *(client.list_installation_repos() for client in self.installation_clients)
        )
        return [repo for listing in listings for repo in listing]

    async def _discover_user_repos(self) -> list[GitHubRepo]:
        owned, collaborating, orgs = await asyncio.gather(
            self.github.list_user_repos("owner"),
            self.github.list_user_repos("collaborator"),
            self.github.list_user_orgs(),
        )
        logger.debug(
            f"Found {len(owned)} owned, {len(collaborating)} collaborator repositories "
            f"and {len(orgs)} organizations"
        )

        org_repos = await asyncio.gather(*(self.github.list_org_repos(org) for org in orgs))

        repos = owned + collaborating
        for listing in org_repos:
            repos.extend(listing)
        return repos

    async def _check_rate_limit(self) -> None:
        # Advisory only: a failing budget check must not block discovery
        try:
            status = await self.github.get_rate_limit()
        except (GitHubAPIError, httpx.HTTPError) as e:
            logger.warning(f"Could not read GitHub rate limit: {e}")
            return
        log_rate_limit_status(status.remaining, status.limit, status.reset)


async def discover_repositories(credential: Credential) -> list[GitHubRepo]:
    """Resolve the credential's access path and discover its repositories."""
    access = await resolve_access(credential)
    return await RepositoryDiscovery.from_access(access).discover()
