"""Activity aggregation.

Orchestrates one activity request end to end:

    discover repositories → organization filter → repository filter
    → single-contributor push-down → fetch commits → drop repeated SHAs
    → contributor post-filter
    → statistics → grouping → (optional) per-group AI summaries

Pagination and HTTP caching happen at the API layer on the returned result.
"""

import asyncio
import logging
from collections import Counter
from typing import TYPE_CHECKING

from app.config.settings import settings
from app.services.activity.commit_fetcher import CommitFetcher
from app.services.activity.discovery import RepositoryDiscovery
from app.services.activity.exceptions import CommitFetchError, ViewerRequiredError
from app.services.activity.types import (
    ME,
    ActivityFilters,
    ActivityResult,
    ActivityStats,
    CommitGroup,
    ContributorStat,
    DateRange,
    GroupBy,
    Viewer,
)
from app.services.github import GitHubCommit, GitHubRepo

if TYPE_CHECKING:
    from app.services.interpreter.commit_summary import CommitSummarizer

logger = logging.getLogger(__name__)

NO_MATCHING_REPOSITORIES = "No repositories match the specified filters"


# ─────────────────────────────────────────────────────────────────────────────
# Filtering
# ─────────────────────────────────────────────────────────────────────────────


def filter_by_organizations(repos: list[GitHubRepo], organizations: list[str]) -> list[GitHubRepo]:
    if not organizations:
        return repos
    wanted = {org.lower() for org in organizations}
    return [r for r in repos if r.owner_login.lower() in wanted]


def filter_by_repositories(repos: list[GitHubRepo], repositories: list[str]) -> list[GitHubRepo]:
    if not repositories:
        return repos
    wanted = {name.lower() for name in repositories}
    return [r for r in repos if r.full_name.lower() in wanted]


def resolve_author_pushdown(contributors: list[str], viewer: Viewer) -> str | None:
    """
    Map a lone "me" (or the viewer's own display name) to an upstream author filter.

    Returns:
        The author filter to push down, or None when the shortcut does not apply

    Raises:
        ViewerRequiredError: If "me" is requested but the viewer is unknown
    """
    if len(contributors) != 1:
        return None

    contributor = contributors[0]
    is_me = contributor.lower() == ME
    if is_me and not viewer.is_known:
        raise ViewerRequiredError("Filtering by 'me' requires signing in with GitHub")

    if is_me or (viewer.name and contributor == viewer.name):
        return viewer.login or viewer.name
    return None


def filter_by_contributors(
    commits: list[GitHubCommit],
    contributors: list[str],
    viewer: Viewer,
) -> list[GitHubCommit]:
    """Keep commits whose author login or display name is listed."""
    if not contributors:
        return commits

    wanted = set(contributors)
    include_viewer = any(c.lower() == ME for c in contributors)
    if include_viewer and not viewer.is_known:
        raise ViewerRequiredError("Filtering by 'me' requires signing in with GitHub")

    return [
        c
        for c in commits
        if (c.author_login is not None and c.author_login in wanted)
        or c.author_name in wanted
        or (include_viewer and viewer.matches(c))
    ]


def dedupe_commits(commits: list[GitHubCommit]) -> list[GitHubCommit]:
    """
    Drop repeated SHAs, keeping the first occurrence.

    A fork and its upstream list the same commits; cursors resolve by SHA, so
    every SHA may appear at most once in the merged stream.
    """
    seen: set[str] = set()
    unique: list[GitHubCommit] = []
    for commit in commits:
        if commit.sha not in seen:
            seen.add(commit.sha)
            unique.append(commit)
    if len(unique) < len(commits):
        logger.debug(f"Dropped {len(commits) - len(unique)} duplicate commits")
    return unique


# ─────────────────────────────────────────────────────────────────────────────
# Statistics & grouping
# ─────────────────────────────────────────────────────────────────────────────


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def _contributor_key(commit: GitHubCommit) -> str:
    return commit.author_login or commit.author_name or "unknown"


def contributor_stats(commits: list[GitHubCommit]) -> list[ContributorStat]:
    """Unique commit authors, most active first."""
    counts: Counter[str] = Counter()
    first_seen: dict[str, GitHubCommit] = {}
    for commit in commits:
        key = _contributor_key(commit)
        counts[key] += 1
        first_seen.setdefault(key, commit)

    stats = [
        ContributorStat(
            login=first_seen[key].author_login,
            display_name=first_seen[key].author_name,
            avatar_url=first_seen[key].author_avatar_url,
            commit_count=count,
        )
        for key, count in counts.items()
    ]
    stats.sort(key=lambda s: s.commit_count, reverse=True)
    return stats


def compute_stats(commits: list[GitHubCommit], organizations: list[str]) -> ActivityStats:
    return ActivityStats(
        total_commits=len(commits),
        repositories=_unique([c.repository for c in commits]),
        dates=_unique([c.day for c in commits]),
        contributors=contributor_stats(commits),
        organizations=list(organizations) if organizations else None,
    )


def _new_group(key: str, name: str, avatar: str | None = None) -> CommitGroup:
    return CommitGroup(
        group_key=key, group_name=name, commits=[], repositories=[], dates=[], group_avatar=avatar
    )


def group_commits(commits: list[GitHubCommit], group_by: GroupBy) -> list[CommitGroup]:
    """
    Group commits by contributor, organization or repository.

    Groups are ordered by commit count, descending; ties keep first-seen order.
    Chronological mode yields exactly one group keyed "all".
    """
    groups: dict[str, CommitGroup]
    if group_by == GroupBy.CHRONOLOGICAL:
        groups = {"all": _new_group("all", "All Commits")}
        groups["all"].commits.extend(commits)
    else:
        groups = {}
        for commit in commits:
            if group_by == GroupBy.CONTRIBUTOR:
                key = _contributor_key(commit)
                if key not in groups:
                    groups[key] = _new_group(key, commit.author_name, commit.author_avatar_url)
            elif group_by == GroupBy.ORGANIZATION:
                key = commit.organization
                if key not in groups:
                    groups[key] = _new_group(key, key)
            else:
                key = commit.repository
                if key not in groups:
                    groups[key] = _new_group(key, key)
            groups[key].commits.append(commit)

    for group in groups.values():
        group.repositories = _unique([c.repository for c in group.commits])
        group.dates = _unique([c.day for c in group.commits])

    return sorted(groups.values(), key=lambda g: g.commit_count, reverse=True)


# ─────────────────────────────────────────────────────────────────────────────
# Aggregator
# ─────────────────────────────────────────────────────────────────────────────


class ActivityAggregator:
    """Produces filtered, grouped commit activity for one access context."""

    def __init__(
        self,
        discovery: RepositoryDiscovery,
        fetcher: CommitFetcher,
        summarizer: "CommitSummarizer | None" = None,
    ):
        self.discovery = discovery
        self.fetcher = fetcher
        self.summarizer = summarizer

    async def aggregate(
        self,
        filters: ActivityFilters,
        date_range: DateRange,
        viewer: Viewer,
    ) -> ActivityResult:
        """
        Run the pipeline for one request.

        Raises:
            RepositoryDiscoveryError: Repository listing failed
            CommitFetchError: Commit fetching failed unexpectedly
            ViewerRequiredError: "me" requested without a known viewer
        """
        repos = await self.discovery.discover()
        repos = filter_by_organizations(repos, filters.organizations)
        repos = filter_by_repositories(repos, filters.repositories)

        if not repos:
            logger.info(
                f"No repositories left after filters (orgs={filters.organizations}, "
                f"repos={filters.repositories})"
            )
            return self._build_result([], filters, date_range, False, NO_MATCHING_REPOSITORIES)

        author = resolve_author_pushdown(filters.contributors, viewer)
        try:
            fetched = await self.fetcher.fetch_commits(repos, date_range, author)
        except Exception as e:
            logger.exception("Commit fetch failed")
            raise CommitFetchError(f"Failed to fetch commits: {e}", cause=e) from e

        commits = dedupe_commits(fetched.commits)
        if author is None:
            commits = filter_by_contributors(commits, filters.contributors, viewer)
            author_filter_applied = bool(filters.contributors)
        else:
            # False when the fetcher widened to all authors
            author_filter_applied = fetched.author_filter_applied

        logger.info(
            f"Aggregated {len(commits)} commits from {len(repos)} repositories "
            f"({date_range.since} → {date_range.until}, group_by={filters.group_by.value})"
        )

        result = self._build_result(commits, filters, date_range, author_filter_applied)
        if filters.generate_group_summaries:
            await self.summarize_groups(result.groups)
        return result

    def _build_result(
        self,
        commits: list[GitHubCommit],
        filters: ActivityFilters,
        date_range: DateRange,
        author_filter_applied: bool,
        message: str | None = None,
    ) -> ActivityResult:
        return ActivityResult(
            commits=commits,
            stats=compute_stats(commits, filters.organizations),
            groups=group_commits(commits, filters.group_by),
            filters=filters,
            date_range=date_range,
            author_filter_applied=author_filter_applied,
            message=message,
        )

    async def summarize_groups(self, groups: list[CommitGroup]) -> None:
        """
        Attach AI summaries to the largest eligible groups, in place.

        A failing group is logged and left without a summary.
        """
        if self.summarizer is None:
            logger.warning("Group summaries requested but no summarizer is configured")
            return

        eligible = [g for g in groups if g.commit_count >= settings.group_summary_min_commits]
        selected = eligible[: settings.group_summary_limit]
        if not selected:
            return

        summarizer = self.summarizer

        async def summarize(group: CommitGroup) -> None:
            try:
                group.ai_summary = await summarizer.summarize(group.commits)
            except Exception:
                logger.exception(f"Failed to summarize group {group.group_key!r}")

        logger.info(f"Generating summaries for {len(selected)} of {len(groups)} groups")
        await asyncio.gather(*(summarize(g) for g in selected))
