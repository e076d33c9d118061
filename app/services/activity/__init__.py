"""Commit activity pipeline.

Module structure:
- discovery.py: RepositoryDiscovery (OAuth union / installation listing)
- commit_fetcher.py: CommitFetcher (batched fetch, author fallback)
- aggregator.py: ActivityAggregator (filters, stats, grouping, group summaries)
- pagination.py: Cursor pagination over merged commits
- types.py: Filters, date range, results
- exceptions.py: Pipeline errors
"""

from app.services.activity.aggregator import ActivityAggregator, group_commits
from app.services.activity.commit_fetcher import CommitFetcher, CommitFetchResult, fetch_commits
from app.services.activity.discovery import (
    RepositoryDiscovery,
    dedupe_repositories,
    discover_repositories,
)
from app.services.activity.exceptions import (
    ActivityError,
    CommitFetchError,
    InvalidPageLimitError,
    RepositoryDiscoveryError,
    ViewerRequiredError,
)
from app.services.activity.pagination import DEFAULT_PAGE_LIMIT, Page, paginate
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

__all__ = [
    # Pipeline
    "ActivityAggregator",
    "CommitFetcher",
    "CommitFetchResult",
    "RepositoryDiscovery",
    "dedupe_repositories",
    "discover_repositories",
    "fetch_commits",
    "group_commits",
    # Pagination
    "DEFAULT_PAGE_LIMIT",
    "Page",
    "paginate",
    # Types
    "ME",
    "ActivityFilters",
    "ActivityResult",
    "ActivityStats",
    "CommitGroup",
    "ContributorStat",
    "DateRange",
    "GroupBy",
    "Viewer",
    # Exceptions
    "ActivityError",
    "CommitFetchError",
    "InvalidPageLimitError",
    "RepositoryDiscoveryError",
    "ViewerRequiredError",
]
