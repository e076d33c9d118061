"""Pydantic schemas for API responses and AI output validation."""

from app.schemas.activity import (
    ActivityResponse,
    CommitGroupOut,
    CommitOut,
    ContributorOut,
    ContributorsResponse,
    DateRangeOut,
    FilterInfoOut,
    InstallationOut,
    InstallationsResponse,
    PaginationOut,
    RepositoriesResponse,
    RepositoryOut,
    StatsOut,
    SummaryResponse,
)
from app.schemas.commit_summary import (
    CommitSummary,
    CommitTypeCount,
    TechnicalArea,
    TimelineHighlight,
)

__all__ = [
    "ActivityResponse",
    "CommitGroupOut",
    "CommitOut",
    "CommitSummary",
    "CommitTypeCount",
    "ContributorOut",
    "ContributorsResponse",
    "DateRangeOut",
    "FilterInfoOut",
    "InstallationOut",
    "InstallationsResponse",
    "PaginationOut",
    "RepositoriesResponse",
    "RepositoryOut",
    "StatsOut",
    "SummaryResponse",
    "TechnicalArea",
    "TimelineHighlight",
]
