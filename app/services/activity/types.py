"""Type definitions for the activity pipeline."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from app.services.github.types import GitHubCommit

if TYPE_CHECKING:
    from app.schemas.commit_summary import CommitSummary

# Sentinel contributor meaning "the signed-in user"
ME = "me"


class GroupBy(str, Enum):
    CONTRIBUTOR = "contributor"
    ORGANIZATION = "organization"
    REPOSITORY = "repository"
    CHRONOLOGICAL = "chronological"


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date window. ``since`` must not be after ``until``."""

    since: date
    until: date

    def __post_init__(self) -> None:
        if self.since > self.until:
            raise ValueError(
                f"since ({self.since.isoformat()}) must not be after until ({self.until.isoformat()})"
            )

    @classmethod
    def parse(cls, since: str, until: str) -> "DateRange":
        """Build from YYYY-MM-DD strings. Raises ValueError on bad input."""
        return cls(since=date.fromisoformat(since), until=date.fromisoformat(until))

    @property
    def since_timestamp(self) -> str:
        """Start of the first day, as GitHub expects it."""
        return f"{self.since.isoformat()}T00:00:00Z"

    @property
    def until_timestamp(self) -> str:
        """End of the last day, as GitHub expects it."""
        return f"{self.until.isoformat()}T23:59:59Z"


@dataclass
class Viewer:
    """The OAuth principal, when one is known.

    Installation-only credentials have no user identity, so every field is
    optional.
    """

    login: str | None = None
    name: str | None = None
    avatar_url: str | None = None

    @property
    def is_known(self) -> bool:
        return bool(self.login or self.name)

    def matches(self, commit: GitHubCommit) -> bool:
        if self.login and commit.author_login == self.login:
            return True
        return bool(self.name) and commit.author_name == self.name


@dataclass
class ActivityFilters:
    """Request-level filters. Empty lists mean "no filter"."""

    organizations: list[str] = field(default_factory=list)
    repositories: list[str] = field(default_factory=list)
    contributors: list[str] = field(default_factory=list)
    group_by: GroupBy = GroupBy.CHRONOLOGICAL
    generate_group_summaries: bool = False


@dataclass
class ContributorStat:
    login: str | None
    display_name: str
    avatar_url: str | None
    commit_count: int


@dataclass
class ActivityStats:
    total_commits: int
    repositories: list[str]
    dates: list[str]  # YYYY-MM-DD, unique
    contributors: list[ContributorStat]
    organizations: list[str] | None = None  # Echo of the organization filter


@dataclass
class CommitGroup:
    """Commits sharing a contributor, organization, repository, or everything."""

    group_key: str
    group_name: str
    commits: list[GitHubCommit]
    repositories: list[str]
    dates: list[str]
    group_avatar: str | None = None
    ai_summary: "CommitSummary | None" = None

    @property
    def commit_count(self) -> int:
        return len(self.commits)


@dataclass
class ActivityResult:
    """Everything the aggregator produced for one request, before pagination."""

    commits: list[GitHubCommit]
    stats: ActivityStats
    groups: list[CommitGroup]
    filters: ActivityFilters
    date_range: DateRange
    author_filter_applied: bool
    message: str | None = None
