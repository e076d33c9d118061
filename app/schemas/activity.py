"""Pydantic schemas for activity API responses.

Field names are snake_case in Python and camelCase on the wire; routes dump
with ``by_alias=True, exclude_none=True`` so optional fields are omitted
rather than sent as null.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.commit_summary import CommitSummary
from app.services.activity.types import (
    ActivityResult,
    ActivityStats,
    CommitGroup,
    ContributorStat,
    GroupBy,
)
from app.services.github.types import GitHubCommit, GitHubInstallation, GitHubRepo


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ─────────────────────────────────────────────────────────────
# Building blocks
# ─────────────────────────────────────────────────────────────


class CommitOut(APIModel):
    sha: str
    message: str
    author_name: str
    author_login: str | None = None
    author_email: str | None = None
    author_avatar_url: str | None = None
    date: str
    repository: str
    url: str

    @classmethod
    def from_commit(cls, commit: GitHubCommit) -> "CommitOut":
        return cls(
            sha=commit.sha,
            message=commit.message,
            author_name=commit.author_name,
            author_login=commit.author_login,
            author_email=commit.author_email,
            author_avatar_url=commit.author_avatar_url,
            date=commit.date,
            repository=commit.repository,
            url=commit.url,
        )


class RepositoryOut(APIModel):
    id: int
    name: str
    full_name: str
    owner: str
    private: bool
    language: str | None = None
    updated_at: str
    url: str
    description: str | None = None

    @classmethod
    def from_repo(cls, repo: GitHubRepo) -> "RepositoryOut":
        return cls(
            id=repo.github_id,
            name=repo.name,
            full_name=repo.full_name,
            owner=repo.owner_login,
            private=repo.is_private,
            language=repo.language,
            updated_at=repo.updated_at,
            url=repo.url,
            description=repo.description,
        )


class ContributorOut(APIModel):
    username: str | None = None
    display_name: str
    avatar_url: str | None = None
    commit_count: int

    @classmethod
    def from_stat(cls, stat: ContributorStat) -> "ContributorOut":
        return cls(
            username=stat.login,
            display_name=stat.display_name,
            avatar_url=stat.avatar_url,
            commit_count=stat.commit_count,
        )


class StatsOut(APIModel):
    total_commits: int
    repositories: list[str]
    dates: list[str]
    organizations: list[str] | None = None
    contributors: list[ContributorOut] = Field(default_factory=list)

    @classmethod
    def from_stats(cls, stats: ActivityStats) -> "StatsOut":
        return cls(
            total_commits=stats.total_commits,
            repositories=stats.repositories,
            dates=stats.dates,
            organizations=stats.organizations,
            contributors=[ContributorOut.from_stat(s) for s in stats.contributors],
        )


class CommitGroupOut(APIModel):
    group_key: str
    group_name: str
    group_avatar: str | None = None
    commit_count: int
    repositories: list[str]
    dates: list[str]
    commits: list[CommitOut]
    ai_summary: CommitSummary | None = None

    @classmethod
    def from_group(cls, group: CommitGroup) -> "CommitGroupOut":
        return cls(
            group_key=group.group_key,
            group_name=group.group_name,
            group_avatar=group.group_avatar,
            commit_count=group.commit_count,
            repositories=group.repositories,
            dates=group.dates,
            commits=[CommitOut.from_commit(c) for c in group.commits],
            ai_summary=group.ai_summary,
        )


class PaginationOut(APIModel):
    has_more: bool
    next_cursor: str | None = None
    limit: int


class FilterInfoOut(APIModel):
    organizations: list[str]
    repositories: list[str]
    contributors: list[str]
    group_by: GroupBy
    generate_group_summaries: bool


class DateRangeOut(APIModel):
    since: str
    until: str


# ─────────────────────────────────────────────────────────────
# Responses
# ─────────────────────────────────────────────────────────────


class ActivityResponse(APIModel):
    """Response for GET /activity."""

    commits: list[CommitOut]
    stats: StatsOut
    pagination: PaginationOut
    grouped_results: list[CommitGroupOut]
    filter_info: FilterInfoOut
    date_range: DateRangeOut
    author_filter_applied: bool
    auth_method: str
    message: str | None = None


class SummaryResponse(APIModel):
    """Response for GET /summary."""

    ai_summary: CommitSummary
    commits: list[CommitOut]
    stats: StatsOut
    grouped_results: list[CommitGroupOut]
    filter_info: FilterInfoOut
    date_range: DateRangeOut
    author_filter_applied: bool
    auth_method: str
    message: str | None = None


class RepositoriesResponse(APIModel):
    repositories: list[RepositoryOut]
    total: int
    auth_method: str


class ContributorsResponse(APIModel):
    contributors: list[ContributorOut]
    total: int
    date_range: DateRangeOut


class InstallationOut(APIModel):
    id: int
    account_login: str
    account_type: str
    account_avatar_url: str | None = None
    repository_selection: str
    manage_url: str | None = None

    @classmethod
    def from_installation(cls, installation: GitHubInstallation) -> "InstallationOut":
        return cls(
            id=installation.installation_id,
            account_login=installation.account_login,
            account_type=installation.account_type,
            account_avatar_url=installation.account_avatar_url,
            repository_selection=installation.repository_selection,
            manage_url=installation.html_url,
        )


class InstallationsResponse(APIModel):
    installations: list[InstallationOut]
    install_url: str | None = None


def filter_info_of(result: ActivityResult) -> FilterInfoOut:
    return FilterInfoOut(
        organizations=result.filters.organizations,
        repositories=result.filters.repositories,
        contributors=result.filters.contributors,
        group_by=result.filters.group_by,
        generate_group_summaries=result.filters.generate_group_summaries,
    )


def date_range_of(result: ActivityResult) -> DateRangeOut:
    return DateRangeOut(
        since=result.date_range.since.isoformat(),
        until=result.date_range.until.isoformat(),
    )
