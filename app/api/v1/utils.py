"""Shared query parsing for activity endpoints."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Annotated

from fastapi import Depends, Query

from app.config.settings import settings
from app.core.exceptions import ValidationError
from app.services.activity import ActivityFilters, DateRange, GroupBy

logger = logging.getLogger(__name__)


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated query value, dropping blanks and duplicates."""
    if not value:
        return []
    return list(dict.fromkeys(part.strip() for part in value.split(",") if part.strip()))


def resolve_date_range(
    since: str | None,
    until: str | None,
    default_days: int | None = None,
    today: date | None = None,
) -> DateRange:
    """
    Build the request's date window.

    Missing bounds default to the trailing window ending today (UTC).

    Raises:
        ValidationError: Malformed dates or since after until (400)
    """
    today = today or datetime.now(UTC).date()
    days = settings.default_activity_days if default_days is None else default_days

    try:
        until_date = date.fromisoformat(until) if until else today
        since_date = date.fromisoformat(since) if since else until_date - timedelta(days=days)
        return DateRange(since=since_date, until=until_date)
    except ValueError as e:
        raise ValidationError(str(e), code="INVALID_DATE_RANGE") from e


@dataclass
class ActivityQuery:
    """Filter and window parameters common to activity endpoints."""

    date_range: DateRange
    filters: ActivityFilters


def get_activity_query(
    since: Annotated[str | None, Query(description="Start date (YYYY-MM-DD)")] = None,
    until: Annotated[str | None, Query(description="End date (YYYY-MM-DD)")] = None,
    organizations: Annotated[str | None, Query(description="Comma-separated org logins")] = None,
    repositories: Annotated[
        str | None, Query(description="Comma-separated repository full names")
    ] = None,
    contributors: Annotated[
        str | None, Query(description="Comma-separated logins or names; 'me' for yourself")
    ] = None,
    group_by: Annotated[GroupBy, Query(alias="groupBy")] = GroupBy.CHRONOLOGICAL,
    generate_group_summaries: Annotated[bool, Query(alias="generateGroupSummaries")] = False,
) -> ActivityQuery:
    return ActivityQuery(
        date_range=resolve_date_range(since, until),
        filters=ActivityFilters(
            organizations=parse_csv(organizations),
            repositories=parse_csv(repositories),
            contributors=parse_csv(contributors),
            group_by=group_by,
            generate_group_summaries=generate_group_summaries,
        ),
    )


ActivityParams = Annotated[ActivityQuery, Depends(get_activity_query)]
