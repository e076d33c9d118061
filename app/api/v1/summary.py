"""AI summary endpoint.

GET /summary aggregates commits like /activity (unpaginated) and asks Claude
for an overall summary. Unlike per-group summaries, a failure here fails the
request.
"""

import logging
from typing import Annotated

import anthropic
from fastapi import APIRouter, Query, Request, Response

from app.api.deps import Aggregator, CurrentAccess, CurrentViewer, Summarizer
from app.api.errors import raise_for_activity_error, raise_for_summary_error
from app.api.v1.utils import ActivityParams, ActivityQuery
from app.core.cancellation import run_until_disconnect
from app.core.exceptions import ValidationError
from app.core.http_cache import CacheTTL, cached_json_response
from app.schemas.activity import (
    CommitGroupOut,
    CommitOut,
    StatsOut,
    SummaryResponse,
    date_range_of,
    filter_info_of,
)
from app.schemas.commit_summary import CommitSummary
from app.services.activity import ActivityAggregator, ActivityError
from app.services.activity.types import ActivityResult, Viewer
from app.services.interpreter import CommitSummarizer, InterpreterError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["summary"])


async def _summarize_activity(
    aggregator: ActivityAggregator,
    summarizer: CommitSummarizer,
    params: ActivityQuery,
    viewer: Viewer,
) -> tuple[ActivityResult, CommitSummary]:
    result = await aggregator.aggregate(params.filters, params.date_range, viewer)
    summary = await summarizer.summarize(result.commits)
    return result, summary


@router.get("/summary", response_model=SummaryResponse, response_model_exclude_none=True)
async def get_summary(
    request: Request,
    params: ActivityParams,
    access: CurrentAccess,
    viewer: CurrentViewer,
    aggregator: Aggregator,
    summarizer: Summarizer,
    since: Annotated[str | None, Query()] = None,
    until: Annotated[str | None, Query()] = None,
) -> Response:
    """Summarize commit activity for an explicit date range."""
    if not since or not until:
        raise ValidationError("since and until are required", code="MISSING_DATE_RANGE")

    try:
        result, summary = await run_until_disconnect(
            request, _summarize_activity(aggregator, summarizer, params, viewer)
        )
    except ActivityError as e:
        raise_for_activity_error(e)
    except (InterpreterError, anthropic.APIError) as e:
        raise_for_summary_error(e)

    logger.info(
        f"Generated summary for {result.stats.total_commits} commits "
        f"({params.date_range.since} → {params.date_range.until})"
    )

    response = SummaryResponse(
        ai_summary=summary,
        commits=[CommitOut.from_commit(c) for c in result.commits],
        stats=StatsOut.from_stats(result.stats),
        grouped_results=[CommitGroupOut.from_group(g) for g in result.groups],
        filter_info=filter_info_of(result),
        date_range=date_range_of(result),
        author_filter_applied=result.author_filter_applied,
        auth_method=access.mode.value,
        message=result.message,
    )
    return cached_json_response(request, response.to_payload(), max_age=CacheTTL.SHORT)
