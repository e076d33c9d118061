"""Commit activity endpoint.

GET /activity runs the full aggregation pipeline and returns one page of the
merged commit stream plus statistics and grouped results. Responses carry an
ETag; a matching If-None-Match yields 304.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request, Response

from app.api.deps import Aggregator, CurrentAccess, CurrentViewer
from app.api.errors import raise_for_activity_error
from app.api.v1.utils import ActivityParams
from app.core.cancellation import run_until_disconnect
from app.core.http_cache import CacheTTL, cached_json_response
from app.schemas.activity import (
    ActivityResponse,
    CommitGroupOut,
    CommitOut,
    PaginationOut,
    StatsOut,
    date_range_of,
    filter_info_of,
)
from app.services.activity import DEFAULT_PAGE_LIMIT, ActivityError, paginate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["activity"])

# Upper bound on page size
MAX_PAGE_LIMIT = 500


@router.get("/activity", response_model=ActivityResponse, response_model_exclude_none=True)
async def get_activity(
    request: Request,
    params: ActivityParams,
    access: CurrentAccess,
    viewer: CurrentViewer,
    aggregator: Aggregator,
    cursor: Annotated[str | None, Query(description="SHA of the last commit seen")] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
) -> Response:
    """Get filtered, grouped commit activity across every visible repository."""
    try:
        result = await run_until_disconnect(
            request, aggregator.aggregate(params.filters, params.date_range, viewer)
        )
    except ActivityError as e:
        raise_for_activity_error(e)

    page = paginate(result.commits, cursor, limit)

    response = ActivityResponse(
        commits=[CommitOut.from_commit(c) for c in page.items],
        stats=StatsOut.from_stats(result.stats),
        pagination=PaginationOut(has_more=page.has_more, next_cursor=page.next_cursor, limit=limit),
        grouped_results=[CommitGroupOut.from_group(g) for g in result.groups],
        filter_info=filter_info_of(result),
        date_range=date_range_of(result),
        author_filter_applied=result.author_filter_applied,
        auth_method=access.mode.value,
        message=result.message,
    )

    return cached_json_response(
        request,
        response.to_payload(),
        max_age=CacheTTL.SHORT,
        stale_while_revalidate=CacheTTL.SHORT * 2,
    )
