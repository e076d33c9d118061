"""Contributors endpoint.

Lists everyone with commits in the window across the caller's (filtered)
repositories, most active first. Powers the contributor filter picker.
"""

import logging
from dataclasses import replace

from fastapi import APIRouter, Request, Response

from app.api.deps import Aggregator, CurrentViewer
from app.api.errors import raise_for_activity_error
from app.api.v1.utils import ActivityParams
from app.core.cancellation import run_until_disconnect
from app.core.http_cache import CacheTTL, cached_json_response
from app.schemas.activity import ContributorOut, ContributorsResponse, date_range_of
from app.services.activity import ActivityError, GroupBy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contributors"])


@router.get("/contributors", response_model=ContributorsResponse, response_model_exclude_none=True)
async def list_contributors(
    request: Request,
    params: ActivityParams,
    viewer: CurrentViewer,
    aggregator: Aggregator,
) -> Response:
    """List commit authors in the date range, sorted by commit count."""
    # Contributor filters and summaries make no sense for the picker itself
    filters = replace(
        params.filters,
        contributors=[],
        group_by=GroupBy.CHRONOLOGICAL,
        generate_group_summaries=False,
    )
    try:
        result = await run_until_disconnect(
            request, aggregator.aggregate(filters, params.date_range, viewer)
        )
    except ActivityError as e:
        raise_for_activity_error(e)

    contributors = [ContributorOut.from_stat(s) for s in result.stats.contributors]
    response = ContributorsResponse(
        contributors=contributors,
        total=len(contributors),
        date_range=date_range_of(result),
    )
    return cached_json_response(
        request,
        response.to_payload(),
        max_age=CacheTTL.MEDIUM,
        stale_while_revalidate=CacheTTL.MEDIUM,
    )
