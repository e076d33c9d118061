"""Repository listing endpoint."""

import logging

from fastapi import APIRouter, Request, Response

from app.api.deps import CurrentAccess
from app.api.errors import raise_for_activity_error
from app.core.cancellation import run_until_disconnect
from app.core.http_cache import CacheTTL, cached_json_response
from app.schemas.activity import RepositoriesResponse, RepositoryOut
from app.services.activity import RepositoryDiscovery, RepositoryDiscoveryError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["repositories"])


@router.get("/repos", response_model=RepositoriesResponse, response_model_exclude_none=True)
async def list_repositories(request: Request, access: CurrentAccess) -> Response:
    """List every repository visible to the caller's credential."""
    discovery = RepositoryDiscovery.from_access(access)
    try:
        repos = await run_until_disconnect(request, discovery.discover())
    except RepositoryDiscoveryError as e:
        raise_for_activity_error(e)

    response = RepositoriesResponse(
        repositories=[RepositoryOut.from_repo(r) for r in repos],
        total=len(repos),
        auth_method=access.mode.value,
    )
    return cached_json_response(
        request,
        response.to_payload(),
        max_age=CacheTTL.MEDIUM,
        stale_while_revalidate=CacheTTL.LONG,
    )
