from fastapi import APIRouter

from app.api.v1 import (
    activity,
    contributors,
    installations,
    repositories,
    summary,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(activity.router)
api_router.include_router(summary.router)
api_router.include_router(repositories.router)
api_router.include_router(contributors.router)
api_router.include_router(installations.router)
