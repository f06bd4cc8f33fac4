"""API routes package."""

from fastapi import APIRouter

from qullqa.api.artifacts import router as artifacts_router
from qullqa.api.viewer import router as viewer_router

api_router = APIRouter()

# Write path and metadata (JSON)
api_router.include_router(
    artifacts_router,
    prefix="/api",
    tags=["artifacts"],
)

# Read path serving artifact content
api_router.include_router(viewer_router, prefix="/a", tags=["viewer"])

__all__ = ["api_router"]
