"""API router modules."""

from fastapi import APIRouter

from tablebook.core.config import get_settings

from .v1 import router as api_v1_router

settings = get_settings()

_COMMON_RESPONSES = {
    404: {"description": "Restaurant or booking not found"},
    409: {"description": "Slot full, concurrent booking conflict, or duplicate id"},
}

api_router = APIRouter()
api_router.include_router(
    api_v1_router, prefix=settings.api_v1_prefix, responses=_COMMON_RESPONSES
)

__all__ = ["api_router"]
