"""Versioned API router."""

from fastapi import APIRouter

from tablebook.api import deps
from tablebook.core.config import get_settings

from . import bookings, gift_cards, health, restaurants

settings = get_settings()

_DEFAULT_RATE_DEP = deps.rate_limit(settings.rate_limit_default, fallback=(100, 60))

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(
    restaurants.router,
    prefix="/restaurants",
    tags=["restaurants"],
    dependencies=[_DEFAULT_RATE_DEP],
)
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(
    gift_cards.router,
    prefix="/gift-cards",
    tags=["gift-cards"],
    dependencies=[_DEFAULT_RATE_DEP],
)
