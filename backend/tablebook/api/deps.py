"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.core.config import get_settings
from tablebook.db.session import get_session
from tablebook.integrations.payments import PaymentProvider, StripePaymentProvider
from tablebook.services.errors import (
    AlreadyCancelled,
    BookingConflict,
    BookingNotFound,
    ConfirmationCodeCollision,
    GiftCardNotFound,
    InsufficientCapacity,
    RestaurantAlreadyExists,
    RestaurantNotFound,
)

_ERROR_STATUS: dict[type[ValueError], int] = {
    RestaurantNotFound: status.HTTP_404_NOT_FOUND,
    BookingNotFound: status.HTTP_404_NOT_FOUND,
    GiftCardNotFound: status.HTTP_404_NOT_FOUND,
    RestaurantAlreadyExists: status.HTTP_409_CONFLICT,
    BookingConflict: status.HTTP_409_CONFLICT,
    InsufficientCapacity: status.HTTP_409_CONFLICT,
    AlreadyCancelled: status.HTTP_400_BAD_REQUEST,
    ConfirmationCodeCollision: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_SECONDS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def get_payment_provider() -> PaymentProvider:
    """Card payment provider; 503 when no API key is configured."""
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Card payments are not configured",
        )
    return StripePaymentProvider(settings.stripe_secret_key)


def http_error(exc: ValueError) -> HTTPException:
    """Translate a service error into the matching HTTP error."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type in type(exc).__mro__:
        if error_type in _ERROR_STATUS:
            status_code = _ERROR_STATUS[error_type]
            break
    if isinstance(exc, InsufficientCapacity):
        return HTTPException(
            status_code=status_code,
            detail={"message": str(exc), "free_capacity": exc.free_capacity},
        )
    return HTTPException(status_code=status_code, detail=str(exc))


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"<count>/<window>"`` (e.g. ``"20/minute"``)."""
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    seconds = _SECONDS.get(window_str.strip().lower(), fallback[1])
    return count, seconds


def rate_limit(value: str, *, fallback: tuple[int, int] = (100, 60)):
    """Rate limit dependency; a no-op when the limiter was not initialised."""
    times, seconds = parse_rate(value, fallback=fallback)

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=times, seconds=seconds)
        await limiter(request, response)

    return Depends(_dependency)
