"""Booking API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.api import deps
from tablebook.core.config import get_settings
from tablebook.models.booking import Booking
from tablebook.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    BookingWithRestaurant,
)
from tablebook.schemas.restaurant import RestaurantContact
from tablebook.services import (
    booking_service,
    notification_service,
    restaurant_service,
)

router = APIRouter()

settings = get_settings()

_BOOKING_RATE_DEP = deps.rate_limit(settings.rate_limit_booking, fallback=(20, 60))
_DEFAULT_RATE_DEP = deps.rate_limit(settings.rate_limit_default, fallback=(100, 60))


def _with_restaurant(booking: Booking) -> BookingWithRestaurant:
    restaurant = booking.restaurant
    contact = None
    if restaurant is not None:
        contact = RestaurantContact(
            name=restaurant.name,
            address=restaurant.address,
            phone=restaurant.contact_phone,
            email=restaurant.contact_email,
        )
    base = BookingRead.model_validate(booking)
    return BookingWithRestaurant(**base.model_dump(), restaurant=contact)


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
    dependencies=[_BOOKING_RATE_DEP],
)
async def create_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    background_tasks: BackgroundTasks,
) -> BookingRead:
    try:
        booking = await booking_service.create_booking(session, **payload.model_dump())
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    restaurant = await restaurant_service.get_restaurant(session, booking.restaurant_id)
    notification_service.notify_booking_confirmation(booking, restaurant, background_tasks)
    return BookingRead.model_validate(booking)


@router.get(
    "/confirm/{code}",
    response_model=BookingWithRestaurant,
    summary="Look up booking by confirmation code",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def get_booking_by_code(
    code: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingWithRestaurant:
    booking = await booking_service.get_booking_by_code(session, code)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return _with_restaurant(booking)


@router.get(
    "/customer/{email}",
    response_model=list[BookingWithRestaurant],
    summary="Upcoming bookings for a customer",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def list_customer_bookings(
    email: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[BookingWithRestaurant]:
    bookings = await booking_service.list_customer_bookings(session, email=email)
    return [_with_restaurant(booking) for booking in bookings]


@router.get(
    "/{booking_id}",
    response_model=BookingRead,
    summary="Get booking",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingRead:
    booking = await booking_service.get_booking(session, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return BookingRead.model_validate(booking)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingRead,
    summary="Update booking status",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingRead:
    try:
        booking = await booking_service.update_booking_status(
            session, booking_id=booking_id, status=payload.status
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return BookingRead.model_validate(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingRead,
    summary="Cancel booking",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def cancel_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingRead:
    try:
        booking = await booking_service.cancel_booking(session, booking_id=booking_id)
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return BookingRead.model_validate(booking)
