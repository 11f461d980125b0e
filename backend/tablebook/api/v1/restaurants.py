"""Restaurant, configuration and availability API."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.api import deps
from tablebook.schemas.availability import DayAvailability
from tablebook.schemas.booking import BookingRead
from tablebook.schemas.booking_config import BookingConfig
from tablebook.schemas.restaurant import RestaurantCreate, RestaurantRead
from tablebook.services import (
    availability_service,
    booking_service,
    restaurant_service,
)

router = APIRouter()


@router.post(
    "",
    response_model=RestaurantRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register restaurant",
)
async def create_restaurant(
    payload: RestaurantCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> RestaurantRead:
    try:
        restaurant = await restaurant_service.create_restaurant(session, payload=payload)
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return RestaurantRead.model_validate(restaurant)


@router.get("/{restaurant_id}", response_model=RestaurantRead, summary="Get restaurant")
async def get_restaurant(
    restaurant_id: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> RestaurantRead:
    restaurant = await restaurant_service.find_restaurant_by_id(session, restaurant_id)
    if restaurant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found"
        )
    return RestaurantRead.model_validate(restaurant)


@router.get(
    "/{restaurant_id}/booking-config",
    response_model=BookingConfig,
    summary="Get booking configuration",
)
async def get_booking_config(
    restaurant_id: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingConfig:
    try:
        restaurant = await restaurant_service.get_restaurant(session, restaurant_id)
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return restaurant_service.load_booking_config(restaurant)


@router.put(
    "/{restaurant_id}/booking-config",
    response_model=BookingConfig,
    summary="Replace booking configuration",
)
async def update_booking_config(
    restaurant_id: str,
    payload: BookingConfig,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingConfig:
    try:
        restaurant = await restaurant_service.update_booking_config(
            session, restaurant_id=restaurant_id, config=payload
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return restaurant_service.load_booking_config(restaurant)


@router.get(
    "/{restaurant_id}/availability",
    response_model=DayAvailability,
    summary="Free table capacity per time slot",
)
async def get_availability(
    restaurant_id: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    day: Annotated[date, Query(alias="date")],
) -> DayAvailability:
    try:
        return await availability_service.get_availability(
            session, restaurant_id=restaurant_id, day=day
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc


@router.get(
    "/{restaurant_id}/bookings",
    response_model=list[BookingRead],
    summary="List restaurant bookings",
)
async def list_restaurant_bookings(
    restaurant_id: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[BookingRead]:
    try:
        bookings = await booking_service.list_restaurant_bookings(
            session,
            restaurant_id=restaurant_id,
            start_date=start_date,
            end_date=end_date,
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return [BookingRead.model_validate(booking) for booking in bookings]
