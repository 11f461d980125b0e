"""Restaurant lookup and booking configuration management."""
from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.models.booking import Booking
from tablebook.models.restaurant import Restaurant
from tablebook.schemas.booking_config import (
    WEEKDAYS,
    BookingConfig,
    RegularSchedule,
    TableSpec,
    TimeSlot,
)
from tablebook.schemas.restaurant import RestaurantCreate
from tablebook.services import occupancy_service
from tablebook.services.errors import RestaurantAlreadyExists, RestaurantNotFound

logger = logging.getLogger(__name__)

_DEFAULT_HOURS = ("13:00", "14:00", "20:00", "21:00")
_DEFAULT_SLOT_CAPACITY = 50


def default_booking_config() -> BookingConfig:
    """Configuration given to restaurants registered without one."""
    slots = tuple(TimeSlot(hour=hour, capacity=_DEFAULT_SLOT_CAPACITY) for hour in _DEFAULT_HOURS)
    tables = tuple(TableSpec(number=number, capacity=4) for number in range(1, 5)) + tuple(
        TableSpec(number=number, capacity=6) for number in range(5, 7)
    )
    return BookingConfig(
        regular_schedule=RegularSchedule(**{day: slots for day in WEEKDAYS}),
        tables=tables,
        min_guests_per_booking=1,
        max_guests_per_booking=10,
        advance_booking_days=30,
    )


def restaurant_today(restaurant: Restaurant) -> dt.date:
    """Current calendar date in the restaurant's timezone."""
    try:
        tz = ZoneInfo(restaurant.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown timezone %r for restaurant %s; using UTC",
            restaurant.timezone,
            restaurant.id,
        )
        tz = dt.UTC
    return dt.datetime.now(tz).date()


def load_booking_config(restaurant: Restaurant) -> BookingConfig:
    """Parse the stored configuration into its validated snapshot."""
    return BookingConfig.model_validate(restaurant.booking_config)


async def find_restaurant_by_id(
    session: AsyncSession, restaurant_id: str
) -> Restaurant | None:
    return await session.get(Restaurant, restaurant_id)


async def get_restaurant(
    session: AsyncSession,
    restaurant_id: str,
    *,
    require_active: bool = False,
) -> Restaurant:
    """Return a restaurant or raise ``RestaurantNotFound``."""
    restaurant = await find_restaurant_by_id(session, restaurant_id)
    if restaurant is None or (require_active and not restaurant.is_active):
        raise RestaurantNotFound(restaurant_id)
    return restaurant


async def create_restaurant(
    session: AsyncSession, *, payload: RestaurantCreate
) -> Restaurant:
    if await find_restaurant_by_id(session, payload.id) is not None:
        raise RestaurantAlreadyExists(payload.id)

    config = payload.booking_config or default_booking_config()
    restaurant = Restaurant(
        id=payload.id,
        name=payload.name,
        timezone=payload.timezone,
        contact_phone=payload.contact_phone,
        contact_email=payload.contact_email,
        address=payload.address,
        booking_config=config.model_dump(mode="json"),
    )
    session.add(restaurant)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise RestaurantAlreadyExists(payload.id) from exc
    await session.refresh(restaurant)
    logger.info("Registered restaurant %s", restaurant.id)
    return restaurant


def _unseatable_tables(
    config: BookingConfig, bookings: Sequence[Booking]
) -> list[int]:
    """Held table numbers that ``config`` would deactivate or shrink below the party."""
    active = {table.number: table.capacity for table in config.active_tables}
    affected: set[int] = set()
    for booking in bookings:
        held = booking.tables or []
        missing = [number for number in held if number not in active]
        if missing:
            affected.update(missing)
        elif sum(active[number] for number in held) < booking.guests:
            affected.update(held)
    return sorted(affected)


async def update_booking_config(
    session: AsyncSession,
    *,
    restaurant_id: str,
    config: BookingConfig,
    today: dt.date | None = None,
) -> Restaurant:
    """Replace a restaurant's configuration snapshot.

    Tables are referenced by historical bookings, so a table number that exists
    today must still be present in the new configuration. Tables held by
    upcoming non-cancelled bookings must stay active and keep enough seats for
    the parties sitting at them.
    """
    restaurant = await get_restaurant(session, restaurant_id)
    current = load_booking_config(restaurant)
    kept_numbers = {table.number for table in config.tables}
    removed = sorted(
        table.number for table in current.tables if table.number not in kept_numbers
    )
    if removed:
        raise ValueError(
            "Tables cannot be removed; deactivate them instead "
            f"(missing: {', '.join(str(number) for number in removed)})"
        )

    today = today or restaurant_today(restaurant)
    upcoming = await occupancy_service.find_bookings_by_restaurant_date_range(
        session,
        restaurant_id=restaurant.id,
        start_date=today,
        end_date=dt.date.max,
    )
    affected = _unseatable_tables(config, upcoming)
    if affected:
        raise ValueError(
            "Tables held by upcoming bookings must stay active with enough seats "
            f"(tables: {', '.join(str(number) for number in affected)})"
        )

    restaurant.booking_config = config.model_dump(mode="json")
    await session.commit()
    await session.refresh(restaurant)
    logger.info(
        "Updated booking configuration for %s (%d active tables, %d seats)",
        restaurant.id,
        len(config.active_tables),
        config.total_active_capacity,
    )
    return restaurant
