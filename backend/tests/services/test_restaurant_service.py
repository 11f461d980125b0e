"""Tests for restaurant configuration updates."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.schemas.booking_config import BookingConfig, TableSpec
from tablebook.services import availability_service, booking_service, restaurant_service

pytestmark = pytest.mark.asyncio

TODAY = date(2030, 1, 7)
DINNER_DAY = TODAY + timedelta(days=2)


async def _book_eight(session: AsyncSession, restaurant_id: str, day: date = DINNER_DAY):
    booking = await booking_service.create_booking(
        session,
        restaurant_id=restaurant_id,
        customer_name="Morgan Large Party",
        customer_email="morgan@example.com",
        customer_phone="555-0142",
        date=day,
        time="20:00",
        guests=8,
        today=TODAY if day >= TODAY else day,
    )
    assert booking.tables == [4]
    return booking


def _with_table_four(config: BookingConfig, **changes: object) -> BookingConfig:
    tables = tuple(
        table.model_copy(update=changes) if table.number == 4 else table
        for table in config.tables
    )
    return config.model_copy(update={"tables": tables})


async def test_held_table_cannot_be_deactivated(
    session: AsyncSession, demo_restaurant: str, booking_config: BookingConfig
) -> None:
    await _book_eight(session, demo_restaurant)

    with pytest.raises(ValueError, match="tables: 4"):
        await restaurant_service.update_booking_config(
            session,
            restaurant_id=demo_restaurant,
            config=_with_table_four(booking_config, is_active=False),
            today=TODAY,
        )

    availability = await availability_service.get_availability(
        session, restaurant_id=demo_restaurant, day=DINNER_DAY
    )
    slot = {slot.hour: slot for slot in availability.time_slots}["13:00"]
    assert slot.capacity == booking_config.total_active_capacity


async def test_held_table_cannot_shrink_below_party(
    session: AsyncSession, demo_restaurant: str, booking_config: BookingConfig
) -> None:
    await _book_eight(session, demo_restaurant)

    with pytest.raises(ValueError, match="tables: 4"):
        await restaurant_service.update_booking_config(
            session,
            restaurant_id=demo_restaurant,
            config=_with_table_four(booking_config, capacity=6),
            today=TODAY,
        )

    grown = await restaurant_service.update_booking_config(
        session,
        restaurant_id=demo_restaurant,
        config=_with_table_four(booking_config, capacity=10),
        today=TODAY,
    )
    assert restaurant_service.load_booking_config(grown).total_active_capacity == 16


async def test_cancelled_and_past_bookings_do_not_pin_tables(
    session: AsyncSession, demo_restaurant: str, booking_config: BookingConfig
) -> None:
    cancelled = await _book_eight(session, demo_restaurant)
    await booking_service.cancel_booking(session, booking_id=cancelled.id)
    await _book_eight(session, demo_restaurant, day=TODAY - timedelta(days=1))

    updated = await restaurant_service.update_booking_config(
        session,
        restaurant_id=demo_restaurant,
        config=_with_table_four(booking_config, is_active=False),
        today=TODAY,
    )
    config = restaurant_service.load_booking_config(updated)
    assert [table.number for table in config.active_tables] == [1, 2, 3]


async def test_unheld_tables_can_still_change(
    session: AsyncSession, demo_restaurant: str, booking_config: BookingConfig
) -> None:
    await _book_eight(session, demo_restaurant)
    tables = tuple(
        table.model_copy(update={"is_active": False}) if table.number == 1 else table
        for table in booking_config.tables
    ) + (TableSpec(number=5, capacity=4),)

    updated = await restaurant_service.update_booking_config(
        session,
        restaurant_id=demo_restaurant,
        config=booking_config.model_copy(update={"tables": tables}),
        today=TODAY,
    )
    config = restaurant_service.load_booking_config(updated)
    assert config.total_active_capacity == 16
