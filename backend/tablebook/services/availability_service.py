"""Per-slot free capacity for a restaurant on a given date."""
from __future__ import annotations

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.schemas.availability import (
    AvailableTable,
    DayAvailability,
    SlotAvailability,
)
from tablebook.services import occupancy_service, restaurant_service
from tablebook.services.schedule_service import resolve_schedule
from tablebook.services.table_allocator import free_tables


async def get_availability(
    session: AsyncSession,
    *,
    restaurant_id: str,
    day: date,
) -> DayAvailability:
    """Return the bookable capacity of every slot offered on ``day``."""
    restaurant = await restaurant_service.get_restaurant(session, restaurant_id)
    config = restaurant_service.load_booking_config(restaurant)
    schedule = resolve_schedule(config, day)

    availability = DayAvailability(
        restaurant_id=restaurant.id,
        date=day,
        weekday=schedule.weekday,
        is_closed=schedule.is_closed,
        special_date_note=schedule.special_date.note if schedule.special_date else None,
    )
    if schedule.is_closed:
        return availability

    occupancy_by_hour = await occupancy_service.aggregate_day(
        session, restaurant_id=restaurant.id, booking_date=day
    )
    for slot in schedule.time_slots:
        occupancy = occupancy_by_hour.get(slot.hour, occupancy_service.EMPTY_OCCUPANCY)
        available = sorted(
            free_tables(config.tables, occupancy.occupied_table_numbers),
            key=lambda table: table.number,
        )
        availability.time_slots.append(
            SlotAvailability(
                hour=slot.hour,
                nominal_capacity=slot.capacity,
                capacity=sum(table.capacity for table in available),
                booked_guests=occupancy.booked_guests,
                available_tables=[
                    AvailableTable(number=table.number, capacity=table.capacity)
                    for table in available
                ],
            )
        )
    return availability
