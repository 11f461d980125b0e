"""Read-side helpers that compute which tables existing bookings hold."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.models.booking import Booking, BookingStatus


@dataclass(slots=True, frozen=True)
class SlotOccupancy:
    """Tables and guests held by non-cancelled bookings for one slot."""

    occupied_table_numbers: frozenset[int]
    bookings: tuple[Booking, ...]

    @property
    def booked_guests(self) -> int:
        return sum(booking.guests for booking in self.bookings)


EMPTY_OCCUPANCY = SlotOccupancy(occupied_table_numbers=frozenset(), bookings=())


def _occupancy_from(bookings: Sequence[Booking]) -> SlotOccupancy:
    occupied: set[int] = set()
    for booking in bookings:
        occupied.update(booking.tables or [])
    return SlotOccupancy(occupied_table_numbers=frozenset(occupied), bookings=tuple(bookings))


async def find_bookings_by_restaurant_date_range(
    session: AsyncSession,
    *,
    restaurant_id: str,
    start_date: date,
    end_date: date,
    time: str | None = None,
    include_cancelled: bool = False,
) -> list[Booking]:
    """Return bookings dated within ``[start_date, end_date)``."""
    stmt = select(Booking).where(
        Booking.restaurant_id == restaurant_id,
        Booking.date >= start_date,
        Booking.date < end_date,
    )
    if time is not None:
        stmt = stmt.where(Booking.time == time)
    if not include_cancelled:
        stmt = stmt.where(Booking.status != BookingStatus.CANCELLED)
    stmt = stmt.order_by(Booking.date.asc(), Booking.time.asc(), Booking.created_at.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def aggregate_slot(
    session: AsyncSession,
    *,
    restaurant_id: str,
    booking_date: date,
    time: str,
) -> SlotOccupancy:
    """Occupancy for the exact ``(booking_date, time)`` slot."""
    bookings = await find_bookings_by_restaurant_date_range(
        session,
        restaurant_id=restaurant_id,
        start_date=booking_date,
        end_date=booking_date + timedelta(days=1),
        time=time,
    )
    return _occupancy_from(bookings)


async def aggregate_day(
    session: AsyncSession,
    *,
    restaurant_id: str,
    booking_date: date,
) -> dict[str, SlotOccupancy]:
    """Occupancy for every hour that has bookings on ``booking_date``."""
    bookings = await find_bookings_by_restaurant_date_range(
        session,
        restaurant_id=restaurant_id,
        start_date=booking_date,
        end_date=booking_date + timedelta(days=1),
    )
    grouped: dict[str, list[Booking]] = defaultdict(list)
    for booking in bookings:
        grouped[booking.time].append(booking)
    return {hour: _occupancy_from(items) for hour, items in grouped.items()}
