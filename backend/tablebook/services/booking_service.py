"""Booking creation, lifecycle and lookup services."""
from __future__ import annotations

import datetime as dt
import logging
import secrets
import string
import uuid
from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tablebook.core.config import get_settings
from tablebook.models.booking import Booking, BookingStatus, BookingTableClaim
from tablebook.schemas.booking_config import BookingConfig
from tablebook.services import occupancy_service, restaurant_service
from tablebook.services.errors import (
    AlreadyCancelled,
    BookingConflict,
    BookingNotFound,
    BookingWindowExceeded,
    ConfirmationCodeCollision,
    GuestCountOutOfRange,
    InsufficientCapacity,
    InvalidStatusTransition,
    SlotUnavailable,
)
from tablebook.services.schedule_service import resolve_schedule
from tablebook.services.table_allocator import Allocation, allocate_tables

logger = logging.getLogger(__name__)

CONFIRMATION_CODE_LENGTH = 8
_CONFIRMATION_CODE_ALPHABET = string.ascii_uppercase + string.digits

_ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def generate_confirmation_code() -> str:
    return "".join(
        secrets.choice(_CONFIRMATION_CODE_ALPHABET)
        for _ in range(CONFIRMATION_CODE_LENGTH)
    )


def _validate_guest_count(config: BookingConfig, guests: int) -> None:
    if not config.min_guests_per_booking <= guests <= config.max_guests_per_booking:
        raise GuestCountOutOfRange(
            guests, config.min_guests_per_booking, config.max_guests_per_booking
        )


def _validate_booking_window(
    config: BookingConfig, booking_date: dt.date, today: dt.date
) -> None:
    last_day = today + dt.timedelta(days=config.advance_booking_days)
    if not today <= booking_date <= last_day:
        raise BookingWindowExceeded(config.advance_booking_days)


async def _confirmation_code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(
        select(Booking.id).where(Booking.confirmation_code == code)
    )
    return result.first() is not None


async def _generate_unique_confirmation_code(
    session: AsyncSession, *, attempts: int
) -> str:
    for _ in range(attempts):
        candidate = generate_confirmation_code()
        if not await _confirmation_code_exists(session, candidate):
            return candidate
    logger.error("No free confirmation code after %d attempts", attempts)
    raise ConfirmationCodeCollision("Failed to generate a unique confirmation code")


async def _allocate(
    session: AsyncSession,
    *,
    config: BookingConfig,
    restaurant_id: str,
    booking_date: dt.date,
    time: str,
    guests: int,
) -> Allocation:
    occupancy = await occupancy_service.aggregate_slot(
        session, restaurant_id=restaurant_id, booking_date=booking_date, time=time
    )
    allocation = allocate_tables(config.tables, occupancy.occupied_table_numbers, guests)
    if not allocation.feasible:
        raise InsufficientCapacity(allocation.free_capacity)
    return allocation


async def create_booking(
    session: AsyncSession,
    *,
    restaurant_id: str,
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    date: dt.date,
    time: str,
    guests: int,
    special_requests: str | None = None,
    today: dt.date | None = None,
) -> Booking:
    """Seat a party and persist the booking with its assigned tables.

    New bookings start as ``pending``. The table claims written alongside the
    booking are unique per slot, so a concurrent booking that grabbed the same
    tables makes the commit fail; the slot is then re-read and re-allocated up
    to ``booking_commit_attempts`` times.
    """
    restaurant = await restaurant_service.get_restaurant(
        session, restaurant_id, require_active=True
    )
    config = restaurant_service.load_booking_config(restaurant)
    restaurant_key = restaurant.id
    today = today or restaurant_service.restaurant_today(restaurant)

    _validate_guest_count(config, guests)
    _validate_booking_window(config, date, today)

    schedule = resolve_schedule(config, date)
    if schedule.is_closed:
        raise SlotUnavailable("Restaurant is closed on this day")
    if schedule.find_slot(time) is None:
        raise SlotUnavailable("Selected time slot is not available")

    settings = get_settings()
    attempts = settings.booking_commit_attempts
    for attempt in range(1, attempts + 1):
        allocation = await _allocate(
            session,
            config=config,
            restaurant_id=restaurant_key,
            booking_date=date,
            time=time,
            guests=guests,
        )
        # Separate retry budget from the claim attempts.
        code = await _generate_unique_confirmation_code(
            session, attempts=settings.confirmation_code_attempts
        )

        booking = Booking(
            restaurant_id=restaurant_key,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            date=date,
            time=time,
            guests=guests,
            tables=list(allocation.tables),
            status=BookingStatus.PENDING,
            special_requests=special_requests,
            confirmation_code=code,
        )
        booking.table_claims = [
            BookingTableClaim(
                restaurant_id=restaurant_key,
                date=date,
                time=time,
                table_number=number,
            )
            for number in allocation.tables
        ]
        session.add(booking)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.warning(
                "Table claim conflict for %s on %s %s (attempt %d of %d)",
                restaurant_key,
                date.isoformat(),
                time,
                attempt,
                attempts,
            )
            continue

        await session.refresh(booking)
        logger.info(
            "Booking %s created for %s on %s %s: %d guests at tables %s",
            booking.confirmation_code,
            restaurant_key,
            date.isoformat(),
            time,
            guests,
            booking.tables,
        )
        return booking

    # Raises InsufficientCapacity when the slot really is full now.
    await _allocate(
        session,
        config=config,
        restaurant_id=restaurant_key,
        booking_date=date,
        time=time,
        guests=guests,
    )
    raise BookingConflict("Could not secure tables for this time slot; please try again")


async def get_booking(session: AsyncSession, booking_id: uuid.UUID) -> Booking | None:
    return await session.get(Booking, booking_id)


async def _require_booking(session: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await get_booking(session, booking_id)
    if booking is None:
        raise BookingNotFound("Booking not found")
    return booking


async def get_booking_by_code(session: AsyncSession, code: str) -> Booking | None:
    """Look a booking up by its confirmation code, with its restaurant loaded."""
    result = await session.execute(
        select(Booking)
        .options(selectinload(Booking.restaurant))
        .where(Booking.confirmation_code == code.strip().upper())
    )
    return result.scalar_one_or_none()


async def _release_tables(session: AsyncSession, booking: Booking) -> None:
    await session.execute(
        delete(BookingTableClaim).where(BookingTableClaim.booking_id == booking.id)
    )


def _validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target == current:
        if current == BookingStatus.CANCELLED:
            raise AlreadyCancelled()
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def update_booking_status(
    session: AsyncSession,
    *,
    booking_id: uuid.UUID,
    status: BookingStatus,
) -> Booking:
    booking = await _require_booking(session, booking_id)
    _validate_status_transition(booking.status, status)
    if status == booking.status:
        return booking

    previous = booking.status
    if status == BookingStatus.CANCELLED:
        await _release_tables(session, booking)
    booking.status = status
    await session.commit()
    await session.refresh(booking)
    logger.info(
        "Booking %s moved from %s to %s",
        booking.confirmation_code,
        previous.value,
        status.value,
    )
    return booking


async def cancel_booking(session: AsyncSession, *, booking_id: uuid.UUID) -> Booking:
    """Cancel a booking and free its tables for the slot."""
    return await update_booking_status(
        session, booking_id=booking_id, status=BookingStatus.CANCELLED
    )


async def list_restaurant_bookings(
    session: AsyncSession,
    *,
    restaurant_id: str,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
) -> Sequence[Booking]:
    """Non-cancelled bookings between two dates, both inclusive."""
    if start_date and end_date and start_date > end_date:
        raise ValueError("start_date must be before or equal to end_date")
    await restaurant_service.get_restaurant(session, restaurant_id)

    if start_date and end_date:
        return await occupancy_service.find_bookings_by_restaurant_date_range(
            session,
            restaurant_id=restaurant_id,
            start_date=start_date,
            end_date=end_date + dt.timedelta(days=1),
        )

    stmt = select(Booking).where(
        Booking.restaurant_id == restaurant_id,
        Booking.status != BookingStatus.CANCELLED,
    )
    if start_date:
        stmt = stmt.where(Booking.date >= start_date)
    if end_date:
        stmt = stmt.where(Booking.date <= end_date)
    stmt = stmt.order_by(Booking.date.asc(), Booking.time.asc())
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_customer_bookings(
    session: AsyncSession,
    *,
    email: str,
    today: dt.date | None = None,
) -> Sequence[Booking]:
    """Upcoming bookings made with ``email``, soonest first."""
    today = today or dt.datetime.now(dt.UTC).date()
    result = await session.execute(
        select(Booking)
        .options(selectinload(Booking.restaurant))
        .where(
            func.lower(Booking.customer_email) == email.strip().lower(),
            Booking.date >= today,
        )
        .order_by(Booking.date.asc(), Booking.time.asc())
    )
    return result.scalars().all()
