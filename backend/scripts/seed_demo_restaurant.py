"""Seed the demo restaurant used by local development."""
from __future__ import annotations

import asyncio

from tablebook.db.session import get_sessionmaker
from tablebook.schemas.booking_config import (
    BookingConfig,
    RegularSchedule,
    SpecialDate,
    TableSpec,
    TimeSlot,
)
from tablebook.schemas.restaurant import RestaurantCreate
from tablebook.services import restaurant_service

DEMO_RESTAURANT_ID = "demo-restaurant"


def demo_booking_config() -> BookingConfig:
    lunch = (TimeSlot(hour="12:00", capacity=40), TimeSlot(hour="13:30", capacity=40))
    dinner = (
        TimeSlot(hour="19:00", capacity=50),
        TimeSlot(hour="20:30", capacity=50),
        TimeSlot(hour="22:00", capacity=30),
    )
    week = lunch + dinner
    return BookingConfig(
        regular_schedule=RegularSchedule(
            tuesday=week,
            wednesday=week,
            thursday=week,
            friday=week,
            saturday=week,
            sunday=lunch,
        ),
        special_dates=(
            SpecialDate(
                date="2026-12-24",
                time_slots=(TimeSlot(hour="19:00", capacity=60),),
                note="Christmas Eve tasting menu",
            ),
            SpecialDate(date="2026-12-25", is_holiday=True, note="Closed for Christmas"),
        ),
        tables=tuple(TableSpec(number=number, capacity=2) for number in range(1, 5))
        + tuple(TableSpec(number=number, capacity=4) for number in range(5, 11))
        + (TableSpec(number=11, capacity=6), TableSpec(number=12, capacity=8)),
        min_guests_per_booking=1,
        max_guests_per_booking=12,
        advance_booking_days=60,
        closed_days=["monday"],
        special_notes="Large parties should call ahead.",
    )


async def seed_demo_restaurant() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        if await restaurant_service.find_restaurant_by_id(session, DEMO_RESTAURANT_ID):
            print(f"Restaurant {DEMO_RESTAURANT_ID!r} already exists.")
            return
        restaurant = await restaurant_service.create_restaurant(
            session,
            payload=RestaurantCreate(
                id=DEMO_RESTAURANT_ID,
                name="La Maison Gourmet",
                timezone="Europe/Paris",
                contact_phone="+33 1 23 45 67 89",
                contact_email="contact@lamaison.example.com",
                address="12 Rue de la Paix, 75002 Paris",
                booking_config=demo_booking_config(),
            ),
        )
        print(f"Seeded restaurant {restaurant.id!r}.")


def main() -> None:
    asyncio.run(seed_demo_restaurant())


if __name__ == "__main__":
    main()
