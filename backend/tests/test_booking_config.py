"""Booking configuration validation tests."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from tablebook.schemas.booking_config import (
    BookingConfig,
    RegularSchedule,
    SpecialDate,
    TableSpec,
    TimeSlot,
)
from tablebook.services.restaurant_service import default_booking_config


def test_closed_days_are_normalised() -> None:
    config = BookingConfig(max_guests_per_booking=4, closed_days=["Sunday", " MONDAY"])
    assert config.closed_days == frozenset({"sunday", "monday"})
    assert config.model_dump(mode="json")["closed_days"] == ["monday", "sunday"]


def test_unknown_weekday_is_rejected() -> None:
    with pytest.raises(ValidationError):
        BookingConfig(max_guests_per_booking=4, closed_days=["lundi"])


def test_duplicate_table_numbers_are_rejected() -> None:
    with pytest.raises(ValidationError):
        BookingConfig(
            max_guests_per_booking=4,
            tables=(TableSpec(number=1, capacity=2), TableSpec(number=1, capacity=4)),
        )


def test_duplicate_special_dates_are_rejected() -> None:
    day = date(2030, 12, 25)
    with pytest.raises(ValidationError):
        BookingConfig(
            max_guests_per_booking=4,
            special_dates=(SpecialDate(date=day), SpecialDate(date=day, note="again")),
        )


def test_guest_bounds_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        BookingConfig(min_guests_per_booking=6, max_guests_per_booking=4)


def test_duplicate_hours_in_a_day_are_rejected() -> None:
    slot = TimeSlot(hour="20:00", capacity=10)
    with pytest.raises(ValidationError):
        RegularSchedule(friday=(slot, slot))


@pytest.mark.parametrize("hour", ["24:00", "7:30", "12:60", "noon"])
def test_malformed_hours_are_rejected(hour: str) -> None:
    with pytest.raises(ValidationError):
        TimeSlot(hour=hour, capacity=10)


def test_active_capacity_ignores_inactive_tables() -> None:
    config = BookingConfig(
        max_guests_per_booking=4,
        tables=(
            TableSpec(number=1, capacity=4),
            TableSpec(number=2, capacity=6, is_active=False),
        ),
    )
    assert [table.number for table in config.active_tables] == [1]
    assert config.total_active_capacity == 4


def test_default_configuration() -> None:
    config = default_booking_config()
    assert [slot.hour for slot in config.regular_schedule.monday] == [
        "13:00",
        "14:00",
        "20:00",
        "21:00",
    ]
    assert config.total_active_capacity == 28
    assert (config.min_guests_per_booking, config.max_guests_per_booking) == (1, 10)
    assert config.advance_booking_days == 30
