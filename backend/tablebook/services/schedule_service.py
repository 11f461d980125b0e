"""Resolve the bookable time slots for a calendar date."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from tablebook.schemas.booking_config import (
    WEEKDAYS,
    BookingConfig,
    SpecialDate,
    TimeSlot,
)


@dataclass(slots=True, frozen=True)
class ResolvedSchedule:
    """Slots offered on one date and where they came from."""

    date: date
    weekday: str
    time_slots: tuple[TimeSlot, ...]
    special_date: SpecialDate | None = None
    closed_day: bool = False

    @property
    def is_closed(self) -> bool:
        return self.closed_day or not self.time_slots

    def find_slot(self, hour: str) -> TimeSlot | None:
        for slot in self.time_slots:
            if slot.hour == hour:
                return slot
        return None


def weekday_name(day: date) -> str:
    """Return the lowercase English weekday name, independent of locale."""
    return WEEKDAYS[day.weekday()]


def resolve_schedule(config: BookingConfig, day: date) -> ResolvedSchedule:
    """Return the ordered slots for ``day``.

    A weekday listed in ``closed_days`` is closed regardless of special dates.
    Otherwise a special date for the same calendar day replaces the weekly
    schedule entirely, and an empty special date closes the day.
    """
    weekday = weekday_name(day)
    if weekday in config.closed_days:
        return ResolvedSchedule(date=day, weekday=weekday, time_slots=(), closed_day=True)

    special = config.special_date_for(day)
    if special is not None:
        return ResolvedSchedule(
            date=day,
            weekday=weekday,
            time_slots=special.time_slots,
            special_date=special,
        )
    return ResolvedSchedule(
        date=day,
        weekday=weekday,
        time_slots=config.regular_schedule.for_weekday(weekday),
    )
