"""Immutable value types describing a restaurant's booking configuration."""

from __future__ import annotations

import datetime as dt

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_HOUR_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TableSpec(BaseModel):
    """A physical table."""

    number: int = Field(ge=1)
    capacity: int = Field(gt=0)
    is_active: bool = True

    model_config = ConfigDict(frozen=True)


class TimeSlot(BaseModel):
    """A bookable hour with its nominal aggregate capacity."""

    hour: str = Field(pattern=_HOUR_PATTERN)
    capacity: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


def _ensure_unique_hours(slots: tuple[TimeSlot, ...]) -> tuple[TimeSlot, ...]:
    hours = [slot.hour for slot in slots]
    if len(hours) != len(set(hours)):
        raise ValueError("Time slot hours must be unique within a day")
    return slots


class SpecialDate(BaseModel):
    """Replaces the weekly schedule for one calendar day."""

    date: dt.date
    time_slots: tuple[TimeSlot, ...] = ()
    is_holiday: bool = False
    note: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(frozen=True)

    @field_validator("time_slots")
    @classmethod
    def _unique_hours(cls, value: tuple[TimeSlot, ...]) -> tuple[TimeSlot, ...]:
        return _ensure_unique_hours(value)


class RegularSchedule(BaseModel):
    """Ordered slot lists for each weekday."""

    monday: tuple[TimeSlot, ...] = ()
    tuesday: tuple[TimeSlot, ...] = ()
    wednesday: tuple[TimeSlot, ...] = ()
    thursday: tuple[TimeSlot, ...] = ()
    friday: tuple[TimeSlot, ...] = ()
    saturday: tuple[TimeSlot, ...] = ()
    sunday: tuple[TimeSlot, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator(*WEEKDAYS)
    @classmethod
    def _unique_hours(cls, value: tuple[TimeSlot, ...]) -> tuple[TimeSlot, ...]:
        return _ensure_unique_hours(value)

    def for_weekday(self, weekday: str) -> tuple[TimeSlot, ...]:
        return getattr(self, weekday)


class BookingConfig(BaseModel):
    """Snapshot of everything the allocation engine needs for one restaurant."""

    regular_schedule: RegularSchedule = Field(default_factory=RegularSchedule)
    special_dates: tuple[SpecialDate, ...] = ()
    tables: tuple[TableSpec, ...] = ()
    min_guests_per_booking: int = Field(default=1, ge=1)
    max_guests_per_booking: int = Field(ge=1)
    advance_booking_days: int = Field(default=30, ge=0)
    closed_days: frozenset[str] = frozenset()
    default_booking_duration: int = Field(default=120, gt=0)
    special_notes: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("special_dates")
    @classmethod
    def _unique_special_dates(
        cls, value: tuple[SpecialDate, ...]
    ) -> tuple[SpecialDate, ...]:
        dates = [special.date for special in value]
        if len(dates) != len(set(dates)):
            raise ValueError("Special dates must be unique per calendar day")
        return value

    @field_validator("tables")
    @classmethod
    def _unique_table_numbers(cls, value: tuple[TableSpec, ...]) -> tuple[TableSpec, ...]:
        numbers = [table.number for table in value]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Table numbers must be unique within a restaurant")
        return value

    @field_validator("closed_days", mode="before")
    @classmethod
    def _normalize_closed_days(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            return value
        normalized = {str(day).strip().lower() for day in value}
        unknown = sorted(normalized.difference(WEEKDAYS))
        if unknown:
            raise ValueError(f"Unknown weekday name(s): {', '.join(unknown)}")
        return frozenset(normalized)

    @field_serializer("closed_days")
    def _serialize_closed_days(self, value: frozenset[str]) -> list[str]:
        return [day for day in WEEKDAYS if day in value]

    @model_validator(mode="after")
    def _guest_bounds(self) -> "BookingConfig":
        if self.min_guests_per_booking > self.max_guests_per_booking:
            raise ValueError(
                "min_guests_per_booking must not exceed max_guests_per_booking"
            )
        return self

    @property
    def active_tables(self) -> tuple[TableSpec, ...]:
        return tuple(table for table in self.tables if table.is_active)

    @property
    def total_active_capacity(self) -> int:
        return sum(table.capacity for table in self.active_tables)

    def special_date_for(self, day: dt.date) -> SpecialDate | None:
        for special in self.special_dates:
            if special.date == day:
                return special
        return None
