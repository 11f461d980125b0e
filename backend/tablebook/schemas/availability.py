"""Availability projection schemas."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class AvailableTable(BaseModel):
    number: int
    capacity: int


class SlotAvailability(BaseModel):
    """Free table capacity for one hour."""

    hour: str
    nominal_capacity: int
    capacity: int
    booked_guests: int
    available_tables: list[AvailableTable] = Field(default_factory=list)


class DayAvailability(BaseModel):
    """Availability for every slot offered on a date."""

    restaurant_id: str
    date: dt.date
    weekday: str
    is_closed: bool
    special_date_note: str | None = None
    time_slots: list[SlotAvailability] = Field(default_factory=list)
