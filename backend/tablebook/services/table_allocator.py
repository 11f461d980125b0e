"""Assign physical tables to a party."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from tablebook.schemas.booking_config import TableSpec


@dataclass(slots=True, frozen=True)
class Allocation:
    """Outcome of an allocation attempt.

    ``tables`` is empty when the party cannot be seated. ``free_capacity`` is
    the summed capacity of the unoccupied active tables that were considered.
    """

    tables: tuple[int, ...]
    free_capacity: int

    @property
    def feasible(self) -> bool:
        return bool(self.tables)


def free_tables(
    tables: Iterable[TableSpec], occupied: Collection[int]
) -> list[TableSpec]:
    """Active, unoccupied tables ordered by capacity then number."""
    return sorted(
        (table for table in tables if table.is_active and table.number not in occupied),
        key=lambda table: (table.capacity, table.number),
    )


def allocate_tables(
    tables: Iterable[TableSpec],
    occupied: Collection[int],
    requested_guests: int,
) -> Allocation:
    """Pick tables for ``requested_guests``.

    Small tables are combined first: every free table no larger than the
    remaining party is taken in ascending capacity order. If that leaves guests
    unseated, the partial combination is dropped in favour of the smallest
    single table that fits the whole party. Ties are broken by table number,
    so the result only depends on the inputs.
    """
    if requested_guests <= 0:
        raise ValueError("requested_guests must be a positive integer")

    candidates = free_tables(tables, occupied)
    free_capacity = sum(table.capacity for table in candidates)
    if free_capacity < requested_guests:
        return Allocation(tables=(), free_capacity=free_capacity)

    remaining = requested_guests
    selected: list[TableSpec] = []
    for table in candidates:
        if remaining <= 0 or table.capacity > remaining:
            break
        selected.append(table)
        remaining -= table.capacity

    if remaining > 0:
        single = next(
            (table for table in candidates if table.capacity >= requested_guests),
            None,
        )
        if single is None:
            return Allocation(tables=(), free_capacity=free_capacity)
        selected = [single]

    return Allocation(
        tables=tuple(table.number for table in selected),
        free_capacity=free_capacity,
    )
