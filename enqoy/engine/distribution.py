"""
enqoy.engine.distribution — Groups → Restaurants, Tables & Seats
==================================================================

Pure planning step; :mod:`enqoy.services.pairing_service` persists the plan.

1. Total restaurant capacity must cover every guest.
2. Groups are placed largest first, each into the restaurant with the most
   free capacity that can still hold it whole.
3. Every group gets its own table (``Table 1``, ``Table 2`` … per
   restaurant) sized to the group; seats are numbered from 1.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class InsufficientCapacityError(Exception):
    """The restaurants cannot seat the groups."""


@dataclass(frozen=True, slots=True)
class Venue:
    id: str
    name: str
    capacity: int


@dataclass
class TablePlan:
    name: str
    group_name: str
    seats: list[tuple[str, int]] = field(default_factory=list)  # (guest_id, seat_number)

    @property
    def capacity(self) -> int:
        return len(self.seats)


@dataclass
class RestaurantPlan:
    venue: Venue
    tables: list[TablePlan] = field(default_factory=list)

    @property
    def total_guests(self) -> int:
        return sum(t.capacity for t in self.tables)

    @property
    def free_capacity(self) -> int:
        return self.venue.capacity - self.total_guests


def distribute(
    groups: Sequence[tuple[str, Sequence[str]]],
    venues: Sequence[Venue],
) -> list[RestaurantPlan]:
    """Seat named guest groups across *venues*.

    *groups* is a sequence of ``(group_name, guest_ids)``.

    Raises
    ------
    InsufficientCapacityError
        If there are no groups or venues, total capacity is too small, or a
        group fits in no single restaurant.
    """
    if not groups:
        raise InsufficientCapacityError("No groups to distribute")
    if not venues:
        raise InsufficientCapacityError("No restaurants available")

    total_guests = sum(len(ids) for _, ids in groups)
    total_capacity = sum(v.capacity for v in venues)
    if total_capacity < total_guests:
        raise InsufficientCapacityError(
            f"Insufficient restaurant capacity. Need {total_guests} seats, "
            f"but only {total_capacity} available."
        )

    plans = [RestaurantPlan(venue=v) for v in venues]
    ordered = sorted(groups, key=lambda g: len(g[1]), reverse=True)

    for group_name, guest_ids in ordered:
        fitting = [p for p in plans if p.free_capacity >= len(guest_ids)]
        if not fitting:
            raise InsufficientCapacityError(
                f"{group_name} ({len(guest_ids)} guests) does not fit in any single restaurant"
            )
        # max() keeps the first restaurant on ties
        target = max(fitting, key=lambda p: p.free_capacity)
        table = TablePlan(
            name=f"Table {len(target.tables) + 1}",
            group_name=group_name,
            seats=[(gid, seat) for seat, gid in enumerate(guest_ids, start=1)],
        )
        target.tables.append(table)
        logger.debug("%s → %s %s", group_name, target.venue.name, table.name)

    logger.info(
        "Distributed %d guest(s) in %d group(s) across %d restaurant(s)",
        total_guests, len(groups), sum(1 for p in plans if p.tables),
    )
    return plans
