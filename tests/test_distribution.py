"""
tests/test_distribution.py — Groups → Restaurants, Tables & Seats
==================================================================
"""

from __future__ import annotations

import pytest

from enqoy.engine.distribution import InsufficientCapacityError, Venue, distribute


def _ids(prefix: str, n: int) -> list[str]:
    return [f"{prefix}{i}" for i in range(n)]


class TestDistribute:
    def test_single_restaurant(self):
        plans = distribute([("Group 1", _ids("a", 6))], [Venue("r1", "Sequoia", 20)])
        assert len(plans) == 1
        table = plans[0].tables[0]
        assert table.name == "Table 1"
        assert table.group_name == "Group 1"
        assert table.capacity == 6
        assert [seat for _, seat in table.seats] == [1, 2, 3, 4, 5, 6]
        assert plans[0].free_capacity == 14

    def test_largest_group_first_into_most_free(self):
        groups = [("Group 1", _ids("a", 4)), ("Group 2", _ids("b", 6)), ("Group 3", _ids("c", 5))]
        venues = [Venue("r1", "Left", 10), Venue("r2", "Right", 12)]
        plans = distribute(groups, venues)

        right = plans[1]
        left = plans[0]
        assert right.tables[0].group_name == "Group 2"
        assert left.tables[0].group_name == "Group 3"
        # Right has 6 free vs Left's 5
        assert right.tables[1].group_name == "Group 1"
        assert [t.name for t in right.tables] == ["Table 1", "Table 2"]

    def test_ties_go_to_first_restaurant(self):
        plans = distribute([("Group 1", _ids("a", 4))], [Venue("r1", "A", 8), Venue("r2", "B", 8)])
        assert plans[0].tables and not plans[1].tables

    def test_every_guest_seated(self):
        groups = [(f"Group {i}", _ids(f"g{i}-", 6)) for i in range(1, 5)]
        plans = distribute(groups, [Venue("r1", "A", 12), Venue("r2", "B", 12)])
        seated = [gid for p in plans for t in p.tables for gid, _ in t.seats]
        assert len(seated) == 24
        assert len(set(seated)) == 24
        assert all(p.total_guests <= p.venue.capacity for p in plans)


class TestCapacityErrors:
    def test_no_groups(self):
        with pytest.raises(InsufficientCapacityError, match="No groups"):
            distribute([], [Venue("r1", "A", 10)])

    def test_no_venues(self):
        with pytest.raises(InsufficientCapacityError, match="No restaurants"):
            distribute([("Group 1", ["a"])], [])

    def test_total_capacity(self):
        with pytest.raises(InsufficientCapacityError, match="Need 12 seats, but only 10 available"):
            distribute([("Group 1", _ids("a", 6)), ("Group 2", _ids("b", 6))], [Venue("r1", "A", 10)])

    def test_group_fits_nowhere(self):
        groups = [("Group 1", _ids("a", 5)), ("Group 2", _ids("b", 5))]
        with pytest.raises(InsufficientCapacityError, match="does not fit"):
            distribute(groups, [Venue("r1", "A", 6), Venue("r2", "B", 4)])
