"""
tests/test_pairing_service.py — Pairing Persistence Service
=============================================================

Runs the service functions against the in-memory SQLite engine from
``conftest.py``.  Guest listing order depends on same-second timestamps,
so assertions compare sets where order is not part of the contract.
"""

from __future__ import annotations

import pytest

from enqoy.engine.distribution import InsufficientCapacityError
from enqoy.engine.grouping import PairingError
from enqoy.services import pairing_service as svc

EVENT = "evt-1"


def _add_guests(engine, n: int, event_id: str = EVENT, **fields) -> list[str]:
    return [
        svc.create_guest(engine, event_id, first_name=f"Guest{i}", last_name="Test", **fields)["id"]
        for i in range(n)
    ]


def _booking(user_id: str, status: str = "confirmed", **profile) -> dict:
    return {
        "id": f"b-{user_id}",
        "userId": user_id,
        "status": status,
        "user": {
            "email": f"{user_id}@example.com",
            "profile": {"firstName": user_id.title(), "lastName": "Doe", **profile},
            "personalityAssessment": {"answers": {"dinnerVibe": "observing"}},
        },
    }


# ===========================================================================
# Guests
# ===========================================================================
class TestGuests:
    def test_create_and_list(self, db_engine):
        guest = svc.create_guest(db_engine, EVENT, first_name="Mona", last_name="Adel", gender="female")
        assert guest["firstName"] == "Mona"
        assert guest["eventId"] == EVENT
        assert guest["hasPersonality"] is False

        listed = svc.list_guests(db_engine, EVENT)
        assert [g["id"] for g in listed] == [guest["id"]]

    def test_guests_scoped_to_event(self, db_engine):
        _add_guests(db_engine, 2)
        _add_guests(db_engine, 3, event_id="evt-2")
        assert len(svc.list_guests(db_engine, EVENT)) == 2
        assert len(svc.list_guests(db_engine, "evt-2")) == 3

    def test_delete_guest(self, db_engine):
        ids = _add_guests(db_engine, 2)
        svc.delete_guest(db_engine, ids[0])
        assert {g["id"] for g in svc.list_guests(db_engine, EVENT)} == {ids[1]}

    def test_delete_missing_guest(self, db_engine):
        with pytest.raises(LookupError, match="Guest not found"):
            svc.delete_guest(db_engine, "nope")

    def test_delete_all_guests(self, db_engine):
        _add_guests(db_engine, 4)
        assert svc.delete_all_guests(db_engine, EVENT, actor_id="admin-1") == 4
        assert svc.list_guests(db_engine, EVENT) == []
        assert svc.audit_log(db_engine, EVENT)[0]["action"] == "delete_all_guests"


class TestImportBookings:
    def test_imports_confirmed_only(self, db_engine):
        result = svc.import_bookings(
            db_engine, EVENT,
            [_booking("u1", gender="male", age=29), _booking("u2", status="pending")],
        )
        assert result["imported"] == 1
        assert result["skipped"] == 1
        assert result["details"]["skipped"] == [{"userId": "u2", "reason": "not confirmed"}]

        (guest,) = svc.list_guests(db_engine, EVENT)
        assert guest["userId"] == "u1"
        assert guest["firstName"] == "U1"
        assert guest["age"] == 29
        assert guest["hasPersonality"] is True

    def test_second_import_skips_existing(self, db_engine):
        svc.import_bookings(db_engine, EVENT, [_booking("u1")])
        result = svc.import_bookings(db_engine, EVENT, [_booking("u1"), _booking("u3")])
        assert result["imported"] == 1
        assert result["details"]["skipped"][0]["reason"] == "already imported"
        assert len(svc.list_guests(db_engine, EVENT)) == 2

    def test_name_falls_back_to_email(self, db_engine):
        booking = _booking("u5")
        booking["user"]["profile"] = {}
        svc.import_bookings(db_engine, EVENT, [booking])
        assert svc.list_guests(db_engine, EVENT)[0]["firstName"] == "u5"


# ===========================================================================
# Restaurants, tables, constraints
# ===========================================================================
class TestRestaurants:
    def test_create_update_delete(self, db_engine):
        r = svc.create_restaurant(db_engine, EVENT, name="Sequoia", capacity_total=20)
        assert r["capacityTotal"] == 20
        assert r["tables"] == []

        updated = svc.update_restaurant(db_engine, r["id"], name="Sequoia Nile", capacity_total=None)
        assert updated["name"] == "Sequoia Nile"
        assert updated["capacityTotal"] == 20

        svc.delete_restaurant(db_engine, r["id"])
        assert svc.list_restaurants(db_engine, EVENT) == []

    def test_tables(self, db_engine):
        r = svc.create_restaurant(db_engine, EVENT, name="Zooba", capacity_total=12)
        t = svc.create_table(db_engine, r["id"], "Table A", 6)
        assert t["restaurantId"] == r["id"]
        assert svc.list_restaurants(db_engine, EVENT)[0]["tables"][0]["name"] == "Table A"

        svc.delete_table(db_engine, t["id"])
        assert svc.list_restaurants(db_engine, EVENT)[0]["tables"] == []

    def test_table_for_missing_restaurant(self, db_engine):
        with pytest.raises(LookupError, match="Restaurant not found"):
            svc.create_table(db_engine, "nope", "T", 4)


class TestConstraints:
    def test_create_and_delete(self, db_engine):
        a, b = _add_guests(db_engine, 2)
        c = svc.create_constraint(
            db_engine, EVENT, type_="not_with",
            subject_guest_ids=[a], target_guest_ids=[b], notes="exes",
        )
        assert c["type"] == "not_with"
        assert c["subjectGuestIds"] == [a]
        assert c["targetGuestIds"] == [b]

        svc.delete_constraint(db_engine, c["id"])
        assert svc.list_constraints(db_engine, EVENT) == []

    def test_invalid_constraint_rejected(self, db_engine):
        (a,) = _add_guests(db_engine, 1)
        with pytest.raises(ValueError, match="select target guests"):
            svc.create_constraint(db_engine, EVENT, type_="must_with", subject_guest_ids=[a])
        assert svc.list_constraints(db_engine, EVENT) == []


# ===========================================================================
# Assignments
# ===========================================================================
class TestAssignments:
    def test_upsert_moves_existing(self, db_engine):
        (g,) = _add_guests(db_engine, 1)
        r1 = svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=10)
        r2 = svc.create_restaurant(db_engine, EVENT, name="B", capacity_total=10)

        first = svc.upsert_assignment(db_engine, g, restaurant_id=r1["id"], seat_number=1)
        second = svc.upsert_assignment(db_engine, g, restaurant_id=r2["id"], seat_number=3)
        assert first["id"] == second["id"]
        assert second["restaurantId"] == r2["id"]
        assert len(svc.list_assignments(db_engine, EVENT)) == 1

    def test_update_assignment(self, db_engine):
        (g,) = _add_guests(db_engine, 1)
        a = svc.upsert_assignment(db_engine, g)
        updated = svc.update_assignment(db_engine, a["id"], group_name="Group 9", status="waitlist")
        assert updated["groupName"] == "Group 9"
        assert updated["status"] == "waitlist"

    def test_deleting_guest_removes_assignment(self, db_engine):
        (g,) = _add_guests(db_engine, 1)
        svc.upsert_assignment(db_engine, g)
        svc.delete_guest(db_engine, g)
        assert svc.list_assignments(db_engine, EVENT) == []


# ===========================================================================
# Grouping & distribution
# ===========================================================================
class TestGenerateAndDistribute:
    def test_postponed_below_minimum(self, db_engine):
        _add_guests(db_engine, 3)
        result = svc.generate_groups(db_engine, EVENT)
        assert result["postponed"] is True
        assert result["groups"] == []

    def test_generate_does_not_persist(self, db_engine):
        _add_guests(db_engine, 12)
        result = svc.generate_groups(db_engine, EVENT, group_size=6)
        assert [len(g["guestIds"]) for g in result["groups"]] == [6, 6]
        assert svc.list_assignments(db_engine, EVENT) == []

    def test_distribute_seats_everyone(self, db_engine):
        ids = _add_guests(db_engine, 12)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=8)
        svc.create_restaurant(db_engine, EVENT, name="B", capacity_total=8)

        result = svc.distribute_to_restaurants(db_engine, EVENT, actor_id="admin-1")
        assert result["success"] is True
        assert result["groupsGenerated"] == 2
        summary = result["distribution"]["summary"]
        assert summary["totalGuests"] == 12
        assert summary["unassignedGuests"] == 0
        assert summary["totalTables"] == 2

        assignments = svc.list_assignments(db_engine, EVENT)
        assert {a["guestId"] for a in assignments} == set(ids)
        assert all(a["tableId"] and a["seatNumber"] for a in assignments)

    def test_distribute_replaces_previous_plan(self, db_engine):
        _add_guests(db_engine, 12)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=20)
        svc.distribute_to_restaurants(db_engine, EVENT)
        svc.distribute_to_restaurants(db_engine, EVENT)

        assert len(svc.list_assignments(db_engine, EVENT)) == 12
        tables = svc.list_restaurants(db_engine, EVENT)[0]["tables"]
        assert [t["name"] for t in tables] == ["Table 1", "Table 2"]

    def test_distribute_reviewed_groups(self, db_engine):
        ids = _add_guests(db_engine, 5)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=10)
        groups = [{"name": "Group 1", "guestIds": ids[:3]}, {"name": "Group 2", "guestIds": ids[3:]}]
        result = svc.distribute_to_restaurants(db_engine, EVENT, groups=groups)
        tables = result["distribution"]["restaurants"][0]["tables"]
        assert [t["capacity"] for t in tables] == [3, 2]

    def test_unknown_guest_in_groups(self, db_engine):
        _add_guests(db_engine, 4)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=10)
        with pytest.raises(LookupError, match="Unknown guest"):
            svc.distribute_to_restaurants(db_engine, EVENT, groups=[{"name": "G", "guestIds": ["ghost"]}])

    def test_guest_in_two_groups_rejected(self, db_engine):
        ids = _add_guests(db_engine, 4)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=10)
        groups = [{"name": "G1", "guestIds": ids[:3]}, {"name": "G2", "guestIds": [ids[0], ids[3]]}]
        with pytest.raises(ValueError, match="more than one group"):
            svc.distribute_to_restaurants(db_engine, EVENT, groups=groups)
        assert svc.list_assignments(db_engine, EVENT) == []

    def test_insufficient_capacity(self, db_engine):
        _add_guests(db_engine, 12)
        svc.create_restaurant(db_engine, EVENT, name="Tiny", capacity_total=5)
        with pytest.raises(InsufficientCapacityError, match="Insufficient restaurant capacity"):
            svc.distribute_to_restaurants(db_engine, EVENT)
        assert svc.list_assignments(db_engine, EVENT) == []

    def test_contradictory_constraints(self, db_engine):
        a, b, *_ = _add_guests(db_engine, 12)
        svc.create_constraint(db_engine, EVENT, type_="must_with", subject_guest_ids=[a], target_guest_ids=[b])
        svc.create_constraint(db_engine, EVENT, type_="not_with", subject_guest_ids=[a], target_guest_ids=[b])
        with pytest.raises(PairingError):
            svc.generate_groups(db_engine, EVENT)

    def test_clear_assignments_keeps_restaurants(self, db_engine):
        _add_guests(db_engine, 6)
        svc.create_restaurant(db_engine, EVENT, name="A", capacity_total=10)
        svc.distribute_to_restaurants(db_engine, EVENT)

        assert svc.clear_assignments(db_engine, EVENT) == 6
        assert svc.list_assignments(db_engine, EVENT) == []
        (restaurant,) = svc.list_restaurants(db_engine, EVENT)
        assert restaurant["tables"] == []


class TestEngineQueries:
    def test_categorize_all_defaults(self, db_engine):
        _add_guests(db_engine, 2)
        results = svc.categorize_all(db_engine, EVENT)
        assert {r["category"] for r in results} == {"Free Spirits"}

    def test_categorize_guest_from_personality(self, db_engine):
        guest = svc.create_guest(
            db_engine, EVENT, first_name="P",
            personality={"dinnerVibe": "observing", "wardrobeStyle": "timeless"},
        )
        assert svc.categorize_guest(db_engine, guest["id"])["category"] == "Planners"

    def test_suggest_pairings_excludes_target(self, db_engine):
        ids = _add_guests(db_engine, 4)
        ranked = svc.suggest_pairings(db_engine, EVENT, ids[0], limit=10)
        assert ids[0] not in {r["guestId"] for r in ranked}
        assert len(ranked) == 3

    def test_suggest_pairings_unknown_guest(self, db_engine):
        with pytest.raises(LookupError):
            svc.suggest_pairings(db_engine, EVENT, "ghost")

    def test_analyze_group(self, db_engine):
        a = svc.create_guest(db_engine, EVENT, first_name="A", gender="male")["id"]
        b = svc.create_guest(db_engine, EVENT, first_name="B", gender="female")["id"]
        result = svc.analyze_group(db_engine, EVENT, [a, b])
        assert result["genderDistribution"]["male"] == 1
        assert result["genderBalanced"] is True


# ===========================================================================
# Dashboard, lock, publish, member view
# ===========================================================================
class TestLifecycle:
    def _seated_event(self, engine):
        svc.import_bookings(engine, EVENT, [_booking(f"u{i}") for i in range(6)])
        svc.create_restaurant(
            engine, EVENT, name="Sequoia", capacity_total=10,
            address="Zamalek", google_maps_url="https://maps.example/sequoia",
        )
        svc.distribute_to_restaurants(engine, EVENT)

    def test_dashboard_counts(self, db_engine):
        self._seated_event(db_engine)
        _add_guests(db_engine, 1)
        d = svc.dashboard(db_engine, EVENT)
        assert d["guests"] == 7
        assert d["assigned"] == 6
        assert d["unassigned"] == 1
        assert d["restaurants"] == 1
        assert d["tables"] == 1
        assert d["status"] == "draft"
        assert d["published"] is False

    def test_dashboard_for_unknown_event(self, db_engine):
        d = svc.dashboard(db_engine, "never-seen")
        assert d["guests"] == 0
        assert d["status"] == "draft"

    def test_lock_snapshots_state(self, db_engine):
        self._seated_event(db_engine)
        result = svc.lock_event(db_engine, EVENT, actor_id="admin-1")
        assert result == {"success": True, "status": "locked", "guests": 6, "assignments": 6}

        entry = svc.audit_log(db_engine, EVENT, limit=1)[0]
        assert entry["action"] == "lock"
        assert entry["actorId"] == "admin-1"
        assert len(entry["details"]["guests"]) == 6
        assert "lockedAt" in entry["details"]
        assert svc.pairing_status(db_engine, EVENT)["status"] == "locked"

    def test_publish_and_unpublish(self, db_engine):
        first = svc.set_published(db_engine, EVENT, True)
        again = svc.set_published(db_engine, EVENT, True)
        assert first["wasAlreadyPublished"] is False
        assert again["wasAlreadyPublished"] is True

        svc.set_published(db_engine, EVENT, False)
        assert svc.pairing_status(db_engine, EVENT)["published"] is False

    def test_my_assignment_hidden_until_published(self, db_engine):
        self._seated_event(db_engine)
        result = svc.my_assignment(db_engine, EVENT, "u1")
        assert result["hasAssignment"] is False
        assert result["message"] == "Pairing not published yet"

    def test_my_assignment_after_publish(self, db_engine):
        self._seated_event(db_engine)
        svc.set_published(db_engine, EVENT, True)

        result = svc.my_assignment(db_engine, EVENT, "u1")
        assert result["hasAssignment"] is True
        assert result["restaurant"]["name"] == "Sequoia"
        assert result["restaurant"]["googleMapsUrl"] == "https://maps.example/sequoia"
        assert result["table"] == "Table 1"
        assert 1 <= result["seatNumber"] <= 6

    def test_my_assignment_not_a_guest(self, db_engine):
        self._seated_event(db_engine)
        svc.set_published(db_engine, EVENT, True)
        result = svc.my_assignment(db_engine, EVENT, "stranger")
        assert result["hasAssignment"] is False

    def test_record_audit(self, db_engine):
        entry = svc.record_audit(db_engine, EVENT, "export_csv", details={"rows": 3}, actor_id="a1")
        assert entry["action"] == "export_csv"
        assert entry["details"] == {"rows": 3}
        assert svc.audit_log(db_engine, EVENT)[0]["id"] == entry["id"]
