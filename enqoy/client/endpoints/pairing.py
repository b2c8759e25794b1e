"""
enqoy.client.endpoints.pairing — /pairing and /user-pairing
============================================================

Admin pairing workspace calls plus the member's own seat lookup.  Request
bodies are plain dicts with camelCase keys, built here from keyword
arguments so callers stay in snake_case.
"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource


class PairingApi(Resource):
    # -- guests ------------------------------------------------------------
    async def get_guests(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/guests")

    async def create_guest(self, event_id: str, first_name: str, **fields: Any) -> dict[str, Any]:
        return await self.client.post("/pairing/guests", {"eventId": event_id, "firstName": first_name, **fields})

    async def delete_guest(self, guest_id: str) -> Any:
        return await self.client.delete(f"/pairing/guests/{guest_id}")

    async def delete_all_guests(self, event_id: str) -> Any:
        return await self.client.delete(f"/pairing/events/{event_id}/guests")

    async def import_bookings(self, event_id: str, bookings: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.client.post(f"/pairing/events/{event_id}/import-bookings", {"bookings": bookings})

    # -- restaurants & tables ---------------------------------------------
    async def get_restaurants(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/restaurants")

    async def create_restaurant(self, event_id: str, name: str, capacity_total: int, **fields: Any) -> dict[str, Any]:
        payload = {"eventId": event_id, "name": name, "capacityTotal": capacity_total, **fields}
        return await self.client.post("/pairing/restaurants", payload)

    async def update_restaurant(self, restaurant_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.client.post(f"/pairing/restaurants/{restaurant_id}", data)

    async def delete_restaurant(self, restaurant_id: str) -> Any:
        return await self.client.delete(f"/pairing/restaurants/{restaurant_id}")

    async def create_table(self, restaurant_id: str, name: str, capacity: int) -> dict[str, Any]:
        return await self.client.post(
            "/pairing/tables", {"restaurantId": restaurant_id, "name": name, "capacity": capacity}
        )

    async def delete_table(self, table_id: str) -> Any:
        return await self.client.delete(f"/pairing/tables/{table_id}")

    # -- constraints -------------------------------------------------------
    async def get_constraints(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/constraints")

    async def create_constraint(
        self,
        event_id: str,
        type_: str,
        subject_guest_ids: list[str],
        target_guest_ids: list[str] | None = None,
        *,
        max_size: int | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "eventId": event_id,
            "type": type_,
            "subjectGuestIds": list(subject_guest_ids),
            "targetGuestIds": list(target_guest_ids or []),
        }
        if max_size is not None:
            payload["maxSize"] = max_size
        if notes:
            payload["notes"] = notes
        return await self.client.post("/pairing/constraints", payload)

    async def delete_constraint(self, constraint_id: str) -> Any:
        return await self.client.delete(f"/pairing/constraints/{constraint_id}")

    # -- assignments -------------------------------------------------------
    async def get_assignments(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/assignments")

    async def create_assignment(self, guest_id: str, **fields: Any) -> dict[str, Any]:
        return await self.client.post("/pairing/assignments", {"guestId": guest_id, **fields})

    async def update_assignment(self, assignment_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.client.post(f"/pairing/assignments/{assignment_id}", data)

    async def delete_assignment(self, assignment_id: str) -> Any:
        return await self.client.delete(f"/pairing/assignments/{assignment_id}")

    async def clear_assignments(self, event_id: str) -> Any:
        return await self.client.delete(f"/pairing/events/{event_id}/clear-assignments")

    # -- engine ------------------------------------------------------------
    async def categorize_all(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/categorize-all")

    async def categorize_participant(self, event_id: str, guest_id: str) -> dict[str, Any]:
        return await self.client.get(f"/pairing/events/{event_id}/categorize/{guest_id}")

    async def generate_groups(
        self,
        event_id: str,
        group_size: int = 6,
        allow_constraint_relaxation: bool = True,
        seed: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "groupSize": group_size,
            "allowConstraintRelaxation": allow_constraint_relaxation,
        }
        if seed is not None:
            payload["seed"] = seed
        return await self.client.post(f"/pairing/events/{event_id}/generate-groups", payload)

    async def distribute_to_restaurants(
        self,
        event_id: str,
        groups: list[dict[str, Any]] | None = None,
        *,
        group_size: int | None = None,
        allow_constraint_relaxation: bool = True,
        seed: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"allowConstraintRelaxation": allow_constraint_relaxation}
        if groups is not None:
            payload["groups"] = groups
        if group_size is not None:
            payload["groupSize"] = group_size
        if seed is not None:
            payload["seed"] = seed
        return await self.client.post(f"/pairing/events/{event_id}/distribute-to-restaurants", payload)

    async def analyze_group(self, event_id: str, participant_ids: list[str]) -> dict[str, Any]:
        return await self.client.post(
            f"/pairing/events/{event_id}/analyze-group", {"participantIds": list(participant_ids)}
        )

    async def suggest_pairings(self, event_id: str, guest_id: str, limit: int | None = None) -> list[dict[str, Any]]:
        return await self.client.get(
            f"/pairing/events/{event_id}/suggest-pairings/{guest_id}", params={"limit": limit}
        )

    # -- event state -------------------------------------------------------
    async def get_dashboard(self, event_id: str) -> dict[str, Any]:
        return await self.client.get(f"/pairing/events/{event_id}/dashboard")

    async def lock_event(self, event_id: str) -> dict[str, Any]:
        return await self.client.post(f"/pairing/events/{event_id}/lock")

    async def publish_pairing(self, event_id: str) -> dict[str, Any]:
        return await self.client.post(f"/pairing/events/{event_id}/publish-pairing")

    async def unpublish_pairing(self, event_id: str) -> dict[str, Any]:
        return await self.client.post(f"/pairing/events/{event_id}/unpublish-pairing")

    async def get_pairing_status(self, event_id: str) -> dict[str, Any]:
        return await self.client.get(f"/pairing/events/{event_id}/pairing-status")

    async def get_audit_log(self, event_id: str, limit: int | None = None) -> list[dict[str, Any]]:
        return await self.client.get(f"/pairing/events/{event_id}/audit-log", params={"limit": limit})

    async def create_audit_log(self, event_id: str, action: str, details: dict[str, Any] | None = None) -> Any:
        return await self.client.post("/pairing/audit-log", {"eventId": event_id, "action": action, "details": details})

    # -- member ------------------------------------------------------------
    async def get_my_assignment(self, event_id: str) -> dict[str, Any]:
        return await self.client.get(f"/user-pairing/events/{event_id}/my-assignment")
