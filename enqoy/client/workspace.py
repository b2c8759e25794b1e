"""
enqoy.client.workspace — Admin Pairing Workspace
=================================================

Client side of ``/admin/pairing/:eventId``.  Holds the event's guests,
restaurants, constraints and assignments, and exposes the tab actions:

- Dashboard: guest / assigned / unassigned / restaurant / table counts.
- Guests, Restaurants, Constraints: CRUD with local validation.
- Pairing Board: seat a guest at a table (capacity checked), generate
  groups, distribute them over restaurants.
- Lock Event: snapshot into the audit log; asks first when guests are
  still unassigned.
- Exports: the three CSV files.

Destructive actions go through the *confirm* callback and only proceed
when it returns ``True``.  Without a callback they are refused.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from enqoy.client.http import ApiError, error_message
from enqoy.client.notify import Toaster
from enqoy.client.sdk import EnqoyApi
from enqoy.engine import csv_export
from enqoy.engine.grouping import validate_constraint

logger = logging.getLogger(__name__)


class PairingWorkspace:
    """State and actions for one event's pairing."""

    def __init__(
        self,
        api: EnqoyApi,
        event_id: str,
        *,
        event_name: str = "event",
        toaster: Toaster | None = None,
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self.api = api
        self.event_id = event_id
        self.event_name = event_name
        self.toaster = toaster or Toaster()
        self._confirm = confirm

        self.guests: list[dict[str, Any]] = []
        self.restaurants: list[dict[str, Any]] = []
        self.assignments: list[dict[str, Any]] = []
        self.constraints: list[dict[str, Any]] = []
        self.groups: list[dict[str, Any]] = []

    def confirm(self, message: str) -> bool:
        if self._confirm is None:
            logger.info("Refusing %r: no confirmation callback", message)
            return False
        return bool(self._confirm(message))

    def _failed(self, exc: ApiError, fallback: str) -> None:
        self.toaster.error(error_message(exc, fallback))

    # -- loading -----------------------------------------------------------
    async def refresh(self) -> bool:
        pairing = self.api.pairing
        try:
            self.guests = await pairing.get_guests(self.event_id)
            self.restaurants = await pairing.get_restaurants(self.event_id)
            self.assignments = await pairing.get_assignments(self.event_id)
            self.constraints = await pairing.get_constraints(self.event_id)
        except ApiError as exc:
            self.toaster.error(f"Failed to load event data: {error_message(exc, str(exc))}")
            return False
        return True

    # -- dashboard ---------------------------------------------------------
    @property
    def dashboard(self) -> dict[str, int]:
        assigned_ids = {a["guestId"] for a in self.assignments if a.get("status", "assigned") == "assigned"}
        guest_ids = {g["id"] for g in self.guests}
        assigned = len(assigned_ids & guest_ids)
        return {
            "guests": len(self.guests),
            "assigned": assigned,
            "unassigned": len(self.guests) - assigned,
            "restaurants": len(self.restaurants),
            "tables": sum(len(r.get("tables") or []) for r in self.restaurants),
        }

    # -- guests ------------------------------------------------------------
    async def import_bookings(self, bookings: list[dict[str, Any]]) -> dict[str, Any] | None:
        try:
            result = await self.api.pairing.import_bookings(self.event_id, bookings)
        except ApiError as exc:
            self._failed(exc, "Failed to import bookings")
            return None
        imported = result.get("imported", 0)
        if imported:
            self.toaster.success(f"Imported {imported} guest{'s' if imported > 1 else ''} from bookings")
        if result.get("skipped"):
            logger.info("Skipped %s booking(s): %s", result["skipped"], result.get("details"))
        await self.refresh()
        return result

    async def add_guest(self, first_name: str, last_name: str, **fields: Any) -> dict[str, Any] | None:
        if not first_name.strip() or not last_name.strip():
            self.toaster.error("First and last name are required")
            return None
        try:
            guest = await self.api.pairing.create_guest(
                self.event_id, first_name.strip(), lastName=last_name.strip(), **fields
            )
        except ApiError as exc:
            self._failed(exc, "Failed to add guest")
            return None
        self.guests.append(guest)
        self.toaster.success("Guest added successfully")
        return guest

    async def delete_guest(self, guest_id: str) -> bool:
        if not self.confirm("Delete this guest?"):
            return False
        try:
            await self.api.pairing.delete_guest(guest_id)
        except ApiError as exc:
            self._failed(exc, "Failed to delete guest")
            return False
        self.guests = [g for g in self.guests if g["id"] != guest_id]
        self.assignments = [a for a in self.assignments if a["guestId"] != guest_id]
        self.toaster.success("Guest deleted")
        return True

    async def delete_all_guests(self) -> bool:
        if not self.confirm(f"Delete all {len(self.guests)} guests from this event?"):
            return False
        try:
            await self.api.pairing.delete_all_guests(self.event_id)
        except ApiError as exc:
            self._failed(exc, "Failed to delete guests")
            return False
        self.toaster.success("All guests deleted")
        await self.refresh()
        return True

    # -- restaurants & tables ---------------------------------------------
    def restaurant(self, restaurant_id: str) -> dict[str, Any] | None:
        return next((r for r in self.restaurants if r["id"] == restaurant_id), None)

    async def add_restaurant(self, name: str, capacity_total: int, **fields: Any) -> dict[str, Any] | None:
        if not name.strip():
            self.toaster.error("Restaurant name is required")
            return None
        if capacity_total < 1:
            self.toaster.error("Capacity must be at least 1")
            return None
        try:
            restaurant = await self.api.pairing.create_restaurant(self.event_id, name.strip(), capacity_total, **fields)
        except ApiError as exc:
            self._failed(exc, "Failed to add restaurant")
            return None
        self.restaurants.append(restaurant)
        self.toaster.success("Restaurant added successfully")
        return restaurant

    async def delete_restaurant(self, restaurant_id: str) -> bool:
        if not self.confirm("Delete this restaurant and its tables?"):
            return False
        try:
            await self.api.pairing.delete_restaurant(restaurant_id)
        except ApiError as exc:
            self._failed(exc, "Failed to delete restaurant")
            return False
        self.toaster.success("Restaurant deleted")
        await self.refresh()
        return True

    async def add_table(self, restaurant_id: str, name: str, capacity: int) -> dict[str, Any] | None:
        if not name.strip() or capacity < 1:
            self.toaster.error("Table name and capacity are required")
            return None
        try:
            table = await self.api.pairing.create_table(restaurant_id, name.strip(), capacity)
        except ApiError as exc:
            self._failed(exc, "Failed to add table")
            return None
        restaurant = self.restaurant(restaurant_id)
        if restaurant is not None:
            restaurant.setdefault("tables", []).append(table)
        self.toaster.success("Table added successfully")
        return table

    async def delete_table(self, table_id: str) -> bool:
        if not self.confirm("Delete this table?"):
            return False
        try:
            await self.api.pairing.delete_table(table_id)
        except ApiError as exc:
            self._failed(exc, "Failed to delete table")
            return False
        for r in self.restaurants:
            r["tables"] = [t for t in r.get("tables") or [] if t["id"] != table_id]
        self.toaster.success("Table deleted successfully")
        return True

    # -- constraints -------------------------------------------------------
    async def add_constraint(
        self,
        type_: str,
        subject_guest_ids: list[str],
        target_guest_ids: list[str] | None = None,
        *,
        max_size: int | None = None,
        notes: str | None = None,
    ) -> dict[str, Any] | None:
        try:
            validate_constraint(type_, subject_guest_ids, target_guest_ids, max_size)
        except ValueError as exc:
            self.toaster.error(str(exc))
            return None
        try:
            constraint = await self.api.pairing.create_constraint(
                self.event_id, type_, subject_guest_ids, target_guest_ids, max_size=max_size, notes=notes
            )
        except ApiError as exc:
            self._failed(exc, "Failed to add constraint")
            return None
        self.constraints.append(constraint)
        self.toaster.success("Constraint added successfully")
        return constraint

    async def delete_constraint(self, constraint_id: str) -> bool:
        if not self.confirm("Delete this constraint?"):
            return False
        try:
            await self.api.pairing.delete_constraint(constraint_id)
        except ApiError as exc:
            self._failed(exc, "Failed to delete constraint")
            return False
        self.constraints = [c for c in self.constraints if c["id"] != constraint_id]
        self.toaster.success("Constraint deleted")
        return True

    # -- pairing board -----------------------------------------------------
    def seated_at(self, table_id: str) -> int:
        return sum(1 for a in self.assignments if a.get("tableId") == table_id)

    def free_seat(self, table_id: str, *, ignore: str | None = None) -> int:
        """Lowest seat number not taken at *table_id*."""
        taken = {
            a.get("seatNumber")
            for a in self.assignments
            if a.get("tableId") == table_id and a["guestId"] != ignore
        }
        seat = 1
        while seat in taken:
            seat += 1
        return seat

    async def assign_guest(self, guest_id: str, restaurant_id: str, table_id: str) -> bool:
        restaurant = self.restaurant(restaurant_id)
        table = next(
            (t for t in (restaurant or {}).get("tables") or [] if t["id"] == table_id),
            None,
        )
        existing = next((a for a in self.assignments if a["guestId"] == guest_id), None)
        seated = self.seated_at(table_id)
        if existing is not None and existing.get("tableId") == table_id:
            seated -= 1
        if table is not None and seated >= table["capacity"]:
            self.toaster.error(f"Table {table['name']} is at full capacity ({table['capacity']} seats)")
            return False

        fields = {
            "restaurantId": restaurant_id,
            "tableId": table_id,
            "seatNumber": self.free_seat(table_id, ignore=guest_id),
        }
        try:
            if existing is not None:
                await self.api.pairing.update_assignment(existing["id"], fields)
            else:
                await self.api.pairing.create_assignment(guest_id, **fields)
            await self.api.pairing.create_audit_log(
                self.event_id,
                "assign_guest",
                {"guestId": guest_id, "restaurantId": restaurant_id, "tableId": table_id},
            )
        except ApiError as exc:
            self._failed(exc, "Failed to assign guest")
            return False
        self.toaster.success("Guest assigned successfully")
        self.assignments = await self.api.pairing.get_assignments(self.event_id)
        return True

    async def unassign_guest(self, assignment_id: str) -> bool:
        try:
            await self.api.pairing.delete_assignment(assignment_id)
        except ApiError as exc:
            self._failed(exc, "Failed to unassign guest")
            return False
        self.assignments = [a for a in self.assignments if a["id"] != assignment_id]
        self.toaster.success("Guest unassigned")
        return True

    async def generate_groups(self, group_size: int = 6, *, allow_relaxation: bool = True) -> list[dict[str, Any]]:
        self.toaster.info("Generating groups...")
        try:
            result = await self.api.pairing.generate_groups(
                self.event_id, group_size, allow_constraint_relaxation=allow_relaxation
            )
        except ApiError as exc:
            self._failed(exc, "Failed to generate groups")
            return []
        self.groups = result.get("groups") or []
        if result.get("postponed"):
            self.toaster.info(result.get("message") or "Not enough guests to form a group")
        else:
            self.toaster.success(f"Generated {len(self.groups)} groups! View them in the Groups tab.")
        return self.groups

    async def distribute(self, *, group_size: int | None = None) -> dict[str, Any] | None:
        """Seat the generated groups (or fresh ones) across the restaurants."""
        groups = [{"name": g.get("name"), "guestIds": g["guestIds"]} for g in self.groups] or None
        if self.assignments and not self.confirm("This replaces every current assignment. Continue?"):
            return None
        try:
            result = await self.api.pairing.distribute_to_restaurants(
                self.event_id, groups, group_size=group_size
            )
        except ApiError as exc:
            self._failed(exc, "Failed to distribute groups")
            return None
        summary = (result.get("distribution") or {}).get("summary") or {}
        self.toaster.success(
            f"Seated {summary.get('totalGuests', 0)} guests at {summary.get('totalRestaurants', 0)} restaurants"
        )
        await self.refresh()
        return result

    async def clear_assignments(self) -> bool:
        if not self.confirm(f"Clear all {len(self.assignments)} assignments?"):
            return False
        try:
            await self.api.pairing.clear_assignments(self.event_id)
        except ApiError as exc:
            self._failed(exc, "Failed to clear assignments")
            return False
        self.groups = []
        self.toaster.success("Assignments cleared")
        await self.refresh()
        return True

    # -- event state -------------------------------------------------------
    async def lock(self) -> bool:
        unassigned = self.dashboard["unassigned"]
        if unassigned > 0 and not self.confirm(
            f"There are {unassigned} unassigned guests. Locking will create a snapshot. Continue?"
        ):
            return False
        try:
            await self.api.pairing.lock_event(self.event_id)
        except ApiError as exc:
            self._failed(exc, "Failed to lock event")
            return False
        self.toaster.success("Event snapshot created and locked")
        await self.refresh()
        return True

    async def set_published(self, published: bool) -> bool:
        pairing = self.api.pairing
        try:
            if published:
                await pairing.publish_pairing(self.event_id)
            else:
                await pairing.unpublish_pairing(self.event_id)
        except ApiError as exc:
            self._failed(exc, "Failed to update pairing visibility")
            return False
        self.toaster.success("Pairing published" if published else "Pairing unpublished")
        return True

    # -- exports -----------------------------------------------------------
    def export_all_assignments(self) -> tuple[str, str]:
        """``(filename, csv_text)`` for every assignment."""
        text = csv_export.export_all_assignments(self.guests, self.restaurants, self.assignments)
        self.toaster.success("CSV exported successfully")
        return csv_export.export_filename(self.event_name, "all_assignments"), text

    def export_host_sheet(self, restaurant_id: str) -> tuple[str, str] | None:
        restaurant = self.restaurant(restaurant_id)
        if restaurant is None:
            self.toaster.error("Restaurant not found")
            return None
        text = csv_export.export_host_sheet(restaurant, self.guests, self.assignments)
        self.toaster.success("Host sheet exported successfully")
        return csv_export.export_filename(self.event_name, "host_sheet", restaurant["name"]), text

    def export_guest_cards(self) -> tuple[str, str]:
        text = csv_export.export_guest_cards(self.guests, self.restaurants, self.assignments)
        self.toaster.success("Guest cards exported successfully")
        return csv_export.export_filename(self.event_name, "guest_cards"), text
