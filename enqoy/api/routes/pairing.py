"""
enqoy.api.routes.pairing — Pairing workspace endpoints (JWT‑protected)
========================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from enqoy.api.deps import get_config, get_current_admin, get_current_user, get_engine
from enqoy.config import EnqoyConfig
from enqoy.constants import AssignmentStatus
from enqoy.database.engine import run_db
from enqoy.engine.distribution import InsufficientCapacityError
from enqoy.engine.grouping import PairingError
from enqoy.services import pairing_service

router = APIRouter(prefix="/pairing", tags=["pairing"])
member_router = APIRouter(prefix="/user-pairing", tags=["pairing"])


# ---------------------------------------------------------------------------
# Pydantic schemas (camelCase on the wire)
# ---------------------------------------------------------------------------
class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuestCreate(_Body):
    event_id: str
    user_id: str | None = None
    first_name: str
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    gender: str | None = None
    age: int | None = None
    dietary_notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    personality: dict[str, Any] | None = None


class ImportBookings(_Body):
    bookings: list[dict[str, Any]] = Field(default_factory=list)


class RestaurantCreate(_Body):
    event_id: str
    name: str
    address: str | None = None
    capacity_total: int = Field(gt=0)
    contact_name: str | None = None
    contact_phone: str | None = None
    google_maps_url: str | None = None
    notes: str | None = None


class RestaurantUpdate(_Body):
    name: str | None = None
    address: str | None = None
    capacity_total: int | None = Field(default=None, gt=0)
    contact_name: str | None = None
    contact_phone: str | None = None
    google_maps_url: str | None = None
    notes: str | None = None


class TableCreate(_Body):
    restaurant_id: str
    name: str
    capacity: int = Field(gt=0)


class ConstraintCreate(_Body):
    event_id: str
    type: str
    subject_guest_ids: list[str] = Field(default_factory=list)
    target_guest_ids: list[str] = Field(default_factory=list)
    max_size: int | None = None
    notes: str | None = None


class AssignmentCreate(_Body):
    guest_id: str
    restaurant_id: str | None = None
    table_id: str | None = None
    seat_number: int | None = None
    group_name: str | None = None
    status: str = AssignmentStatus.ASSIGNED


class AssignmentUpdate(_Body):
    restaurant_id: str | None = None
    table_id: str | None = None
    seat_number: int | None = None
    group_name: str | None = None
    status: str | None = None


class GenerateGroups(_Body):
    group_size: int | None = Field(default=None, ge=2)
    allow_constraint_relaxation: bool = True
    seed: int | None = None


class GroupIn(_Body):
    name: str | None = None
    guest_ids: list[str]


class Distribute(GenerateGroups):
    groups: list[GroupIn] | None = None


class AnalyzeGroup(_Body):
    participant_ids: list[str]


class AuditEntry(_Body):
    event_id: str
    action: str
    details: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
async def _call(func, *args, **kwargs):
    """Run a service call off the event loop and map domain errors to HTTP."""
    try:
        return await run_db(func, *args, **kwargs)
    except LookupError as exc:
        raise HTTPException(404, str(exc))
    except (PairingError, InsufficientCapacityError) as exc:
        raise HTTPException(422, str(exc))
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def _actor(admin: dict) -> str | None:
    sub = admin.get("sub")
    return str(sub) if sub is not None else None


# ---------------------------------------------------------------------------
# Guests
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/guests")
async def list_guests(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.list_guests, engine, event_id)


@router.delete("/events/{event_id}/guests")
async def delete_all_guests(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    deleted = await _call(pairing_service.delete_all_guests, engine, event_id, actor_id=_actor(admin))
    return {"success": True, "deleted": deleted}


@router.post("/events/{event_id}/import-bookings")
async def import_bookings(
    event_id: str,
    body: ImportBookings,
    engine=Depends(get_engine),
    admin=Depends(get_current_admin),
):
    return await _call(
        pairing_service.import_bookings, engine, event_id, body.bookings, actor_id=_actor(admin)
    )


@router.post("/guests", status_code=201)
async def create_guest(body: GuestCreate, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    fields = body.model_dump(exclude={"event_id"})
    return await _call(pairing_service.create_guest, engine, body.event_id, **fields)


@router.delete("/guests/{guest_id}")
async def delete_guest(guest_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    await _call(pairing_service.delete_guest, engine, guest_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Restaurants & tables
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/restaurants")
async def list_restaurants(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.list_restaurants, engine, event_id)


@router.post("/restaurants", status_code=201)
async def create_restaurant(
    body: RestaurantCreate, engine=Depends(get_engine), admin=Depends(get_current_admin)
):
    fields = body.model_dump(exclude={"event_id"})
    return await _call(pairing_service.create_restaurant, engine, body.event_id, **fields)


@router.post("/restaurants/{restaurant_id}")
async def update_restaurant(
    restaurant_id: str,
    body: RestaurantUpdate,
    engine=Depends(get_engine),
    admin=Depends(get_current_admin),
):
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise HTTPException(400, "No fields to update")
    return await _call(pairing_service.update_restaurant, engine, restaurant_id, **fields)


@router.delete("/restaurants/{restaurant_id}")
async def delete_restaurant(restaurant_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    await _call(pairing_service.delete_restaurant, engine, restaurant_id)
    return {"success": True}


@router.post("/tables", status_code=201)
async def create_table(body: TableCreate, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(
        pairing_service.create_table, engine, body.restaurant_id, body.name, body.capacity
    )


@router.delete("/tables/{table_id}")
async def delete_table(table_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    await _call(pairing_service.delete_table, engine, table_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/constraints")
async def list_constraints(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.list_constraints, engine, event_id)


@router.post("/constraints", status_code=201)
async def create_constraint(
    body: ConstraintCreate, engine=Depends(get_engine), admin=Depends(get_current_admin)
):
    return await _call(
        pairing_service.create_constraint,
        engine,
        body.event_id,
        type_=body.type,
        subject_guest_ids=body.subject_guest_ids,
        target_guest_ids=body.target_guest_ids,
        max_size=body.max_size,
        notes=body.notes,
    )


@router.delete("/constraints/{constraint_id}")
async def delete_constraint(constraint_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    await _call(pairing_service.delete_constraint, engine, constraint_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/assignments")
async def list_assignments(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.list_assignments, engine, event_id)


@router.post("/assignments", status_code=201)
async def create_assignment(
    body: AssignmentCreate, engine=Depends(get_engine), admin=Depends(get_current_admin)
):
    fields = body.model_dump(exclude={"guest_id"})
    return await _call(pairing_service.upsert_assignment, engine, body.guest_id, **fields)


@router.post("/assignments/{assignment_id}")
async def update_assignment(
    assignment_id: str,
    body: AssignmentUpdate,
    engine=Depends(get_engine),
    admin=Depends(get_current_admin),
):
    fields = body.model_dump(exclude_unset=True)
    return await _call(pairing_service.update_assignment, engine, assignment_id, **fields)


@router.delete("/assignments/{assignment_id}")
async def delete_assignment(assignment_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    await _call(pairing_service.delete_assignment, engine, assignment_id)
    return {"success": True}


@router.delete("/events/{event_id}/clear-assignments")
async def clear_assignments(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    deleted = await _call(pairing_service.clear_assignments, engine, event_id, actor_id=_actor(admin))
    return {
        "success": True,
        "deleted": deleted,
        "message": "All restaurant assignments cleared for this event",
    }


# ---------------------------------------------------------------------------
# Grouping engine
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/categorize-all")
async def categorize_all(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.categorize_all, engine, event_id)


@router.get("/events/{event_id}/categorize/{guest_id}")
async def categorize_guest(
    event_id: str, guest_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)
):
    return await _call(pairing_service.categorize_guest, engine, guest_id)


@router.post("/events/{event_id}/generate-groups")
async def generate_groups(
    event_id: str,
    body: GenerateGroups,
    engine=Depends(get_engine),
    cfg: EnqoyConfig = Depends(get_config),
    admin=Depends(get_current_admin),
):
    return await _call(
        pairing_service.generate_groups,
        engine,
        event_id,
        group_size=body.group_size or cfg.default_group_size,
        allow_relaxation=body.allow_constraint_relaxation,
        seed=body.seed,
    )


@router.post("/events/{event_id}/distribute-to-restaurants")
async def distribute_to_restaurants(
    event_id: str,
    body: Distribute,
    engine=Depends(get_engine),
    cfg: EnqoyConfig = Depends(get_config),
    admin=Depends(get_current_admin),
):
    groups = None
    if body.groups is not None:
        groups = [{"name": g.name, "guestIds": g.guest_ids} for g in body.groups]
    return await _call(
        pairing_service.distribute_to_restaurants,
        engine,
        event_id,
        groups=groups,
        group_size=body.group_size or cfg.default_group_size,
        allow_relaxation=body.allow_constraint_relaxation,
        seed=body.seed,
        actor_id=_actor(admin),
    )


@router.get("/events/{event_id}/suggest-pairings/{guest_id}")
async def suggest_pairings(
    event_id: str,
    guest_id: str,
    limit: int = Query(5, ge=1, le=50),
    engine=Depends(get_engine),
    admin=Depends(get_current_admin),
):
    return await _call(pairing_service.suggest_pairings, engine, event_id, guest_id, limit)


@router.post("/events/{event_id}/analyze-group")
async def analyze_group(
    event_id: str, body: AnalyzeGroup, engine=Depends(get_engine), admin=Depends(get_current_admin)
):
    return await _call(pairing_service.analyze_group, engine, event_id, body.participant_ids)


# ---------------------------------------------------------------------------
# Dashboard, lock, publish, audit
# ---------------------------------------------------------------------------
@router.get("/events/{event_id}/dashboard")
async def dashboard(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.dashboard, engine, event_id)


@router.post("/events/{event_id}/lock")
async def lock_event(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.lock_event, engine, event_id, actor_id=_actor(admin))


@router.post("/events/{event_id}/publish-pairing")
async def publish_pairing(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.set_published, engine, event_id, True, actor_id=_actor(admin))


@router.post("/events/{event_id}/unpublish-pairing")
async def unpublish_pairing(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.set_published, engine, event_id, False, actor_id=_actor(admin))


@router.get("/events/{event_id}/pairing-status")
async def pairing_status(event_id: str, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(pairing_service.pairing_status, engine, event_id)


@router.get("/events/{event_id}/audit-log")
async def audit_log(
    event_id: str,
    limit: int = Query(50, ge=1, le=500),
    engine=Depends(get_engine),
    admin=Depends(get_current_admin),
):
    return await _call(pairing_service.audit_log, engine, event_id, limit)


@router.post("/audit-log", status_code=201)
async def record_audit(body: AuditEntry, engine=Depends(get_engine), admin=Depends(get_current_admin)):
    return await _call(
        pairing_service.record_audit,
        engine,
        body.event_id,
        body.action,
        details=body.details,
        actor_id=_actor(admin),
    )


# ---------------------------------------------------------------------------
# Member-facing
# ---------------------------------------------------------------------------
@member_router.get("/events/{event_id}/my-assignment")
async def my_assignment(event_id: str, engine=Depends(get_engine), user=Depends(get_current_user)):
    return await _call(pairing_service.my_assignment, engine, event_id, str(user["sub"]))
