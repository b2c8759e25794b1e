"""
enqoy.services.pairing_service — Pairing Persistence Service Layer
====================================================================

Every pairing write goes through here.  Functions take an :class:`Engine`,
open their own session via :func:`get_session`, and return plain
camelCase dicts ready for JSON, so callers never touch detached ORM rows.

Writes that change the seating (generate/distribute, clear, lock,
publish) append a :class:`PairingAuditLog` row in the same transaction.
The lock snapshot (guests, restaurants, assignments, constraints) is stored
whole in the audit row's ``details``.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from enqoy.constants import (
    AssignmentStatus,
    BookingStatus,
    PairingEventStatus,
)
from enqoy.database.engine import get_session
from enqoy.database.models import (
    PairingAssignment,
    PairingAuditLog,
    PairingConstraint,
    PairingEvent,
    PairingGuest,
    PairingRestaurant,
    PairingTable,
)
from enqoy.engine import distribution, grouping, personality

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def guest_dict(g: PairingGuest) -> dict[str, Any]:
    return {
        "id": g.id,
        "eventId": g.event_id,
        "userId": g.user_id,
        "firstName": g.first_name,
        "lastName": g.last_name,
        "email": g.email,
        "phone": g.phone,
        "gender": g.gender,
        "age": g.age,
        "dietaryNotes": g.dietary_notes,
        "tags": list(g.tags or []),
        "hasPersonality": bool(g.personality),
        "createdAt": _iso(g.created_at),
    }


def table_dict(t: PairingTable) -> dict[str, Any]:
    return {
        "id": t.id,
        "restaurantId": t.restaurant_id,
        "name": t.name,
        "capacity": t.capacity,
    }


def restaurant_dict(r: PairingRestaurant) -> dict[str, Any]:
    return {
        "id": r.id,
        "eventId": r.event_id,
        "name": r.name,
        "address": r.address,
        "capacityTotal": r.capacity_total,
        "contactName": r.contact_name,
        "contactPhone": r.contact_phone,
        "googleMapsUrl": r.google_maps_url,
        "notes": r.notes,
        "tables": [table_dict(t) for t in sorted(r.tables, key=lambda t: t.name)],
    }


def constraint_dict(c: PairingConstraint) -> dict[str, Any]:
    return {
        "id": c.id,
        "eventId": c.event_id,
        "type": c.type,
        "subjectGuestIds": list(c.subject_guest_ids or []),
        "targetGuestIds": list(c.target_guest_ids or []),
        "maxSize": c.max_size,
        "notes": c.notes,
    }


def assignment_dict(a: PairingAssignment) -> dict[str, Any]:
    return {
        "id": a.id,
        "eventId": a.event_id,
        "guestId": a.guest_id,
        "restaurantId": a.restaurant_id,
        "tableId": a.table_id,
        "seatNumber": a.seat_number,
        "groupName": a.group_name,
        "status": a.status,
    }


def audit_dict(row: PairingAuditLog) -> dict[str, Any]:
    return {
        "id": row.id,
        "eventId": row.event_id,
        "action": row.action,
        "actorId": row.actor_id,
        "details": row.details,
        "createdAt": _iso(row.created_at),
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _log(
    session: Session,
    event_id: str,
    action: str,
    *,
    actor_id: str | None = None,
    details: dict | None = None,
) -> None:
    session.add(PairingAuditLog(
        event_id=event_id, action=action, actor_id=actor_id, details=details,
    ))


def _event(session: Session, event_id: str) -> PairingEvent:
    """Fetch the per-event pairing row, creating a draft on first touch."""
    row = session.get(PairingEvent, event_id)
    if row is None:
        row = PairingEvent(
            event_id=event_id,
            status=PairingEventStatus.DRAFT,
            pairing_published=False,
        )
        session.add(row)
        session.flush()
    return row


def _get_or_404(session: Session, model: type, pk: str, label: str) -> Any:
    row = session.get(model, pk)
    if row is None:
        raise LookupError(f"{label} not found")
    return row


def _guests(session: Session, event_id: str) -> list[PairingGuest]:
    return list(session.scalars(
        select(PairingGuest)
        .where(PairingGuest.event_id == event_id)
        .order_by(PairingGuest.created_at, PairingGuest.id)
    ).all())


def _restaurants(session: Session, event_id: str) -> list[PairingRestaurant]:
    return list(session.scalars(
        select(PairingRestaurant)
        .where(PairingRestaurant.event_id == event_id)
        .order_by(PairingRestaurant.created_at, PairingRestaurant.id)
    ).all())


def _constraints(session: Session, event_id: str) -> list[PairingConstraint]:
    return list(session.scalars(
        select(PairingConstraint)
        .where(PairingConstraint.event_id == event_id)
        .order_by(PairingConstraint.created_at, PairingConstraint.id)
    ).all())


def _assignments(session: Session, event_id: str) -> list[PairingAssignment]:
    return list(session.scalars(
        select(PairingAssignment)
        .where(PairingAssignment.event_id == event_id)
        .order_by(PairingAssignment.created_at, PairingAssignment.id)
    ).all())


def _participants(guests: list[PairingGuest]) -> list[personality.Participant]:
    return [
        personality.categorize(g.id, g.personality, age=g.age, gender=g.gender)
        for g in guests
    ]


def _constraint_specs(rows: list[PairingConstraint]) -> list[grouping.ConstraintSpec]:
    return [
        grouping.ConstraintSpec(
            type=c.type,
            subject_ids=tuple(c.subject_guest_ids or ()),
            target_ids=tuple(c.target_guest_ids or ()),
            max_size=c.max_size,
        )
        for c in rows
    ]


# ---------------------------------------------------------------------------
# Guests
# ---------------------------------------------------------------------------
def list_guests(engine: Engine, event_id: str) -> list[dict]:
    with get_session(engine) as session:
        return [guest_dict(g) for g in _guests(session, event_id)]


def create_guest(engine: Engine, event_id: str, **fields: Any) -> dict:
    with get_session(engine) as session:
        _event(session, event_id)
        guest = PairingGuest(event_id=event_id, **fields)
        session.add(guest)
        session.flush()
        logger.info("Guest %s added to event %s", guest.id, event_id)
        return guest_dict(guest)


def delete_guest(engine: Engine, guest_id: str) -> None:
    with get_session(engine) as session:
        guest = _get_or_404(session, PairingGuest, guest_id, "Guest")
        session.delete(guest)


def delete_all_guests(engine: Engine, event_id: str, *, actor_id: str | None = None) -> int:
    with get_session(engine) as session:
        guests = _guests(session, event_id)
        for g in guests:
            session.delete(g)
        _log(session, event_id, "delete_all_guests", actor_id=actor_id,
             details={"count": len(guests)})
        return len(guests)


def import_bookings(
    engine: Engine,
    event_id: str,
    bookings: list[dict],
    *,
    actor_id: str | None = None,
) -> dict:
    """Turn confirmed platform bookings into pairing guests.

    Bookings already imported (same user) or not confirmed are skipped.
    """
    imported = 0
    skipped: list[dict] = []
    with get_session(engine) as session:
        _event(session, event_id)
        existing = {g.user_id for g in _guests(session, event_id) if g.user_id}
        for booking in bookings:
            user_id = booking.get("userId")
            user = booking.get("user") or {}
            profile = user.get("profile") or {}
            if booking.get("status") != BookingStatus.CONFIRMED:
                skipped.append({"userId": user_id, "reason": "not confirmed"})
                continue
            if user_id in existing:
                skipped.append({"userId": user_id, "reason": "already imported"})
                continue
            email = user.get("email")
            first = profile.get("firstName") or (email.split("@")[0] if email else "Guest")
            answers = (user.get("personalityAssessment") or {}).get("answers")
            session.add(PairingGuest(
                event_id=event_id,
                user_id=user_id,
                first_name=first,
                last_name=profile.get("lastName") or "",
                email=email,
                phone=profile.get("phone"),
                gender=profile.get("gender"),
                age=profile.get("age"),
                personality=answers or None,
            ))
            existing.add(user_id)
            imported += 1
        _log(session, event_id, "import_bookings", actor_id=actor_id,
             details={"imported": imported, "skipped": len(skipped)})
    logger.info("Imported %d booking(s) into event %s (%d skipped)", imported, event_id, len(skipped))
    return {"imported": imported, "skipped": len(skipped), "details": {"skipped": skipped}}


# ---------------------------------------------------------------------------
# Restaurants & tables
# ---------------------------------------------------------------------------
def list_restaurants(engine: Engine, event_id: str) -> list[dict]:
    with get_session(engine) as session:
        return [restaurant_dict(r) for r in _restaurants(session, event_id)]


def create_restaurant(engine: Engine, event_id: str, **fields: Any) -> dict:
    with get_session(engine) as session:
        _event(session, event_id)
        restaurant = PairingRestaurant(event_id=event_id, **fields)
        session.add(restaurant)
        session.flush()
        return restaurant_dict(restaurant)


def update_restaurant(engine: Engine, restaurant_id: str, **fields: Any) -> dict:
    with get_session(engine) as session:
        restaurant = _get_or_404(session, PairingRestaurant, restaurant_id, "Restaurant")
        for key, value in fields.items():
            if value is not None and key not in ("id", "event_id"):
                setattr(restaurant, key, value)
        session.flush()
        return restaurant_dict(restaurant)


def delete_restaurant(engine: Engine, restaurant_id: str) -> None:
    with get_session(engine) as session:
        restaurant = _get_or_404(session, PairingRestaurant, restaurant_id, "Restaurant")
        session.execute(
            delete(PairingAssignment).where(PairingAssignment.restaurant_id == restaurant_id)
        )
        session.delete(restaurant)


def create_table(engine: Engine, restaurant_id: str, name: str, capacity: int) -> dict:
    with get_session(engine) as session:
        _get_or_404(session, PairingRestaurant, restaurant_id, "Restaurant")
        table = PairingTable(restaurant_id=restaurant_id, name=name, capacity=capacity)
        session.add(table)
        session.flush()
        return table_dict(table)


def delete_table(engine: Engine, table_id: str) -> None:
    with get_session(engine) as session:
        table = _get_or_404(session, PairingTable, table_id, "Table")
        for a in session.scalars(
            select(PairingAssignment).where(PairingAssignment.table_id == table_id)
        ):
            a.table_id = None
            a.seat_number = None
        session.delete(table)


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------
def list_constraints(engine: Engine, event_id: str) -> list[dict]:
    with get_session(engine) as session:
        return [constraint_dict(c) for c in _constraints(session, event_id)]


def create_constraint(
    engine: Engine,
    event_id: str,
    *,
    type_: str,
    subject_guest_ids: list[str],
    target_guest_ids: list[str] | None = None,
    max_size: int | None = None,
    notes: str | None = None,
) -> dict:
    grouping.validate_constraint(type_, subject_guest_ids, target_guest_ids, max_size)
    with get_session(engine) as session:
        _event(session, event_id)
        row = PairingConstraint(
            event_id=event_id,
            type=type_,
            subject_guest_ids=list(subject_guest_ids),
            target_guest_ids=list(target_guest_ids or []),
            max_size=max_size,
            notes=notes,
        )
        session.add(row)
        session.flush()
        return constraint_dict(row)


def delete_constraint(engine: Engine, constraint_id: str) -> None:
    with get_session(engine) as session:
        session.delete(_get_or_404(session, PairingConstraint, constraint_id, "Constraint"))


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------
def list_assignments(engine: Engine, event_id: str) -> list[dict]:
    with get_session(engine) as session:
        return [assignment_dict(a) for a in _assignments(session, event_id)]


def upsert_assignment(
    engine: Engine,
    guest_id: str,
    *,
    restaurant_id: str | None = None,
    table_id: str | None = None,
    seat_number: int | None = None,
    group_name: str | None = None,
    status: str = AssignmentStatus.ASSIGNED,
) -> dict:
    """Create the guest's assignment or move the existing one."""
    with get_session(engine) as session:
        guest = _get_or_404(session, PairingGuest, guest_id, "Guest")
        row = session.scalars(
            select(PairingAssignment).where(PairingAssignment.guest_id == guest_id)
        ).first()
        if row is None:
            row = PairingAssignment(event_id=guest.event_id, guest_id=guest_id)
            session.add(row)
        row.restaurant_id = restaurant_id
        row.table_id = table_id
        row.seat_number = seat_number
        row.group_name = group_name
        row.status = AssignmentStatus(status)
        session.flush()
        return assignment_dict(row)


def update_assignment(engine: Engine, assignment_id: str, **fields: Any) -> dict:
    with get_session(engine) as session:
        row = _get_or_404(session, PairingAssignment, assignment_id, "Assignment")
        for key in ("restaurant_id", "table_id", "seat_number", "group_name"):
            if key in fields:
                setattr(row, key, fields[key])
        if fields.get("status") is not None:
            row.status = AssignmentStatus(fields["status"])
        session.flush()
        return assignment_dict(row)


def delete_assignment(engine: Engine, assignment_id: str) -> None:
    with get_session(engine) as session:
        session.delete(_get_or_404(session, PairingAssignment, assignment_id, "Assignment"))


def clear_assignments(engine: Engine, event_id: str, *, actor_id: str | None = None) -> int:
    """Delete every assignment and the tables they sat at.  Restaurants stay."""
    with get_session(engine) as session:
        result = session.execute(
            delete(PairingAssignment).where(PairingAssignment.event_id == event_id)
        )
        for r in _restaurants(session, event_id):
            r.tables.clear()
        _log(session, event_id, "clear_assignments", actor_id=actor_id,
             details={"deleted": result.rowcount})
        return result.rowcount


def my_assignment(engine: Engine, event_id: str, user_id: str) -> dict:
    """The signed-in member's seat, visible only once the pairing is published."""
    with get_session(engine) as session:
        event = session.get(PairingEvent, event_id)
        if event is None or not event.pairing_published:
            return {"hasAssignment": False, "message": "Pairing not published yet"}
        row = session.execute(
            select(PairingAssignment, PairingGuest)
            .join(PairingGuest, PairingGuest.id == PairingAssignment.guest_id)
            .where(PairingGuest.event_id == event_id, PairingGuest.user_id == user_id)
        ).first()
        if row is None:
            return {"hasAssignment": False, "message": "No restaurant assignment found for this event"}
        assignment, _guest = row
        restaurant = session.get(PairingRestaurant, assignment.restaurant_id) if assignment.restaurant_id else None
        table = session.get(PairingTable, assignment.table_id) if assignment.table_id else None
        return {
            "hasAssignment": True,
            "restaurant": {
                "name": restaurant.name,
                "address": restaurant.address,
                "googleMapsUrl": restaurant.google_maps_url,
            } if restaurant else None,
            "table": table.name if table else None,
            "seatNumber": assignment.seat_number,
        }


# ---------------------------------------------------------------------------
# Engine-backed operations
# ---------------------------------------------------------------------------
def categorize_all(engine: Engine, event_id: str) -> list[dict]:
    with get_session(engine) as session:
        return [p.to_dict() for p in _participants(_guests(session, event_id))]


def categorize_guest(engine: Engine, guest_id: str) -> dict:
    with get_session(engine) as session:
        guest = _get_or_404(session, PairingGuest, guest_id, "Guest")
        return _participants([guest])[0].to_dict()


def suggest_pairings(engine: Engine, event_id: str, guest_id: str, limit: int = 5) -> list[dict]:
    with get_session(engine) as session:
        participants = _participants(_guests(session, event_id))
    target = next((p for p in participants if p.guest_id == guest_id), None)
    if target is None:
        raise LookupError("Guest not found")
    return personality.suggest_pairings(target, participants, limit)


def analyze_group(engine: Engine, event_id: str, guest_ids: list[str]) -> dict:
    with get_session(engine) as session:
        chosen = set(guest_ids)
        participants = [p for p in _participants(_guests(session, event_id)) if p.guest_id in chosen]
    if not participants:
        raise LookupError("None of the guests belong to this event")
    group = grouping.build_group(participants, "Analysis")
    return {
        **group.to_dict(),
        "genderBalanced": grouping.is_gender_balanced(participants),
    }


def generate_groups(
    engine: Engine,
    event_id: str,
    *,
    group_size: int = 6,
    allow_relaxation: bool = True,
    seed: int | None = None,
) -> dict:
    """Run the grouping engine.  Nothing is persisted."""
    with get_session(engine) as session:
        guests = _guests(session, event_id)
        specs = _constraint_specs(_constraints(session, event_id))
    groups = grouping.generate_groups(
        _participants(guests),
        specs,
        target_size=group_size,
        allow_relaxation=allow_relaxation,
        seed=seed,
    )
    if not groups:
        return {
            "groups": [],
            "postponed": True,
            "message": f"Only {len(guests)} guest(s); the event should be postponed.",
        }
    return {"groups": [g.to_dict() for g in groups], "postponed": False}


def distribute_to_restaurants(
    engine: Engine,
    event_id: str,
    *,
    groups: list[dict] | None = None,
    group_size: int = 6,
    allow_relaxation: bool = True,
    seed: int | None = None,
    actor_id: str | None = None,
) -> dict:
    """Seat groups at new tables in the event's restaurants.

    *groups* are ``{"name", "guestIds"}`` objects, typically the output of
    :func:`generate_groups` after admin review.  When omitted, groups are
    generated on the spot.  Existing assignments and tables are replaced.
    """
    if groups is None:
        generated = generate_groups(
            engine, event_id,
            group_size=group_size, allow_relaxation=allow_relaxation, seed=seed,
        )
        groups = generated["groups"]

    named = [(g.get("name") or f"Group {i}", list(g["guestIds"])) for i, g in enumerate(groups, start=1)]
    counts = Counter(gid for _, ids in named for gid in ids)
    repeated = sorted(gid for gid, n in counts.items() if n > 1)
    if repeated:
        raise ValueError(f"Guest(s) listed in more than one group: {', '.join(repeated)}")

    with get_session(engine) as session:
        _event(session, event_id)
        restaurants = _restaurants(session, event_id)
        known = {g.id for g in _guests(session, event_id)}
        unknown = [gid for _, ids in named for gid in ids if gid not in known]
        if unknown:
            raise LookupError(f"Unknown guest id(s): {', '.join(unknown)}")

        plans = distribution.distribute(
            named,
            [distribution.Venue(r.id, r.name, r.capacity_total) for r in restaurants],
        )

        session.execute(delete(PairingAssignment).where(PairingAssignment.event_id == event_id))
        for r in restaurants:
            r.tables.clear()
        session.flush()

        by_id = {r.id: r for r in restaurants}
        seated = 0
        for plan in plans:
            restaurant = by_id[plan.venue.id]
            for tp in plan.tables:
                table = PairingTable(name=tp.name, capacity=tp.capacity)
                restaurant.tables.append(table)
                session.flush()
                for guest_id, seat in tp.seats:
                    session.add(PairingAssignment(
                        event_id=event_id,
                        guest_id=guest_id,
                        restaurant_id=restaurant.id,
                        table_id=table.id,
                        seat_number=seat,
                        group_name=tp.group_name,
                        status=AssignmentStatus.ASSIGNED,
                    ))
                    seated += 1

        _log(session, event_id, "distribute", actor_id=actor_id, details={
            "groups": len(named),
            "guests": seated,
            "restaurants": [p.venue.id for p in plans if p.tables],
        })

        return {
            "success": True,
            "groupsGenerated": len(named),
            "distribution": {
                "restaurants": [
                    {
                        "restaurant": {"id": p.venue.id, "name": p.venue.name, "capacity": p.venue.capacity},
                        "tables": [
                            {
                                "name": t.name,
                                "groupName": t.group_name,
                                "capacity": t.capacity,
                                "assignments": [{"guestId": gid, "seatNumber": s} for gid, s in t.seats],
                            }
                            for t in p.tables
                        ],
                        "totalGuests": p.total_guests,
                    }
                    for p in plans
                ],
                "summary": {
                    "totalRestaurants": len(plans),
                    "totalTables": sum(len(p.tables) for p in plans),
                    "totalGuests": seated,
                    "unassignedGuests": len(known) - seated,
                },
            },
        }


# ---------------------------------------------------------------------------
# Dashboard, lock, publish
# ---------------------------------------------------------------------------
def dashboard(engine: Engine, event_id: str) -> dict:
    with get_session(engine) as session:
        guests = session.scalar(
            select(func.count()).select_from(PairingGuest).where(PairingGuest.event_id == event_id)
        ) or 0
        assigned = session.scalar(
            select(func.count()).select_from(PairingAssignment).where(
                PairingAssignment.event_id == event_id,
                PairingAssignment.status == AssignmentStatus.ASSIGNED,
            )
        ) or 0
        restaurants = _restaurants(session, event_id)
        event = session.get(PairingEvent, event_id)
        return {
            "guests": guests,
            "assigned": assigned,
            "unassigned": max(guests - assigned, 0),
            "restaurants": len(restaurants),
            "tables": sum(len(r.tables) for r in restaurants),
            "status": event.status if event else PairingEventStatus.DRAFT.value,
            "published": bool(event and event.pairing_published),
        }


def snapshot(engine: Engine, event_id: str) -> dict:
    """Point-in-time copy of the whole pairing state of an event."""
    with get_session(engine) as session:
        return _snapshot(session, event_id)


def _snapshot(session: Session, event_id: str) -> dict:
    return {
        "guests": [guest_dict(g) for g in _guests(session, event_id)],
        "restaurants": [restaurant_dict(r) for r in _restaurants(session, event_id)],
        "assignments": [assignment_dict(a) for a in _assignments(session, event_id)],
        "constraints": [constraint_dict(c) for c in _constraints(session, event_id)],
    }


def lock_event(engine: Engine, event_id: str, *, actor_id: str | None = None) -> dict:
    """Snapshot the pairing into a new audit row and mark the event locked.

    Additive: earlier snapshots are kept and later edits remain possible.
    """
    with get_session(engine) as session:
        event = _event(session, event_id)
        details = _snapshot(session, event_id)
        details["lockedAt"] = datetime.now(UTC).isoformat()
        event.status = PairingEventStatus.LOCKED
        _log(session, event_id, "lock", actor_id=actor_id, details=details)
        logger.info(
            "Event %s locked: %d guests, %d assignments",
            event_id, len(details["guests"]), len(details["assignments"]),
        )
        return {
            "success": True,
            "status": PairingEventStatus.LOCKED.value,
            "guests": len(details["guests"]),
            "assignments": len(details["assignments"]),
        }


def set_published(
    engine: Engine, event_id: str, published: bool, *, actor_id: str | None = None
) -> dict:
    with get_session(engine) as session:
        event = _event(session, event_id)
        was_published = event.pairing_published
        event.pairing_published = published
        _log(session, event_id, "publish" if published else "unpublish", actor_id=actor_id,
             details={"wasPublished": was_published})
        return {"success": True, "published": published, "wasAlreadyPublished": was_published}


def pairing_status(engine: Engine, event_id: str) -> dict:
    with get_session(engine) as session:
        event = session.get(PairingEvent, event_id)
        return {
            "published": bool(event and event.pairing_published),
            "status": event.status if event else PairingEventStatus.DRAFT.value,
        }


def audit_log(engine: Engine, event_id: str, limit: int = 50) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(
            select(PairingAuditLog)
            .where(PairingAuditLog.event_id == event_id)
            .order_by(PairingAuditLog.created_at.desc(), PairingAuditLog.id.desc())
            .limit(limit)
        ).all()
        return [audit_dict(r) for r in rows]


def record_audit(
    engine: Engine,
    event_id: str,
    action: str,
    *,
    details: dict | None = None,
    actor_id: str | None = None,
) -> dict:
    """Append a free-form audit entry (client-side actions such as exports)."""
    with get_session(engine) as session:
        row = PairingAuditLog(event_id=event_id, action=action, actor_id=actor_id, details=details)
        session.add(row)
        session.flush()
        return audit_dict(row)
