"""
enqoy.database.models — SQLAlchemy 2.0 Data Models
===================================================

Schema of the pairing service.  Users, events and bookings live in the main
platform backend; this service only stores what the pairing workflow owns.

Tables:
- pairing_events       — Per-event pairing state (draft/locked, published)
- pairing_guests       — Attendees imported or added for pairing
- pairing_constraints  — Admin rules (not_with, must_with, …)
- pairing_restaurants  — Venues guests are distributed across
- pairing_tables       — Tables inside a restaurant
- pairing_assignments  — Guest → restaurant/table/seat
- pairing_audit_log    — Append-only trail, including lock snapshots
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from enqoy.constants import AssignmentStatus, PairingEventStatus


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Enqoy ORM models."""


# ---------------------------------------------------------------------------
# PairingEvent — one row per platform event that has entered pairing
# ---------------------------------------------------------------------------
class PairingEvent(Base):
    __tablename__ = "pairing_events"

    event_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str | None] = mapped_column(String(200), default=None)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    status: Mapped[str] = mapped_column(String(20), default=PairingEventStatus.DRAFT)
    pairing_published: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PairingEvent {self.event_id} status={self.status}>"


# ---------------------------------------------------------------------------
# PairingGuest
# ---------------------------------------------------------------------------
class PairingGuest(Base):
    __tablename__ = "pairing_guests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(36), default=None)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), default="")
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    phone: Mapped[str | None] = mapped_column(String(40), default=None)
    gender: Mapped[str | None] = mapped_column(String(30), default=None)
    age: Mapped[int | None] = mapped_column(Integer, default=None)
    dietary_notes: Mapped[str | None] = mapped_column(Text, default=None)
    tags: Mapped[list | None] = mapped_column(JSONB, default=None)
    # Raw assessment answers; drives personality categorisation
    personality: Mapped[dict | None] = mapped_column(JSONB, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    assignments: Mapped[list[PairingAssignment]] = relationship(
        back_populates="guest", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_pairing_guests_event", "event_id"),
        UniqueConstraint("event_id", "user_id", name="uq_pairing_guests_event_user"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<PairingGuest {self.id} {self.full_name!r}>"


# ---------------------------------------------------------------------------
# PairingConstraint
# ---------------------------------------------------------------------------
class PairingConstraint(Base):
    __tablename__ = "pairing_constraints"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    subject_guest_ids: Mapped[list] = mapped_column(JSONB, nullable=False)
    target_guest_ids: Mapped[list | None] = mapped_column(JSONB, default=None)
    max_size: Mapped[int | None] = mapped_column(Integer, default=None)  # max_group_size only
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_pairing_constraints_event", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<PairingConstraint {self.id} type={self.type}>"


# ---------------------------------------------------------------------------
# PairingRestaurant / PairingTable
# ---------------------------------------------------------------------------
class PairingRestaurant(Base):
    __tablename__ = "pairing_restaurants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), default=None)
    capacity_total: Mapped[int] = mapped_column(Integer, nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String(100), default=None)
    contact_phone: Mapped[str | None] = mapped_column(String(40), default=None)
    google_maps_url: Mapped[str | None] = mapped_column(String(500), default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    tables: Mapped[list[PairingTable]] = relationship(
        back_populates="restaurant", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_pairing_restaurants_event", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<PairingRestaurant {self.id} {self.name!r}>"


class PairingTable(Base):
    __tablename__ = "pairing_tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    restaurant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("pairing_restaurants.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    restaurant: Mapped[PairingRestaurant] = relationship(back_populates="tables")

    def __repr__(self) -> str:
        return f"<PairingTable {self.id} {self.name!r} cap={self.capacity}>"


# ---------------------------------------------------------------------------
# PairingAssignment
# ---------------------------------------------------------------------------
class PairingAssignment(Base):
    __tablename__ = "pairing_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    guest_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("pairing_guests.id", ondelete="CASCADE"), nullable=False
    )
    restaurant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("pairing_restaurants.id", ondelete="SET NULL"), default=None
    )
    table_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("pairing_tables.id", ondelete="SET NULL"), default=None
    )
    seat_number: Mapped[int | None] = mapped_column(Integer, default=None)
    group_name: Mapped[str | None] = mapped_column(String(100), default=None)
    status: Mapped[str] = mapped_column(String(20), default=AssignmentStatus.ASSIGNED)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    guest: Mapped[PairingGuest] = relationship(back_populates="assignments")

    __table_args__ = (
        Index("ix_pairing_assignments_event", "event_id"),
        UniqueConstraint("guest_id", name="uq_pairing_assignments_guest"),
    )

    def __repr__(self) -> str:
        return f"<PairingAssignment guest={self.guest_id} table={self.table_id}>"


# ---------------------------------------------------------------------------
# PairingAuditLog — append-only, never updated
# ---------------------------------------------------------------------------
class PairingAuditLog(Base):
    __tablename__ = "pairing_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(36), default=None)
    details: Mapped[dict | None] = mapped_column(JSONB, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_pairing_audit_log_event_time", "event_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PairingAuditLog id={self.id} event={self.event_id} action={self.action}>"
