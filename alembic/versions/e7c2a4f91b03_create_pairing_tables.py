"""Create pairing tables

Revision ID: e7c2a4f91b03
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "e7c2a4f91b03"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "pairing_events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("pairing_published", sa.Boolean(), server_default="false"),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "pairing_guests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), server_default=""),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("gender", sa.String(30), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("dietary_notes", sa.Text(), nullable=True),
        sa.Column("tags", postgresql.JSONB(), nullable=True),
        sa.Column("personality", postgresql.JSONB(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("event_id", "user_id", name="uq_pairing_guests_event_user"),
    )
    op.create_index("ix_pairing_guests_event", "pairing_guests", ["event_id"])

    op.create_table(
        "pairing_constraints",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("subject_guest_ids", postgresql.JSONB(), nullable=False),
        sa.Column("target_guest_ids", postgresql.JSONB(), nullable=True),
        sa.Column("max_size", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_pairing_constraints_event", "pairing_constraints", ["event_id"])

    op.create_table(
        "pairing_restaurants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("capacity_total", sa.Integer(), nullable=False),
        sa.Column("contact_name", sa.String(100), nullable=True),
        sa.Column("contact_phone", sa.String(40), nullable=True),
        sa.Column("google_maps_url", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_pairing_restaurants_event", "pairing_restaurants", ["event_id"])

    op.create_table(
        "pairing_tables",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "restaurant_id",
            sa.String(36),
            sa.ForeignKey("pairing_restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        _created_at(),
    )

    op.create_table(
        "pairing_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column(
            "guest_id",
            sa.String(36),
            sa.ForeignKey("pairing_guests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "restaurant_id",
            sa.String(36),
            sa.ForeignKey("pairing_restaurants.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "table_id",
            sa.String(36),
            sa.ForeignKey("pairing_tables.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("seat_number", sa.Integer(), nullable=True),
        sa.Column("group_name", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), server_default="assigned"),
        _created_at(),
        sa.UniqueConstraint("guest_id", name="uq_pairing_assignments_guest"),
    )
    op.create_index("ix_pairing_assignments_event", "pairing_assignments", ["event_id"])

    op.create_table(
        "pairing_audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_pairing_audit_log_event_time", "pairing_audit_log", ["event_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_pairing_audit_log_event_time", table_name="pairing_audit_log")
    op.drop_table("pairing_audit_log")
    op.drop_index("ix_pairing_assignments_event", table_name="pairing_assignments")
    op.drop_table("pairing_assignments")
    op.drop_table("pairing_tables")
    op.drop_index("ix_pairing_restaurants_event", table_name="pairing_restaurants")
    op.drop_table("pairing_restaurants")
    op.drop_index("ix_pairing_constraints_event", table_name="pairing_constraints")
    op.drop_table("pairing_constraints")
    op.drop_index("ix_pairing_guests_event", table_name="pairing_guests")
    op.drop_table("pairing_guests")
    op.drop_table("pairing_events")
