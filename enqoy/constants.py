"""
enqoy.constants — Shared Constants
===================================

Single source of truth for role names, status vocabularies, countdown
thresholds and personality categories.  Import from here instead of
duplicating string literals in the client, engine, and API layers.
"""

from __future__ import annotations

import enum


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    MEMBER = "member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES: frozenset[str] = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


# ---------------------------------------------------------------------------
# Bookings & credits
# ---------------------------------------------------------------------------
class BookingStatus(enum.StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class CreditType(enum.StrEnum):
    EARNED = "earned"
    USED = "used"
    EXPIRED = "expired"
    ADMIN_GRANT = "admin_grant"
    ADMIN_REVOKE = "admin_revoke"


CREDIT_TYPE_LABELS: dict[str, str] = {
    CreditType.EARNED: "Earned",
    CreditType.USED: "Used",
    CreditType.EXPIRED: "Expired",
    CreditType.ADMIN_GRANT: "Granted by admin",
    CreditType.ADMIN_REVOKE: "Revoked by admin",
}


# ---------------------------------------------------------------------------
# Event countdown windows (hours before start)
# ---------------------------------------------------------------------------
DEFAULT_BOOKING_CUTOFF_HOURS = 48   # venue reveal + last cancel/reschedule
SNAPSHOT_REVEAL_HOURS = 24
ICEBREAKER_REVEAL_HOURS = 0


# ---------------------------------------------------------------------------
# Persisted client state keys
# ---------------------------------------------------------------------------
AUTH_TOKEN_KEY = "auth_token"
USER_KEY = "user"
TIME_TRAVEL_KEY = "QA_TIME_TRAVEL"


# ---------------------------------------------------------------------------
# Pairing vocabulary
# ---------------------------------------------------------------------------
class ConstraintType(enum.StrEnum):
    NOT_WITH = "not_with"
    MUST_WITH = "must_with"
    KEEP_GROUP_TOGETHER = "keep_group_together"
    BALANCE_GENDER = "balance_gender"
    MAX_GROUP_SIZE = "max_group_size"


CONSTRAINT_LABELS: dict[str, str] = {
    ConstraintType.NOT_WITH: "Do Not Pair With",
    ConstraintType.MUST_WITH: "Must Pair With",
    ConstraintType.KEEP_GROUP_TOGETHER: "Keep Group Together",
    ConstraintType.BALANCE_GENDER: "Balance Gender",
    ConstraintType.MAX_GROUP_SIZE: "Max Group Size",
}

# Constraint types that only make sense with a target guest set
TARGETED_CONSTRAINTS: frozenset[str] = frozenset(
    {ConstraintType.NOT_WITH, ConstraintType.MUST_WITH}
)


class AssignmentStatus(enum.StrEnum):
    ASSIGNED = "assigned"
    WAITLIST = "waitlist"


class PairingEventStatus(enum.StrEnum):
    DRAFT = "draft"
    LOCKED = "locked"


class PersonalityCategory(enum.StrEnum):
    TRAILBLAZERS = "Trailblazers"
    STORYTELLERS = "Storytellers"
    PHILOSOPHERS = "Philosophers"
    PLANNERS = "Planners"
    FREE_SPIRITS = "Free Spirits"


# Which categories sit best next to each category
BEST_PAIRINGS: dict[PersonalityCategory, tuple[PersonalityCategory, ...]] = {
    PersonalityCategory.TRAILBLAZERS: (
        PersonalityCategory.FREE_SPIRITS, PersonalityCategory.STORYTELLERS,
    ),
    PersonalityCategory.STORYTELLERS: (
        PersonalityCategory.PHILOSOPHERS, PersonalityCategory.TRAILBLAZERS,
    ),
    PersonalityCategory.PHILOSOPHERS: (
        PersonalityCategory.PLANNERS, PersonalityCategory.STORYTELLERS,
    ),
    PersonalityCategory.PLANNERS: (
        PersonalityCategory.PHILOSOPHERS, PersonalityCategory.FREE_SPIRITS,
    ),
    PersonalityCategory.FREE_SPIRITS: (
        PersonalityCategory.TRAILBLAZERS, PersonalityCategory.PLANNERS,
    ),
}

MIN_PARTICIPANTS = 4        # Below this an event is postponed
SINGLE_GROUP_MAX = 9        # Up to this many guests sit at one table
MAX_AGE_GAP_YEARS = 5


def is_admin_roles(roles) -> bool:
    """True if *roles* contains admin or super_admin.

    Accepts plain strings or ``{"role": "admin"}`` objects, which is how the
    backend serializes the user's role rows.
    """
    for r in roles or ():
        name = r.get("role") if isinstance(r, dict) else r
        if name in ADMIN_ROLES:
            return True
    return False
