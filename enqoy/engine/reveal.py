"""
enqoy.engine.reveal — Event Countdown Reveal Policy
=====================================================

What a member sees on an event page is a pure function of how many hours
remain until the start:

    hours ≤ cutoff (48)  → venue revealed (booked; admins ignore the window)
    hours ≤ 24           → dinner snapshot revealed, if one exists
    hours ≤ 0            → icebreaker questions revealed, if any exist
    hours < cutoff       → cancel and reschedule disabled

Hours are fractional.  A member 47.5 hours out sees the venue; one at 48.5
hours does not.

QA time travel shifts the effective "now" relative to the event start so the
whole countdown can be exercised against a single event.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from enqoy.constants import (
    DEFAULT_BOOKING_CUTOFF_HOURS,
    ICEBREAKER_REVEAL_HOURS,
    SNAPSHOT_REVEAL_HOURS,
)


class TimeTravel(enum.StrEnum):
    BEFORE_48H = "T-48h"
    BEFORE_24H = "T-24h"
    START = "T-0"
    AFTER_2H = "T+2h"


_TIME_TRAVEL_OFFSETS: dict[TimeTravel, timedelta] = {
    TimeTravel.BEFORE_48H: timedelta(hours=-48),
    TimeTravel.BEFORE_24H: timedelta(hours=-24),
    TimeTravel.START: timedelta(0),
    TimeTravel.AFTER_2H: timedelta(hours=2),
}


def parse_time_travel(raw: str | None) -> TimeTravel | None:
    """Unknown or empty modes mean "no time travel"."""
    if not raw:
        return None
    try:
        return TimeTravel(raw)
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime:
    """Accept a datetime or an ISO-8601 string; naive values are UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def current_time(
    event_start: datetime | str | None = None,
    mode: TimeTravel | str | None = None,
    *,
    now: datetime | None = None,
) -> datetime:
    """Effective "now", shifted by the QA time-travel *mode* when set."""
    travel = parse_time_travel(mode) if isinstance(mode, str) else mode
    if travel is None or event_start is None:
        return now or datetime.now(UTC)
    return parse_timestamp(event_start) + _TIME_TRAVEL_OFFSETS[travel]


def hours_until(start: datetime | str, now: datetime | None = None) -> float:
    """Fractional hours from *now* until *start* (negative once started)."""
    start_dt = parse_timestamp(start)
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (start_dt - now).total_seconds() / 3600.0


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RevealState:
    hours_until_event: float
    cutoff_hours: float
    show_venue: bool
    show_snapshot: bool
    show_icebreakers: bool
    can_cancel: bool
    can_reschedule: bool


def changes_allowed(hours: float, cutoff_hours: float = DEFAULT_BOOKING_CUTOFF_HOURS) -> bool:
    """Cancel/reschedule stay open until *cutoff_hours* before the start."""
    return hours >= cutoff_hours


def reveal_for(
    hours: float,
    *,
    is_booked: bool,
    is_admin: bool = False,
    has_snapshot: bool = False,
    has_icebreakers: bool = False,
    cutoff_hours: float | None = None,
) -> RevealState:
    cutoff = DEFAULT_BOOKING_CUTOFF_HOURS if cutoff_hours is None else cutoff_hours
    open_for_changes = is_booked and changes_allowed(hours, cutoff)
    return RevealState(
        hours_until_event=hours,
        cutoff_hours=cutoff,
        show_venue=is_booked and (hours <= cutoff or is_admin),
        show_snapshot=is_booked and has_snapshot and hours <= SNAPSHOT_REVEAL_HOURS,
        show_icebreakers=is_booked and has_icebreakers and hours <= ICEBREAKER_REVEAL_HOURS,
        can_cancel=open_for_changes,
        can_reschedule=open_for_changes,
    )
