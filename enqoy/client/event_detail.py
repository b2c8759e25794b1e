"""
enqoy.client.event_detail — Event Detail & Booking Flow
========================================================

Loads one event with the member's confirmed booking and whatever the
countdown has unlocked so far (personality snapshot at 24 h, icebreakers at
the start, the published seat assignment), and runs the booking actions.

Time is measured in fractional hours until the start.  A QA time-travel
mode stored under ``QA_TIME_TRAVEL`` pins "now" relative to the event
start (``T-48h``, ``T-24h``, ``T-0``, ``T+2h``).

Cancel and reschedule close ``bookingCutoffHours`` (48 by default) before
the start; the window is checked before the reschedule picker opens and
again right before a change is committed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from enqoy.client.endpoints.bookings import is_duplicate_booking
from enqoy.client.http import ApiError, error_message
from enqoy.client.notify import Toaster
from enqoy.client.schemas import Booking, CreateBookingRequest, Event, User
from enqoy.client.sdk import EnqoyApi
from enqoy.constants import (
    ICEBREAKER_REVEAL_HOURS,
    SNAPSHOT_REVEAL_HOURS,
    TIME_TRAVEL_KEY,
    BookingStatus,
)
from enqoy.engine.reveal import (
    RevealState,
    TimeTravel,
    changes_allowed,
    current_time,
    hours_until,
    parse_time_travel,
    reveal_for,
)

logger = logging.getLogger(__name__)

EVENTS_ROUTE = "/events"
AUTH_ROUTE = "/auth"


class BookingWindowClosed(Exception):
    """Cancel/reschedule attempted inside the booking cutoff."""

    def __init__(self, action: str, cutoff_hours: float) -> None:
        self.action = action
        self.cutoff_hours = cutoff_hours
        super().__init__(f"{action} are only allowed up to {cutoff_hours:g} hours before the event")


class EventDetail:
    """State and actions of the event detail screen."""

    def __init__(
        self,
        api: EnqoyApi,
        event_id: str,
        *,
        user: User | None = None,
        toaster: Toaster | None = None,
        navigate: Callable[[str], Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.api = api
        self.event_id = event_id
        self.user = user
        self.toaster = toaster or Toaster()
        self._navigate = navigate
        self._clock = clock

        self.event: Event | None = None
        self.booking: Booking | None = None
        self.snapshot: dict[str, Any] | None = None
        self.icebreakers: list[dict[str, Any]] = []
        self.assignment: dict[str, Any] | None = None
        self.available_events: list[Event] = []
        self.is_loading = True
        self.needs_assessment = False

    def _go(self, route: str) -> None:
        if self._navigate is not None:
            self._navigate(route)

    # -- time --------------------------------------------------------------
    @property
    def time_travel(self) -> TimeTravel | None:
        return parse_time_travel(self.api.storage.get_item(TIME_TRAVEL_KEY))

    def now(self) -> datetime:
        start = self.event.start_time if self.event else None
        real_now = self._clock() if self._clock else None
        return current_time(start, self.time_travel, now=real_now)

    @property
    def hours_until_event(self) -> float:
        if self.event is None:
            raise RuntimeError("Event not loaded")
        return hours_until(self.event.start_time, self.now())

    @property
    def cutoff_hours(self) -> float:
        return self.event.booking_cutoff_hours if self.event else 48

    @property
    def reveal(self) -> RevealState:
        return reveal_for(
            self.hours_until_event,
            is_booked=self.booking is not None,
            is_admin=bool(self.user and self.user.is_admin),
            has_snapshot=bool(self.snapshot),
            has_icebreakers=bool(self.icebreakers),
            cutoff_hours=self.cutoff_hours,
        )

    # -- loading -----------------------------------------------------------
    async def load(self) -> bool:
        if self.user is None:
            self._go(AUTH_ROUTE)
            return False
        self.is_loading = True
        try:
            self.event = await self.api.events.get_by_id(self.event_id)
            bookings = await self.api.bookings.get_my()
            self.booking = next(
                (
                    b for b in bookings
                    if b.event_id == self.event_id and b.status == BookingStatus.CONFIRMED
                ),
                None,
            )
            self.snapshot = None
            self.icebreakers = []
            self.assignment = None
            if self.booking is not None:
                await self._load_unlocked()
        except ApiError as exc:
            logger.warning("Failed to load event %s: %s", self.event_id, exc)
            self.toaster.error("Failed to load event details")
            self._go(EVENTS_ROUTE)
            return False
        finally:
            self.is_loading = False
        return True

    async def _load_unlocked(self) -> None:
        hours = self.hours_until_event
        if hours <= SNAPSHOT_REVEAL_HOURS:
            try:
                self.snapshot = await self.api.snapshots.get_by_event_and_user(self.event_id) or None
            except ApiError as exc:
                logger.info("No snapshot for event %s: %s", self.event_id, exc.status_code)
        if hours <= ICEBREAKER_REVEAL_HOURS:
            try:
                self.icebreakers = list(await self.api.icebreakers.get_active())
            except ApiError as exc:
                logger.warning("Could not load icebreakers: %s", exc)
        try:
            data = await self.api.pairing.get_my_assignment(self.event_id)
        except ApiError as exc:
            logger.info("No restaurant assignment for event %s: %s", self.event_id, exc.status_code)
        else:
            if isinstance(data, dict) and data.get("hasAssignment"):
                self.assignment = data

    # -- booking -----------------------------------------------------------
    async def book(
        self,
        *,
        use_credit: bool = False,
        two_events: bool | None = None,
        bring_friend: bool | None = None,
        friend_name: str | None = None,
        friend_email: str | None = None,
        friend_phone: str | None = None,
        pay_for_friend: bool | None = None,
    ) -> Booking | None:
        """Create a booking; returns it, or None when nothing was booked."""
        if self.user is None:
            self._go(AUTH_ROUTE)
            return None
        if not self.user.assessment_completed:
            self.needs_assessment = True
            return None

        request = CreateBookingRequest(
            event_id=self.event_id,
            use_credit=use_credit or None,
            two_events=two_events,
            bring_friend=bring_friend,
            friend_name=friend_name,
            friend_email=friend_email,
            friend_phone=friend_phone,
            pay_for_friend=pay_for_friend,
        )
        try:
            booking = await self.api.bookings.create(request)
        except ApiError as exc:
            if is_duplicate_booking(exc):
                self.toaster.error("You have already booked this event")
            else:
                self.toaster.error(error_message(exc, "Failed to book event"))
            return None

        logger.info("Booked event %s (booking %s, %s)", self.event_id, booking.id, booking.status)
        if not self.needs_payment(booking):
            self.toaster.success("Booking confirmed!")
        await self.load()
        return booking

    @staticmethod
    def needs_payment(booking: Booking) -> bool:
        return booking.payment_status != "credit_used" and booking.status != BookingStatus.CONFIRMED

    # -- changes -----------------------------------------------------------
    def ensure_changes_allowed(self, action: str) -> None:
        if not changes_allowed(self.hours_until_event, self.cutoff_hours):
            raise BookingWindowClosed(action, self.cutoff_hours)

    async def cancel(self) -> bool:
        if self.booking is None:
            return False
        try:
            self.ensure_changes_allowed("Cancellations")
        except BookingWindowClosed as exc:
            self.toaster.error(str(exc))
            return False
        try:
            await self.api.bookings.cancel(self.booking.id)
        except ApiError as exc:
            self.toaster.error(error_message(exc, "Failed to cancel booking"))
            return False
        self.toaster.success("Booking cancelled")
        await self.load()
        return True

    async def open_reschedule(self) -> list[Event] | None:
        """Upcoming events the booking can move to, or None if not allowed."""
        if self.booking is None:
            return None
        try:
            self.ensure_changes_allowed("Rescheduling")
        except BookingWindowClosed as exc:
            self.toaster.error(str(exc))
            return None
        try:
            upcoming = await self.api.events.get_upcoming()
        except ApiError:
            self.toaster.error("Failed to load available events")
            return None
        self.available_events = [e for e in upcoming if e.id != self.event_id]
        return self.available_events

    async def reschedule(self, new_event_id: str) -> bool:
        if self.booking is None or not new_event_id:
            return False
        try:
            self.ensure_changes_allowed("Rescheduling")
        except BookingWindowClosed as exc:
            self.toaster.error(str(exc))
            return False
        try:
            new_event = await self.api.events.get_by_id(new_event_id)
            await self.api.bookings.update(
                self.booking.id,
                {
                    "eventId": new_event_id,
                    "status": BookingStatus.RESCHEDULED.value,
                    "amountPaid": new_event.price,
                },
            )
        except ApiError as exc:
            self.toaster.error(error_message(exc, "Failed to reschedule booking"))
            return False
        self.toaster.success("Booking rescheduled successfully!")
        self._go(f"{EVENTS_ROUTE}/{new_event_id}")
        return True
