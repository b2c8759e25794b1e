"""
enqoy.client.endpoints.bookings — /bookings
============================================

The server enforces one active booking per (user, event); a second attempt
comes back as a duplicate-key error which :func:`is_duplicate_booking`
recognises.
"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.http import ApiError, error_message
from enqoy.client.schemas import Booking, CreateBookingRequest

_DUPLICATE_MARKERS = ("already booked", "duplicate", "unique constraint")


def is_duplicate_booking(exc: BaseException) -> bool:
    if not isinstance(exc, ApiError):
        return False
    if exc.status_code == 409:
        return True
    message = error_message(exc, "").lower()
    return any(marker in message for marker in _DUPLICATE_MARKERS)


class BookingsApi(Resource):
    async def create(self, request: CreateBookingRequest) -> Booking:
        return Booking.model_validate(await self.client.post("/bookings", request.to_wire()))

    async def get_all(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        status: str | None = None,
        payment_status: str | None = None,
        event_type: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {
            "startDate": start_date,
            "endDate": end_date,
            "status": status,
            "paymentStatus": payment_status,
            "eventType": event_type,
            "search": search,
        }
        return await self.client.get("/bookings", params=params)

    async def get_my(self) -> list[Booking]:
        return [Booking.model_validate(b) for b in await self.client.get("/bookings/my") or []]

    async def get_by_id(self, booking_id: str) -> Booking:
        return Booking.model_validate(await self.client.get(f"/bookings/{booking_id}"))

    async def update(self, booking_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/bookings/{booking_id}", data)

    async def cancel(self, booking_id: str) -> Any:
        return await self.client.patch(f"/bookings/{booking_id}/cancel", {})

    async def delete(self, booking_id: str) -> Any:
        return await self.client.delete(f"/bookings/{booking_id}")

    async def confirm(self, booking_id: str) -> Any:
        return await self.client.patch(f"/bookings/{booking_id}/confirm", {})

    async def confirm_event_bookings(self, event_id: str) -> Any:
        return await self.client.post(f"/bookings/confirm-event/{event_id}", {})
