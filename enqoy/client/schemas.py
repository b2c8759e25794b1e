"""
enqoy.client.schemas — Typed API Payloads
==========================================

Pydantic models for the responses (and a few request bodies) whose shape the
client relies on.  Wire keys are camelCase; attributes are snake_case.
Unknown keys are kept so newer backends do not break older clients.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from enqoy.constants import is_admin_roles


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """Dump with camelCase keys, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", **kwargs)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class UserProfile(ApiModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    gender: str | None = None
    age: int | None = None
    city: str | None = None
    country: str | None = None
    assessment_completed: bool = False
    event_credits: int = 0


class User(ApiModel):
    id: str
    email: str
    profile: UserProfile | None = None
    roles: list[Any] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return is_admin_roles(self.roles)

    @property
    def assessment_completed(self) -> bool:
        return bool(self.profile and self.profile.assessment_completed)


class AuthResponse(ApiModel):
    user: User
    token: str


# ---------------------------------------------------------------------------
# Events & bookings
# ---------------------------------------------------------------------------
class Event(ApiModel):
    id: str
    title: str = ""
    event_type: str | None = None
    start_time: datetime
    price: float | None = None
    capacity: int | None = None
    booked_count: int = 0
    venue: dict[str, Any] | None = None
    booking_cutoff_hours: float = 48
    is_visible: bool = True


class Booking(ApiModel):
    id: str
    event_id: str
    status: str
    payment_status: str | None = None
    amount_paid: float | None = None
    event: dict[str, Any] | None = None


class CreateBookingRequest(ApiModel):
    event_id: str
    two_events: bool | None = None
    use_credit: bool | None = None
    bring_friend: bool | None = None
    friend_name: str | None = None
    friend_email: str | None = None
    friend_phone: str | None = None
    pay_for_friend: bool | None = None


# ---------------------------------------------------------------------------
# Credits
# ---------------------------------------------------------------------------
class CreditTransaction(ApiModel):
    id: str
    type: str
    amount: int
    balance: int
    description: str = ""
    source_event_id: str | None = None
    used_for_event_id: str | None = None
    created_at: datetime | None = None


class CreditsData(ApiModel):
    balance: int = 0
    transactions: list[CreditTransaction] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class PaymentAccount(ApiModel):
    number: str
    name: str


class PaymentInfo(ApiModel):
    telebirr: PaymentAccount
    cbe: PaymentAccount


class SubmitPaymentRequest(ApiModel):
    booking_id: str
    amount: float
    payment_method: str  # telebirr | cbe
    transaction_id: str | None = None
    screenshot_url: str | None = None


# ---------------------------------------------------------------------------
# Countries & settings
# ---------------------------------------------------------------------------
class Country(ApiModel):
    id: str
    name: str
    code: str
    is_active: bool = True
    currency: str | None = None
    phone_code: str | None = None
    main_city: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WelcomeBannerSettings(ApiModel):
    title: str
    subtitle: str
    background_image: str | None = None
    button_text: str
    button_link: str
