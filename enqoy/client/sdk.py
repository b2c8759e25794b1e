"""
enqoy.client.sdk — Aggregate API Facade
========================================

Bundles one :class:`ApiClient` with every resource wrapper::

    api = EnqoyApi.from_config(load_config())
    events = await api.events.get_upcoming()
"""

from __future__ import annotations

from typing import Any

import httpx

from enqoy.client.endpoints.admin import AnalyticsApi, SandboxApi
from enqoy.client.endpoints.assessments import AssessmentsApi
from enqoy.client.endpoints.auth import AuthApi
from enqoy.client.endpoints.bookings import BookingsApi
from enqoy.client.endpoints.content import (
    AnnouncementsApi,
    FeedbackApi,
    FriendInvitationsApi,
    IcebreakersApi,
    OutsideCityInterestsApi,
    SettingsApi,
    SnapshotsApi,
    VenuesApi,
)
from enqoy.client.endpoints.countries import CountriesApi
from enqoy.client.endpoints.credits import CreditsApi
from enqoy.client.endpoints.events import EventsApi
from enqoy.client.endpoints.pairing import PairingApi
from enqoy.client.endpoints.payments import PaymentsApi
from enqoy.client.endpoints.users import UsersApi
from enqoy.client.http import ApiClient
from enqoy.client.storage import LocalStorage
from enqoy.config import EnqoyConfig


class EnqoyApi:
    """Every REST resource of the Enqoy backend behind one client."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.storage = client.storage
        self.auth = AuthApi(client)
        self.users = UsersApi(client)
        self.events = EventsApi(client)
        self.bookings = BookingsApi(client)
        self.assessments = AssessmentsApi(client)
        self.credits = CreditsApi(client)
        self.payments = PaymentsApi(client)
        self.pairing = PairingApi(client)
        self.countries = CountriesApi(client)
        self.venues = VenuesApi(client)
        self.icebreakers = IcebreakersApi(client)
        self.announcements = AnnouncementsApi(client)
        self.settings = SettingsApi(client)
        self.snapshots = SnapshotsApi(client)
        self.feedback = FeedbackApi(client)
        self.friend_invitations = FriendInvitationsApi(client)
        self.outside_city_interests = OutsideCityInterestsApi(client)
        self.sandbox = SandboxApi(client)
        self.analytics = AnalyticsApi(client)

    @classmethod
    def from_config(
        cls,
        cfg: EnqoyConfig,
        *,
        storage: LocalStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> EnqoyApi:
        if storage is None:
            storage = LocalStorage(cfg.storage_path)
        return cls(ApiClient(cfg.api_url, storage=storage, transport=transport))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> EnqoyApi:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()
