"""
enqoy.client.endpoints.content — Community content resources
=============================================================

Venues, icebreaker questions, announcements, site settings, personality
snapshots, post-event feedback, friend invitations and outside-city
interest registrations.
"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import WelcomeBannerSettings


class VenuesApi(Resource):
    async def get_all(self) -> list[dict[str, Any]]:
        return await self.client.get("/venues")

    async def get_by_id(self, venue_id: str) -> dict[str, Any]:
        return await self.client.get(f"/venues/{venue_id}")

    async def create(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/venues", data)

    async def update(self, venue_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/venues/{venue_id}", data)

    async def delete(self, venue_id: str) -> Any:
        return await self.client.delete(f"/venues/{venue_id}")


class IcebreakersApi(Resource):
    async def get_active(self) -> list[dict[str, Any]]:
        return await self.client.get("/icebreakers/active") or []

    async def get_all(self) -> list[dict[str, Any]]:
        return await self.client.get("/icebreakers")

    async def create(self, question: str, is_active: bool = False, category: str = "Icebreakers") -> Any:
        return await self.client.post(
            "/icebreakers", {"question": question, "isActive": is_active, "category": category}
        )

    async def update(self, icebreaker_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/icebreakers/{icebreaker_id}", data)

    async def delete(self, icebreaker_id: str) -> Any:
        return await self.client.delete(f"/icebreakers/{icebreaker_id}")


class AnnouncementsApi(Resource):
    async def get_active(self) -> list[dict[str, Any]]:
        return await self.client.get("/announcements/active") or []

    async def get_all(self) -> list[dict[str, Any]]:
        return await self.client.get("/announcements")

    async def create(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/announcements", data)

    async def update(self, announcement_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/announcements/{announcement_id}", data)

    async def delete(self, announcement_id: str) -> Any:
        return await self.client.delete(f"/announcements/{announcement_id}")


class SettingsApi(Resource):
    async def get_welcome_banner(self) -> WelcomeBannerSettings:
        return WelcomeBannerSettings.model_validate(await self.client.get("/settings/welcome-banner"))

    async def update_welcome_banner(self, settings: WelcomeBannerSettings) -> WelcomeBannerSettings:
        data = await self.client.patch("/settings/welcome-banner", settings.to_wire())
        return WelcomeBannerSettings.model_validate(data)


class SnapshotsApi(Resource):
    async def get_by_event_and_user(self, event_id: str) -> dict[str, Any] | None:
        """The caller's personality snapshot for *event_id* (None when absent)."""
        return await self.client.get(f"/snapshots/event/{event_id}/user")

    async def get_by_event(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/snapshots/event/{event_id}")

    async def create(self, event_id: str, snapshot_data: dict[str, Any]) -> Any:
        return await self.client.post(f"/snapshots/event/{event_id}", {"snapshotData": snapshot_data})


class FeedbackApi(Resource):
    async def create(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/feedback", data)

    async def get_my(self) -> list[dict[str, Any]]:
        return await self.client.get("/feedback/my")

    async def get_all(self) -> list[dict[str, Any]]:
        return await self.client.get("/feedback")

    async def get_by_event(self, event_id: str) -> list[dict[str, Any]]:
        return await self.client.get(f"/feedback/event/{event_id}")


class FriendInvitationsApi(Resource):
    async def send(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/friend-invitations/send", data)

    async def get_by_token(self, token: str) -> dict[str, Any]:
        return await self.client.get(f"/friend-invitations/token/{token}")

    async def accept(self, token: str) -> Any:
        return await self.client.post(f"/friend-invitations/accept/{token}")

    async def book_for_friend(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/friend-invitations/book-for-friend", data)

    async def get_my(self) -> list[dict[str, Any]]:
        return await self.client.get("/friend-invitations/my")


class OutsideCityInterestsApi(Resource):
    async def create(self, city: str) -> Any:
        return await self.client.post("/outside-city-interests", {"city": city})

    async def get_my(self) -> list[dict[str, Any]]:
        return await self.client.get("/outside-city-interests/my")

    async def get_all(self) -> list[dict[str, Any]]:
        return await self.client.get("/outside-city-interests")

    async def delete(self, interest_id: str) -> Any:
        return await self.client.delete(f"/outside-city-interests/{interest_id}")
