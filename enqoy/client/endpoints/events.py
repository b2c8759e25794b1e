"""enqoy.client.endpoints.events — /events"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import Event


def _events(data: Any) -> list[Event]:
    return [Event.model_validate(item) for item in data or []]


class EventsApi(Resource):
    async def get_all(self, include_hidden: bool = False) -> list[Event]:
        params = {"includeHidden": "true"} if include_hidden else None
        return _events(await self.client.get("/events", params=params))

    async def get_all_for_admin(self) -> list[Event]:
        return _events(await self.client.get("/events/admin/all"))

    async def get_upcoming(self) -> list[Event]:
        return _events(await self.client.get("/events/upcoming"))

    async def get_past(self) -> list[Event]:
        return _events(await self.client.get("/events/past"))

    async def get_by_id(self, event_id: str) -> Event:
        return Event.model_validate(await self.client.get(f"/events/{event_id}"))

    async def create(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/events", data)

    async def update(self, event_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/events/{event_id}", data)

    async def delete(self, event_id: str) -> Any:
        return await self.client.delete(f"/events/{event_id}")
