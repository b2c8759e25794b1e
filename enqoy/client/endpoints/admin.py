"""
enqoy.client.endpoints.admin — /sandbox and /analytics
=======================================================

QA sandbox controls (frozen clock, seeded data) and admin analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.engine.reveal import parse_timestamp


class SandboxApi(Resource):
    async def get_time_state(self) -> dict[str, Any]:
        return await self.client.get("/sandbox/time")

    async def freeze_time(self, when: datetime) -> Any:
        return await self.client.post("/sandbox/time/freeze", {"datetime": when.isoformat()})

    async def reset_time(self) -> Any:
        return await self.client.post("/sandbox/time/reset")

    async def get_sandbox_time(self) -> datetime:
        return parse_timestamp(await self.client.get("/sandbox/current-time"))

    async def seed_data(
        self,
        *,
        user_count: int | None = None,
        event_count: int | None = None,
        event_days: int | None = None,
    ) -> Any:
        payload = {"userCount": user_count, "eventCount": event_count, "eventDays": event_days}
        return await self.client.post("/sandbox/seed", {k: v for k, v in payload.items() if v is not None})

    async def reset_sandbox_data(self) -> Any:
        return await self.client.delete("/sandbox/reset")

    async def get_sandbox_users(self) -> list[dict[str, Any]]:
        return await self.client.get("/sandbox/users")

    async def get_sandbox_events(self) -> list[dict[str, Any]]:
        return await self.client.get("/sandbox/events")

    async def get_sandbox_notifications(self, limit: int | None = None) -> list[dict[str, Any]]:
        return await self.client.get("/sandbox/notifications", params={"limit": limit})


class AnalyticsApi(Resource):
    async def get_overview(self) -> dict[str, Any]:
        return await self.client.get("/analytics/overview")

    async def get_enhanced(self, start_date: str | None = None, end_date: str | None = None) -> dict[str, Any]:
        return await self.client.get("/analytics/enhanced", params={"startDate": start_date, "endDate": end_date})

    async def get_booking_stats(self) -> dict[str, Any]:
        return await self.client.get("/analytics/bookings")

    async def get_event_stats(self) -> dict[str, Any]:
        return await self.client.get("/analytics/events")

    async def get_user_growth(self) -> Any:
        return await self.client.get("/analytics/user-growth")

    async def get_recent_activity(self) -> Any:
        return await self.client.get("/analytics/recent-activity")
