"""enqoy.client.endpoints.users — /users"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import User


class UsersApi(Resource):
    async def get_all(
        self,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        assessment: str | None = None,
        gender: str | None = None,
        city: str | None = None,
        has_bookings: str | None = None,
    ) -> list[dict[str, Any]]:
        """Admin user list; empty filters are not sent."""
        params = {
            "startDate": start_date,
            "endDate": end_date,
            "assessment": assessment,
            "gender": gender,
            "city": city,
            "hasBookings": has_bookings,
        }
        return await self.client.get("/users", params=params)

    async def get_me(self) -> User:
        return User.model_validate(await self.client.get("/users/me"))

    async def get_by_id(self, user_id: str) -> dict[str, Any]:
        return await self.client.get(f"/users/{user_id}")

    async def update_profile(self, data: dict[str, Any]) -> Any:
        return await self.client.patch("/users/me", data)

    async def get_my_category(self) -> Any:
        return await self.client.get("/users/me/category")

    async def delete(self, user_id: str) -> Any:
        return await self.client.delete(f"/users/{user_id}")
