"""enqoy.client.endpoints.countries — /countries"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import Country


class CountriesApi(Resource):
    async def get_all(self) -> list[Country]:
        return [Country.model_validate(c) for c in await self.client.get("/countries") or []]

    async def get_active(self) -> list[Country]:
        return [Country.model_validate(c) for c in await self.client.get("/countries/active") or []]

    async def get_by_id(self, country_id: str) -> Country:
        return Country.model_validate(await self.client.get(f"/countries/{country_id}"))

    async def create(self, data: dict[str, Any]) -> Country:
        return Country.model_validate(await self.client.post("/countries", data))

    async def update(self, country_id: str, data: dict[str, Any]) -> Country:
        return Country.model_validate(await self.client.patch(f"/countries/{country_id}", data))

    async def delete(self, country_id: str) -> Any:
        return await self.client.delete(f"/countries/{country_id}")
