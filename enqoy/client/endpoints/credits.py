"""enqoy.client.endpoints.credits — /credits"""

from __future__ import annotations

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import CreditsData
from enqoy.engine import credits as ledger


class CreditsApi(Resource):
    async def get_my_credits(self) -> CreditsData:
        return CreditsData.model_validate(await self.client.get("/credits/my") or {})

    async def can_use_credit(self, event_id: str) -> bool:
        data = await self.client.get(f"/credits/can-use/{event_id}")
        if isinstance(data, dict):
            return bool(data.get("canUse"))
        return bool(data)

    async def get_my_ledger(self) -> tuple[str, list[ledger.LedgerRow]]:
        """Balance label and display rows for the credits page."""
        data = await self.get_my_credits()
        ledger.reconcile(data.transactions)
        return ledger.balance_label(data.balance), ledger.ledger_rows(data.transactions)
