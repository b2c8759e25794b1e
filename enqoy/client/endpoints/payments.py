"""enqoy.client.endpoints.payments — /payments"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import PaymentInfo, SubmitPaymentRequest


class PaymentsApi(Resource):
    async def get_info(self) -> PaymentInfo:
        return PaymentInfo.model_validate(await self.client.get("/payments/info"))

    async def submit(self, request: SubmitPaymentRequest) -> Any:
        return await self.client.post("/payments", request.to_wire())

    async def get_by_booking(self, booking_id: str) -> Any:
        return await self.client.get(f"/payments/booking/{booking_id}")

    async def get_pending(self) -> list[dict[str, Any]]:
        return await self.client.get("/payments/pending")

    async def approve(self, payment_id: str) -> Any:
        return await self.client.patch(f"/payments/{payment_id}/approve")

    async def reject(self, payment_id: str, reason: str | None = None) -> Any:
        return await self.client.patch(f"/payments/{payment_id}/reject", {"rejectionReason": reason})
