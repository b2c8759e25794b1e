"""
enqoy.client.endpoints.assessments — /assessments
==================================================

``save_progress`` overwrites the whole answer set and is only used while
the assessment is incomplete; afterwards single edits go through
``update_answer``.
"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource


class AssessmentsApi(Resource):
    async def get_questions(self, country_id: str | None = None) -> list[dict[str, Any]]:
        return await self.client.get("/assessments/questions", params={"countryId": country_id})

    async def get_my(self) -> dict[str, Any] | None:
        return await self.client.get("/assessments/my")

    async def save_progress(self, answers: dict[str, Any]) -> Any:
        return await self.client.post("/assessments/save-progress", {"answers": answers})

    async def submit(self, answers: dict[str, Any]) -> Any:
        return await self.client.post("/assessments/submit", {"answers": answers})

    async def update_answer(self, question_key: str, value: Any) -> Any:
        return await self.client.patch("/assessments/answer", {"questionKey": question_key, "value": value})

    # -- admin -------------------------------------------------------------
    async def get_all_responses(self) -> list[dict[str, Any]]:
        return await self.client.get("/assessments/responses")

    async def create_question(self, data: dict[str, Any]) -> Any:
        return await self.client.post("/assessments/questions", data)

    async def update_question(self, question_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(f"/assessments/questions/{question_id}", data)

    async def delete_question(self, question_id: str) -> Any:
        return await self.client.delete(f"/assessments/questions/{question_id}")

    async def reorder_questions(self, orders: list[dict[str, Any]]) -> Any:
        return await self.client.put("/assessments/questions/reorder", orders)
