"""
enqoy.client.endpoints.auth — /auth
====================================

Registration, login and password recovery.  ``register`` and ``login``
return the token and user; storing them is the auth context's job.
"""

from __future__ import annotations

from typing import Any

from enqoy.client.endpoints.base import Resource
from enqoy.client.schemas import AuthResponse, User


class AuthApi(Resource):
    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        **extra: Any,
    ) -> AuthResponse:
        payload = {"email": email, "password": password, "firstName": first_name, "lastName": last_name, **extra}
        data = await self.client.post("/auth/register", payload)
        return AuthResponse.model_validate(data)

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self.client.post("/auth/login", {"email": email, "password": password})
        return AuthResponse.model_validate(data)

    async def get_me(self) -> User:
        return User.model_validate(await self.client.get("/auth/me"))

    async def forgot_password(self, email: str) -> Any:
        return await self.client.post("/auth/forgot-password", {"email": email})

    async def reset_password(self, token: str, new_password: str) -> Any:
        return await self.client.post("/auth/reset-password", {"token": token, "newPassword": new_password})
