"""
enqoy.client.auth — Process-wide Auth Context
==============================================

Owns the signed-in user and the initial loading flag that route guards
consult.  The bearer token and the cached user JSON live in the client's
:class:`LocalStorage`; this context keeps them in step with ``user``.

Lifecycle::

    auth = AuthContext(api)
    await auth.initialize()      # restores the session from a stored token
    await auth.login(email, pw)  # stores token + user
    auth.logout()                # clears both

A 401 seen by the API client (outside the login call) has already cleared
storage by the time :meth:`_on_unauthorized` runs; the context drops its
user and records the redirect target.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from enqoy.client.http import ApiError
from enqoy.client.schemas import AuthResponse, User
from enqoy.client.sdk import EnqoyApi
from enqoy.constants import AUTH_TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)


class AuthContext:
    """Current user, loading flag, and the session operations."""

    def __init__(self, api: EnqoyApi, *, navigate: Callable[[str], Any] | None = None) -> None:
        self.api = api
        self.storage = api.storage
        self.user: User | None = None
        self.is_loading = True
        self.redirect_to: str | None = None
        self._navigate = navigate
        api.client.on_unauthorized(self._on_unauthorized)

    # -- derived state -----------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    # -- operations --------------------------------------------------------
    async def initialize(self) -> None:
        """Restore the session from a stored token, if any."""
        try:
            if not self.storage.get_item(AUTH_TOKEN_KEY):
                return
            try:
                self.user = await self.api.auth.get_me()
            except ApiError as exc:
                logger.info("Stored session rejected (%s); signing out", exc.status_code)
                self._clear()
        finally:
            self.is_loading = False

    async def login(self, email: str, password: str) -> User:
        response = await self.api.auth.login(email, password)
        self._store(response)
        logger.info("Signed in as %s", response.user.email)
        return response.user

    async def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> AuthResponse:
        response = await self.api.auth.register(email, password, first_name, last_name)
        self._store(response)
        return response

    def logout(self) -> None:
        self._clear()
        logger.info("Signed out")

    async def refresh_user(self) -> User | None:
        """Re-read ``/users/me``; failures are logged and the old user kept."""
        try:
            user = await self.api.users.get_me()
        except ApiError as exc:
            logger.error("Failed to refresh user: %s", exc)
            return self.user
        self.user = user
        self.storage.set_json(USER_KEY, user.model_dump(by_alias=True, mode="json"))
        return user

    # -- internals ---------------------------------------------------------
    def _store(self, response: AuthResponse) -> None:
        self.storage.set_item(AUTH_TOKEN_KEY, response.token)
        self.storage.set_json(USER_KEY, response.user.model_dump(by_alias=True, mode="json"))
        self.user = response.user

    def _clear(self) -> None:
        self.storage.remove_item(AUTH_TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self.user = None

    def _on_unauthorized(self, route: str) -> None:
        self.user = None
        self.redirect_to = route
        if self._navigate is not None:
            self._navigate(route)
