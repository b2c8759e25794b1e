"""
enqoy.client.http — API Client
===============================

Thin wrapper over :class:`httpx.AsyncClient`:

- every request carries ``Authorization: Bearer <auth_token>`` when a token
  is stored;
- a 401 response while a token is stored, on anything but the login call,
  clears ``auth_token`` and ``user`` and notifies the unauthorized listeners
  (which redirect to ``/auth``), exactly once per response;
- non-2xx responses raise :class:`ApiError` carrying the status, the
  server's message and the decoded body.

Usage::

    client = ApiClient("http://localhost:3000/api", storage=LocalStorage())
    events = await client.get("/events/upcoming")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from enqoy.client.storage import LocalStorage
from enqoy.config import DEFAULT_API_URL
from enqoy.constants import AUTH_TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
LOGIN_ROUTE = "/auth"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, data: Any = None, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.data = data
        self.url = url

    def __repr__(self) -> str:
        return f"ApiError({self.status_code}, {self.message!r})"


def _message_from_body(data: Any) -> str | None:
    if isinstance(data, dict):
        msg = data.get("message", data.get("detail"))
        if isinstance(msg, list):
            return "; ".join(str(m) for m in msg)
        if msg:
            return str(msg)
    return None


def error_message(exc: BaseException, fallback: str = "Something went wrong") -> str:
    """Best human-readable message: server message → exception text → *fallback*."""
    if isinstance(exc, ApiError):
        return _message_from_body(exc.data) or exc.message or fallback
    return str(exc) or fallback


class ApiClient:
    """Async JSON client bound to one API base URL."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        storage: LocalStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.storage = storage if storage is not None else LocalStorage()
        self._unauthorized_listeners: list[Callable[[str], Any]] = []
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
            event_hooks={
                "request": [self._attach_token],
                "response": [self._handle_unauthorized],
            },
        )

    # -- hooks -------------------------------------------------------------
    def on_unauthorized(self, callback: Callable[[str], Any]) -> None:
        """Register *callback(route)*, called after a 401 forces logout."""
        self._unauthorized_listeners.append(callback)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.storage.get_item(AUTH_TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return
        if not self.storage.get_item(AUTH_TOKEN_KEY):
            return
        if LOGIN_PATH in response.request.url.path:
            return
        logger.warning("401 from %s — clearing session", response.request.url.path)
        self.storage.remove_item(AUTH_TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        for callback in self._unauthorized_listeners:
            callback(LOGIN_ROUTE)

    # -- requests ----------------------------------------------------------
    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}
        response = await self._http.request(method, path, json=json, params=params or None)
        data = self._decode(response)
        if response.is_error:
            message = _message_from_body(data) or f"Request failed with status code {response.status_code}"
            logger.debug("%s %s → %d: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message, data, str(response.request.url))
        return data

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()
