"""Shared base for the REST resource wrappers."""

from __future__ import annotations

from enqoy.client.http import ApiClient


class Resource:
    """One REST root bound to an :class:`ApiClient`."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
