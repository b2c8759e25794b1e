"""
enqoy.client.search — Admin Booking Search
===========================================

The admin bookings list re-queries the server whenever a filter changes;
typing in the search box is debounced (500 ms by default) so only the
settled term is sent.  Filters set to ``"all"`` are not sent at all.
"""

from __future__ import annotations

import logging
from typing import Any

from enqoy.client.http import ApiError
from enqoy.client.notify import Toaster
from enqoy.client.sdk import EnqoyApi
from enqoy.config import EnqoyConfig
from enqoy.engine.debounce import Debouncer

logger = logging.getLogger(__name__)

ALL = "all"


class BookingSearch:
    """Filter state and results of the admin bookings list."""

    def __init__(
        self,
        api: EnqoyApi,
        *,
        config: EnqoyConfig | None = None,
        toaster: Toaster | None = None,
    ) -> None:
        self.api = api
        self.toaster = toaster or Toaster()
        cfg = config or EnqoyConfig()
        self.term = ""
        self.filters: dict[str, str] = {"status": ALL, "payment_status": ALL, "event_type": ALL}
        self.start_date: str | None = None
        self.end_date: str | None = None
        self.results: Any = None
        self.is_loading = False
        self.requests = 0
        self._debouncer = Debouncer(self.fetch, cfg.search_debounce_ms / 1000, name="booking-search")

    def set_term(self, term: str) -> None:
        """Update the search box; the query runs once typing settles."""
        self.term = term
        self._debouncer.trigger()

    async def set_filter(self, name: str, value: str) -> None:
        """Filters apply immediately."""
        if name not in self.filters:
            raise KeyError(name)
        self.filters[name] = value
        await self.fetch()

    async def set_date_range(self, start: str | None, end: str | None) -> None:
        self.start_date, self.end_date = start, end
        await self.fetch()

    def _params(self) -> dict[str, Any]:
        params = {k: (None if v == ALL else v) for k, v in self.filters.items()}
        return {
            **params,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "search": self.term.strip() or None,
        }

    async def fetch(self) -> None:
        self.is_loading = True
        self.requests += 1
        try:
            self.results = await self.api.bookings.get_all(**self._params())
        except ApiError as exc:
            logger.warning("Booking search failed: %s", exc)
            self.toaster.error("Failed to load bookings")
        finally:
            self.is_loading = False

    async def settle(self) -> None:
        """Wait for a pending debounced query to finish."""
        await self._debouncer.wait()

    def close(self) -> None:
        self._debouncer.cancel()
