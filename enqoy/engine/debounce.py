"""
enqoy.engine.debounce — Cancelling Debouncer
=============================================

Coalesces bursts of triggers into one call of an async function.  Used for
the assessment auto-save (2 s) and the admin search box (500 ms).

Only the most recent trigger survives: a pending timer is cancelled when a
new trigger arrives, and when the timer fires any call still in flight from
an earlier burst is cancelled before the new one starts.  A slow save can
therefore never land after (and overwrite) a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Debounce an async callable.

    Parameters
    ----------
    func:
        Zero-argument coroutine function to run once the input settles.
    delay:
        Quiet period in seconds.
    name:
        Label used in log lines.
    """

    def __init__(
        self,
        func: Callable[[], Awaitable[Any]],
        delay: float,
        *,
        name: str = "debounce",
    ) -> None:
        self._func = func
        self.delay = delay
        self.name = name
        self._timer: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None
        self.calls = 0
        self.superseded = 0
        self.last_error: BaseException | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def trigger(self) -> None:
        """Restart the quiet period.  Must be called from a running loop."""
        if self.pending:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_fire())

    async def flush(self) -> None:
        """Skip the quiet period: run now and wait for the result."""
        if self.pending:
            self._timer.cancel()
        self._timer = None
        self._fire()
        await self.wait()

    async def wait(self) -> None:
        """Wait for any pending timer and the call it launches to finish."""
        if self._timer is not None:
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
        if self._in_flight is not None:
            try:
                await self._in_flight
            except asyncio.CancelledError:
                pass

    def cancel(self) -> None:
        """Drop the pending timer and abort the in-flight call."""
        if self.pending:
            self._timer.cancel()
        if self.in_flight:
            self._in_flight.cancel()

    # -- internals ---------------------------------------------------------
    async def _wait_then_fire(self) -> None:
        await asyncio.sleep(self.delay)
        self._fire()

    def _fire(self) -> None:
        if self.in_flight:
            self._in_flight.cancel()
            self.superseded += 1
            logger.debug("%s: superseded in-flight call cancelled", self.name)
        self.calls += 1
        self._in_flight = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            await self._func()
            self.last_error = None
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = exc
            logger.warning("%s: call failed: %s", self.name, exc)
