"""
enqoy.client.notify — Toast Notifications
==========================================

Screens report outcomes ("Booking confirmed!", server error messages) as
toasts.  The :class:`Toaster` keeps the most recent ones in a bounded deque
for whatever renders them, and mirrors each to the logger.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class Toast:
    """One user-facing notification."""
    __slots__ = ("kind", "message", "timestamp")

    def __init__(self, kind: str, message: str, timestamp: str):
        self.kind = kind
        self.message = message
        self.timestamp = timestamp

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message, "timestamp": self.timestamp}

    def __repr__(self) -> str:
        return f"Toast({self.kind!r}, {self.message!r})"


class Toaster:
    """Thread-safe ring of recent toasts."""

    _LOG_LEVELS = {"success": logging.INFO, "info": logging.INFO, "error": logging.WARNING}

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._toasts: deque[Toast] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def _push(self, kind: str, message: str) -> Toast:
        toast = Toast(kind, message, datetime.now(UTC).isoformat())
        with self._lock:
            self._toasts.append(toast)
        logger.log(self._LOG_LEVELS[kind], "[%s] %s", kind, message)
        return toast

    def success(self, message: str) -> Toast:
        return self._push("success", message)

    def error(self, message: str) -> Toast:
        return self._push("error", message)

    def info(self, message: str) -> Toast:
        return self._push("info", message)

    @property
    def last(self) -> Toast | None:
        with self._lock:
            return self._toasts[-1] if self._toasts else None

    def messages(self, kind: str | None = None) -> list[str]:
        with self._lock:
            snapshot = list(self._toasts)
        return [t.message for t in snapshot if kind is None or t.kind == kind]

    def clear(self) -> None:
        with self._lock:
            self._toasts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._toasts)
