"""In-Flight Registry: at most one running analysis per user."""

from __future__ import annotations

import threading
import time
from typing import Callable


class InFlightRegistry:
    """Thread-safe ``user_id -> started_at`` map.

    ``try_acquire`` is the only way in; callers must ``release`` in a
    ``finally`` block once their task ends, whatever the outcome.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._entries: dict[str, float] = {}
        self._clock = clock

    def try_acquire(self, user_id: str) -> bool:
        with self._lock:
            if user_id in self._entries:
                return False
            self._entries[user_id] = self._clock()
            return True

    def release(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def started_at(self, user_id: str) -> float | None:
        with self._lock:
            return self._entries.get(user_id)

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            return dict(self._entries)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
