"""
Dashboard Cache

In-process TTL cache for dashboard summaries. Write paths call
invalidate() so a cached summary never outlives the data it was built from.
"""

import copy
import logging
import threading
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)

MAX_ENTRIES = 128


class DashboardCache:
    """TTL cache keyed by (period, start, end, role)."""

    def __init__(
        self,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = MAX_ENTRIES,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime; 0 disables caching
            clock: Monotonic time source
            max_entries: Oldest entries are evicted beyond this size
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, datetime, Any]] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable) -> tuple[Any, datetime] | None:
        """Return (payload, valid_until) for a live entry, else None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, valid_until, payload = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(payload), valid_until

    def set(self, key: Hashable, payload: Any) -> datetime:
        """Store a payload and return its wall-clock expiry."""
        valid_until = datetime.now() + timedelta(seconds=self.ttl_seconds)
        if not self.enabled:
            return valid_until

        with self._lock:
            now = self._clock()
            for stale in [k for k, (expires_at, _, _) in self._entries.items() if now >= expires_at]:
                del self._entries[stale]

            self._entries.pop(key, None)
            self._entries[key] = (now + self.ttl_seconds, valid_until, copy.deepcopy(payload))

            # dicts keep insertion order, so the first keys are the oldest
            while len(self._entries) > self.max_entries:
                del self._entries[next(iter(self._entries))]
        return valid_until

    def invalidate(self, reason: str | None = None) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()

        logger.info("Dashboard cache invalidated (%s), %d entries dropped", reason or "manual", dropped)
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
