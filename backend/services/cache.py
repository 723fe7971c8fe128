"""Simple in-memory TTL cache. No Redis needed.

Each entry carries its own expiry deadline. Expired entries are treated as
absent on read and dropped lazily; purge_expired() sweeps eagerly.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
data may be fetched twice (once per worker).
"""

import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._store: dict[Hashable, CacheEntry] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() < entry.expires_at:
                return entry.value
            del self._store[key]
            return None

    def set(self, key: Hashable, value: Any, ttl_seconds: float = 60) -> None:
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        with self._lock:
            self._store[key] = entry

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._store.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._store.items() if entry.expires_at <= now]
            for key in expired:
                del self._store[key]
        return len(expired)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
