"""Bounded in-memory cache with per-entry expiry."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from utils.logging import get_logger

logger = get_logger("utils.cache")

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    fetched_at: float


class TTLCache(Generic[V]):
    """Thread-safe key/value cache whose entries go stale after ``ttl`` seconds.

    Expired entries are not swept on a timer. They are skipped on read and
    purged whenever a write pushes the cache above ``max_size``; if that is
    not enough, the oldest writes are evicted until the cache is back at the
    cap. Concurrent writers overwrite each other (last write wins).
    """

    def __init__(self, ttl: float, max_size: int, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _is_fresh(self, entry: CacheEntry[V], now: float) -> bool:
        return now - entry.fetched_at < self.ttl

    def get(self, key: str) -> Optional[V]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry, self._clock()):
                return None
            return entry.value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            now = self._clock()
            # re-insert so dict order stays oldest write first
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(value=value, fetched_at=now)
            if len(self._entries) > self.max_size:
                self._purge_expired(now)
                self._evict_oldest()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Purged %s expired cache entries", len(stale))

    def _evict_oldest(self) -> None:
        overflow = len(self._entries) - self.max_size
        if overflow <= 0:
            return
        for key in list(self._entries)[:overflow]:
            del self._entries[key]
        logger.debug("Evicted %s oldest cache entries", overflow)
