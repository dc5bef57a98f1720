"""In-memory implementation of CacheStore.

Process-local and thread-safe. Expired entries are dropped lazily on
access. Values are deep-copied on the way in and out, so callers never
share mutable state with the store.
"""

import copy
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from response_cache.config import settings
from response_cache.exceptions import CacheMissError, NotStoredError


@dataclass
class _Entry:
    value: Any
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryCacheRepository:
    """Dictionary-backed store with per-entry expiry.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory store.

        Args:
            default_ttl: Expiry in seconds used when `ttl` is None. Defaults to settings.
            clock: Monotonic time source, injectable for tests.
        """
        self._default_ttl = settings.cache_ttl if default_ttl is None else default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    @classmethod
    def create(cls, default_ttl: int | None = None) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults."""
        return cls(default_ttl=default_ttl)

    def _expiry(self, ttl: int | None) -> float | None:
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= 0:
            return None
        return self._clock() + ttl

    def _live(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                raise CacheMissError(key)
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        with self._lock:
            self._entries[key] = _Entry(copy.deepcopy(value), self._expiry(ttl))

    def add(self, key: str, value: Any, ttl: int | None = None) -> None:
        with self._lock:
            if self._live(key) is not None:
                raise NotStoredError(key, "entry exists")
            self.set(key, value, ttl)

    def replace(self, key: str, value: Any, ttl: int | None = None) -> None:
        with self._lock:
            if self._live(key) is None:
                raise NotStoredError(key, "entry missing")
            self.set(key, value, ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            if self._live(key) is None:
                raise CacheMissError(key)
            del self._entries[key]

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()

    def count_all(self) -> int:
        """Count live entries."""
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if not entry.expired(now))

    def health_check(self) -> bool:
        return True
