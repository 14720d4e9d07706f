"""
Rate Cache

TTL-wrapped in-memory key/value cache for upstream responses.

Expiry is lazy: an entry is checked when read and removed once
``now > expires_at``. Callers cannot tell an expired entry from a missing
one. The cache is bounded; when full, the entry closest to expiry is
evicted first.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL = 86400  # 24 hours
DEFAULT_PREFIX = "currencyrate_"


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry (Unix timestamp)."""
    data: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class RateCache:
    """
    Namespaced TTL cache.

    Example:
        >>> cache = RateCache(ttl=60)
        >>> cache.set("table_A_last_30", payload)
        >>> cache.get("table_A_last_30")      # payload
        >>> cache.get("missing")              # None
    """

    def __init__(
        self,
        ttl: int = DEFAULT_TTL,
        prefix: str = DEFAULT_PREFIX,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.prefix = prefix
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _live_entry(self, key: str) -> CacheEntry | None:
        cache_key = self._key(key)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug(f"Cache EXPIRED: {cache_key}")
            del self._entries[cache_key]
            return None
        return entry

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._live_entry(key)
        if entry is None:
            logger.debug(f"Cache MISS: {self._key(key)}")
            return None
        logger.debug(f"Cache HIT: {self._key(key)}")
        return entry.data

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        cache_key = self._key(key)
        if cache_key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict()
        ttl = self.ttl if ttl is None else ttl
        self._entries[cache_key] = CacheEntry(data=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(self._key(key), None)

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def clear_all(self) -> int:
        """Remove every entry under this cache's prefix."""
        keys = [k for k in self._entries if k.startswith(self.prefix)]
        for cache_key in keys:
            del self._entries[cache_key]
        logger.info(f"Cache cleared: {len(keys)} entries under '{self.prefix}'")
        return len(keys)

    def remaining_ttl(self, key: str) -> int:
        """Seconds until expiry, 0 when missing or expired."""
        entry = self._live_entry(key)
        if entry is None:
            return 0
        return max(0, int(entry.expires_at - self._clock()))

    def info(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(self._key(key))
        if entry is None:
            return None
        now = self._clock()
        return {
            "exists": True,
            "expires_at": entry.expires_at,
            "remaining_ttl": max(0, int(entry.expires_at - now)),
            "is_expired": entry.is_expired(now),
        }

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for cache_key in expired:
            del self._entries[cache_key]
        if len(self._entries) >= self.max_entries:
            victim = min(self._entries, key=lambda k: self._entries[k].expires_at)
            logger.debug(f"Cache EVICT: {victim}")
            del self._entries[victim]

    def __len__(self) -> int:
        return len(self._entries)
