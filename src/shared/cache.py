"""
In-memory TTL cache.

Entries expire a fixed time after insertion. Expiry is checked lazily on read
(a hard cutoff, never served stale); `purge_expired` is available for callers
that want to sweep. When full, the oldest entries are evicted first.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    key: str
    value: V
    created_at: float
    ttl_seconds: float

    def expired(self, now: float) -> bool:
        return now >= self.created_at + self.ttl_seconds


@dataclass
class CacheStats:
    size: int = 0
    max_entries: int = 0
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


@dataclass
class TTLCache(Generic[V]):
    """Key/value store with per-entry TTL."""

    default_ttl: float
    max_entries: int = 1000
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CacheEntry[V]] = field(default_factory=dict, repr=False)
    _hits: int = 0
    _misses: int = 0

    def get(self, key: str) -> Optional[V]:
        """Return the live value for key, or None."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.expired(self.clock()):
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        return entry.value

    def put(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """Store value for ttl seconds (default_ttl when omitted)."""
        ttl = self.default_ttl if ttl is None else ttl
        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = CacheEntry(
            key=key, value=value, created_at=self.clock(), ttl_seconds=ttl
        )

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry, returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_entries=self.max_entries,
            hits=self._hits,
            misses=self._misses,
        )

    def __len__(self) -> int:
        return len(self._entries)
