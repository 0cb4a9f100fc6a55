"""In-memory expiring cache used for FX rates and quotes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Generic, Hashable, TypeVar

from folio_engine.core.clock import Clock, utc_now

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CachedEntry(Generic[V]):
    value: V
    stored_at: datetime


class ExpiringCache(Generic[K, V]):
    """Keyed cache whose entries expire a fixed wall-clock TTL after storage.

    Expiry is checked when an entry is read and swept on every write; there
    is no background eviction.
    The clock is injectable so tests can move time forward explicitly.
    """

    def __init__(self, ttl: timedelta, clock: Clock = utc_now) -> None:
        self.ttl = ttl
        self._clock = clock
        self._store: Dict[K, CachedEntry[V]] = {}

    def _expired(self, entry: CachedEntry[V], now: datetime) -> bool:
        return now - entry.stored_at >= self.ttl

    def get(self, key: K) -> V | None:
        cached = self._store.get(key)
        if cached is None:
            return None
        if self._expired(cached, self._clock()):
            self._store.pop(key, None)
            return None
        return cached.value

    def set(self, key: K, value: V) -> None:
        now = self._clock()
        # sweep expired entries on every write
        for stale in [k for k, entry in self._store.items() if self._expired(entry, now)]:
            del self._store[stale]
        self._store[key] = CachedEntry(value=value, stored_at=now)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


__all__ = ["CachedEntry", "ExpiringCache"]
