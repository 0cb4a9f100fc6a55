"""Expiring cache tests."""

from __future__ import annotations

from datetime import timedelta

from conftest import FakeClock

from folio_engine.core.cache import ExpiringCache


def test_entry_served_until_ttl_elapses():
    clock = FakeClock()
    cache: ExpiringCache[str, float] = ExpiringCache(timedelta(seconds=60), clock)
    cache.set("btc", 50_000.0)

    clock.advance(seconds=59)
    assert cache.get("btc") == 50_000.0

    clock.advance(seconds=1)
    assert cache.get("btc") is None
    assert len(cache) == 0


def test_set_refreshes_storage_time():
    clock = FakeClock()
    cache: ExpiringCache[str, int] = ExpiringCache(timedelta(minutes=1), clock)
    cache.set("k", 1)
    clock.advance(seconds=45)
    cache.set("k", 2)
    clock.advance(seconds=45)
    assert cache.get("k") == 2


def test_set_sweeps_expired_entries():
    clock = FakeClock()
    cache: ExpiringCache[str, int] = ExpiringCache(timedelta(minutes=1), clock)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(minutes=2)

    cache.set("c", 3)

    assert len(cache) == 1
    assert cache.get("c") == 3


def test_clear():
    cache: ExpiringCache[str, int] = ExpiringCache(timedelta(hours=1))
    cache.set("a", 1)
    cache.clear()
    assert cache.get("a") is None
