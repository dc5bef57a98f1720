"""Tests for the in-memory store."""

import pytest

from response_cache.entities import ResponseRecord
from response_cache.exceptions import CacheMissError, NotStoredError
from response_cache.protocols import CacheStore
from response_cache.repositories import InMemoryCacheRepository


def test_satisfies_protocol(store):
    assert isinstance(store, CacheStore)


def test_get_missing_key_raises_miss(store):
    with pytest.raises(CacheMissError):
        store.get("absent")


def test_round_trip_returns_copy(store):
    record = ResponseRecord(status=200, headers={"content-type": ["text/plain"]}, body=b"hello")
    store.set("k", record, ttl=10)

    fetched = store.get("k")
    assert fetched == record

    fetched.headers["content-type"].append("tampered")
    assert store.get("k").headers == {"content-type": ["text/plain"]}


def test_entry_expires_after_ttl(store, clock):
    store.set("k", "v", ttl=5)

    clock.advance(4.9)
    assert store.get("k") == "v"

    clock.advance(0.1)
    with pytest.raises(CacheMissError):
        store.get("k")


def test_default_ttl_applies(clock):
    store = InMemoryCacheRepository(default_ttl=3, clock=clock)
    store.set("k", "v")

    clock.advance(3)
    with pytest.raises(CacheMissError):
        store.get("k")


def test_non_positive_ttl_never_expires(store, clock):
    store.set("k", "v", ttl=0)
    clock.advance(10_000)
    assert store.get("k") == "v"


def test_zero_default_ttl_never_expires(clock):
    store = InMemoryCacheRepository(default_ttl=0, clock=clock)
    store.set("k", "v")

    clock.advance(10_000)
    assert store.get("k") == "v"


def test_add_refuses_live_entry(store):
    store.add("k", "first")
    with pytest.raises(NotStoredError):
        store.add("k", "second")
    assert store.get("k") == "first"


def test_add_succeeds_after_expiry(store, clock):
    store.add("k", "first", ttl=1)
    clock.advance(2)
    store.add("k", "second")
    assert store.get("k") == "second"


def test_replace_requires_live_entry(store):
    with pytest.raises(NotStoredError):
        store.replace("k", "v")

    store.set("k", "v")
    store.replace("k", "w")
    assert store.get("k") == "w"


def test_delete(store):
    store.set("k", "v")
    store.delete("k")

    with pytest.raises(CacheMissError):
        store.get("k")
    with pytest.raises(CacheMissError):
        store.delete("k")


def test_flush_and_count(store, clock):
    store.set("a", 1)
    store.set("b", 2, ttl=1)
    assert store.count_all() == 2

    clock.advance(2)
    assert store.count_all() == 1

    store.flush()
    assert store.count_all() == 0
    assert store.health_check() is True
