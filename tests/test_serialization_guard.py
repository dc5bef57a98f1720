"""Concurrency tests for the serialization guard."""

import asyncio

import httpx
import pytest
from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from response_cache.handlers import cache_page, cache_page_atomic
from response_cache.services import KeyedLock, SerializationGuard

pytestmark = pytest.mark.anyio


def build_app(path, endpoint):
    app = FastAPI()
    app.add_route(path, endpoint, methods=["GET"])
    return app


async def fetch_all(app, urls):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await asyncio.gather(*(client.get(url) for url in urls))


class Tracker:
    """Handler recording how many invocations overlap."""

    def __init__(self):
        self.calls = 0
        self.active = 0
        self.peak = 0

    async def __call__(self, request: Request) -> PlainTextResponse:
        self.active += 1
        self.peak = max(self.peak, self.active)
        current = self.calls
        await asyncio.sleep(0.01)
        self.calls = current + 1
        self.active -= 1
        return PlainTextResponse(f"call {self.calls}")


async def test_same_key_requests_run_handler_once(store):
    tracker = Tracker()
    guard = cache_page_atomic(store, 5, tracker)
    app = build_app("/atomic", guard)

    responses = await fetch_all(app, ["/atomic"] * 10)

    assert tracker.calls == 1
    assert {r.text for r in responses} == {"call 1"}
    statuses = sorted(r.headers["x-cache-status"] for r in responses)
    assert statuses == ["HIT"] * 9 + ["MISS"]
    assert len(guard.locks) == 0


async def test_distinct_keys_proceed_concurrently(store):
    tracker = Tracker()
    app = build_app("/atomic", cache_page_atomic(store, 5, tracker))

    responses = await fetch_all(app, [f"/atomic?n={i}" for i in range(5)])

    assert all(r.headers["x-cache-status"] == "MISS" for r in responses)
    assert tracker.peak > 1


async def test_route_scope_serializes_all_requests(store):
    tracker = Tracker()
    app = build_app("/atomic", cache_page_atomic(store, 5, tracker, scope="route"))

    n = 10
    responses = await fetch_all(app, [f"/atomic?n={i}" for i in range(n)])

    assert tracker.calls == n
    assert tracker.peak == 1
    assert sorted(r.text for r in responses) == sorted(f"call {i}" for i in range(1, n + 1))


async def test_unguarded_handler_races(store):
    tracker = Tracker()
    app = build_app("/plain", cache_page(store, 5, tracker))

    await fetch_all(app, [f"/plain?n={i}" for i in range(5)])

    assert tracker.peak > 1


async def test_lock_released_when_handler_fails(store):
    calls = []

    async def handler(request: Request) -> PlainTextResponse:
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return PlainTextResponse("ok")

    guard = cache_page_atomic(store, 5, handler)
    app = build_app("/atomic", guard)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        with pytest.raises(RuntimeError):
            await client.get("/atomic")
        response = await asyncio.wait_for(client.get("/atomic"), timeout=1)

    assert response.text == "ok"
    assert len(guard.locks) == 0


async def test_keyed_lock_cleans_up_entries():
    locks = KeyedLock()
    order = []

    async def worker(key, label):
        async with locks.hold(key):
            order.append(f"{label}-in")
            await asyncio.sleep(0.01)
            order.append(f"{label}-out")

    await asyncio.gather(worker("a", "1"), worker("a", "2"), worker("b", "3"))

    assert order.index("1-out") < order.index("2-in")
    assert len(locks) == 0


async def test_guard_rejects_unknown_scope(store):
    with pytest.raises(ValueError):
        SerializationGuard(cache_page(store, 5, Tracker()), scope="global")
