"""Shared fixtures for the response cache tests."""

import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from response_cache.exceptions import CacheStoreError
from response_cache.repositories import InMemoryCacheRepository


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenStore:
    """Store whose every operation fails like an unreachable backend."""

    def get(self, key):
        raise CacheStoreError("connection refused")

    def set(self, key, value, ttl=None):
        raise CacheStoreError("connection refused")

    def add(self, key, value, ttl=None):
        raise CacheStoreError("connection refused")

    def replace(self, key, value, ttl=None):
        raise CacheStoreError("connection refused")

    def delete(self, key):
        raise CacheStoreError("connection refused")

    def flush(self):
        raise CacheStoreError("connection refused")

    def health_check(self):
        return False


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """In-memory store driven by the fake clock."""
    return InMemoryCacheRepository(default_ttl=60, clock=clock)


async def ping(request: Request) -> PlainTextResponse:
    return PlainTextResponse(f"pong {time.time_ns()}")


def make_client(*routes, middleware=(), raise_server_exceptions=True) -> TestClient:
    """Build a TestClient for an app with the given (path, endpoint) routes."""
    app = FastAPI()
    for path, endpoint in routes:
        app.add_route(path, endpoint, methods=["GET", "POST"])
    for cls, options in middleware:
        app.add_middleware(cls, **options)
    return TestClient(app, raise_server_exceptions=raise_server_exceptions)
