"""Mutual exclusion around cache handlers.

Concurrent first requests for the same key would otherwise all miss and
all run the handler. The guard serializes them so only the first one
computes the response and the rest are served the cached copy.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Literal, Protocol

from starlette.requests import Request
from starlette.types import Receive, Scope, Send

GuardScope = Literal["key", "route"]

ROUTE_LOCK_KEY = "__route__"


class KeyedEndpoint(Protocol):
    """An ASGI endpoint that can tell which cache key a request maps to."""

    def key_for(self, request: Request) -> str: ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class KeyedLock:
    """Lazily created per-key locks.

    An entry lives only while some task holds or waits on it, so the
    registry does not grow with the number of distinct keys seen.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _LockEntry()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[key]


class SerializationGuard:
    """Wraps a cache endpoint so matching requests run one at a time.

    With ``scope="key"`` (the default) only requests mapping to the same
    cache key wait for each other. ``scope="route"`` serializes every
    request to the wrapped route, for handlers whose own state must not
    be touched concurrently.
    """

    def __init__(self, endpoint: KeyedEndpoint, scope: GuardScope = "key") -> None:
        if scope not in ("key", "route"):
            raise ValueError(f"scope must be 'key' or 'route', got {scope!r}")
        self._endpoint = endpoint
        self._scope = scope
        self._locks = KeyedLock()

    @property
    def endpoint(self) -> KeyedEndpoint:
        return self._endpoint

    @property
    def locks(self) -> KeyedLock:
        return self._locks

    def key_for(self, request: Request) -> str:
        return self._endpoint.key_for(request)

    def _lock_key(self, scope: Scope) -> str:
        if self._scope == "route":
            return ROUTE_LOCK_KEY
        return self.key_for(Request(scope))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with self._locks.hold(self._lock_key(scope)):
            await self._endpoint(scope, receive, send)
