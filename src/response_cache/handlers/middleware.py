"""ASGI middleware around the cache.

- `CacheStoreMiddleware` exposes a store to handlers through request state
- `SiteCacheMiddleware` answers any GET request that already has a cached
  response, without ever populating the cache itself
"""

import logging

from starlette.requests import HTTPConnection, Request
from starlette.types import ASGIApp, Receive, Scope, Send

from response_cache.config import CacheConfig
from response_cache.entities import ResponseRecord
from response_cache.exceptions import CacheMissError, CacheStoreError
from response_cache.protocols import CacheStore
from response_cache.services import create_key, request_identity

from .cache_page import replay_record

logger = logging.getLogger(__name__)

CACHE_MIDDLEWARE_KEY = "response_cache_store"


class CacheStoreMiddleware:
    """Place `store` in the request state under `CACHE_MIDDLEWARE_KEY`."""

    def __init__(self, app: ASGIApp, store: CacheStore) -> None:
        self.app = app
        self._store = store

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            scope.setdefault("state", {})[CACHE_MIDDLEWARE_KEY] = self._store
        await self.app(scope, receive, send)


def get_cache_store(request: HTTPConnection) -> CacheStore:
    """Retrieve the store installed by `CacheStoreMiddleware`.

    Raises:
        RuntimeError: The middleware is not installed
    """
    store = getattr(request.state, CACHE_MIDDLEWARE_KEY, None)
    if store is None:
        raise RuntimeError("Cache store not set. Is CacheStoreMiddleware installed?")
    return store


class SiteCacheMiddleware:
    """Serve cached responses for every route, keyed on path and query.

    Responses are stored by the per-route handlers (`cache_page` and
    friends); this middleware only short-circuits requests that already
    have a live entry.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: CacheStore,
        config: CacheConfig | None = None,
    ) -> None:
        self.app = app
        self._store = store
        self._config = config or CacheConfig()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "GET":
            await self.app(scope, receive, send)
            return

        key = create_key(request_identity(Request(scope), include_query=True), self._config)
        try:
            record = self._store.get(key)
        except CacheMissError:
            record = None
        except CacheStoreError as e:
            logger.warning("Site cache lookup failed for %s: %s", key, e)
            record = None

        if not isinstance(record, ResponseRecord):
            await self.app(scope, receive, send)
            return

        await replay_record(send, record, self._config, status_value=None)
