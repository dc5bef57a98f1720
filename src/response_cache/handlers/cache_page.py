"""Cache decision engine.

`CachePage` is an ASGI endpoint wrapping a regular Starlette handler
(``request -> Response``). For each request it derives the cache key and
either replays the stored response or runs the handler with a
`ResponseCollector` in place of ``send``.

Usage:
    ```python
    from response_cache import InMemoryCacheRepository, cache_page

    store = InMemoryCacheRepository(default_ttl=60)

    async def ping(request):
        return PlainTextResponse(f"pong {time.time_ns()}")

    app.add_route("/ping", cache_page(store, 30, ping), methods=["GET"])
    ```
"""

import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from response_cache.config import CacheConfig
from response_cache.entities import ResponseRecord
from response_cache.exceptions import CacheMissError, CacheStoreError
from response_cache.models import CacheMetrics
from response_cache.protocols import CacheStore
from response_cache.services import (
    ResponseCollector,
    SerializationGuard,
    create_key,
    headers_to_raw,
    request_identity,
    sanitize_headers,
)
from response_cache.services.serialization_guard import GuardScope

logger = logging.getLogger(__name__)

HIT = "HIT"
MISS = "MISS"

ABORT_STATE_KEY = "response_cache_aborted"

Handler = Callable[[Request], Awaitable[Response] | Response]


def _is_async_callable(obj: object) -> bool:
    while isinstance(obj, functools.partial):
        obj = obj.func
    return inspect.iscoroutinefunction(obj) or (
        callable(obj) and inspect.iscoroutinefunction(getattr(obj, "__call__", None))
    )


def abort_caching(request: Request) -> None:
    """Mark the request as aborted.

    The response is still delivered, but it is never served from the
    cache: whatever entry exists for the key is dropped once the handler
    finishes.
    """
    setattr(request.state, ABORT_STATE_KEY, True)


def is_aborted(request: Request) -> bool:
    return bool(getattr(request.state, ABORT_STATE_KEY, False))


async def replay_record(
    send: Send,
    record: ResponseRecord,
    config: CacheConfig,
    replay_headers: bool = True,
    status_value: str | None = HIT,
) -> None:
    """Send a stored response to the client.

    Args:
        send: ASGI send callable
        record: The cached response
        config: Supplies the disallowed headers and diagnostic header name
        replay_headers: Replay stored headers; otherwise only status, body
            and a content-length are sent
        status_value: Diagnostic header value, None to omit it
    """
    if replay_headers:
        disallowed = config.disallowed_headers
        if status_value is not None:
            disallowed = disallowed | {config.status_header}
        raw_headers = headers_to_raw(sanitize_headers(record.headers, disallowed))
        if status_value is not None:
            raw_headers.append((config.status_header.encode("latin-1"), status_value.encode("latin-1")))
    else:
        raw_headers = [(b"content-length", str(len(record.body)).encode("latin-1"))]

    await send({"type": "http.response.start", "status": record.status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": record.body, "more_body": False})


class CachePage:
    """Serve a route from the cache, computing and storing it on a miss.

    Request states:
    - Hit: the stored record is replayed; the handler is not called
    - Miss: the handler runs behind a collector that stores its output
    - Aborted: the handler called `abort_caching`; the entry is dropped

    A store failure during lookup is logged and handled like a miss.
    """

    def __init__(
        self,
        store: CacheStore,
        ttl: int | None,
        handler: Handler,
        include_query: bool = True,
        replay_headers: bool = True,
        config: CacheConfig | None = None,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the endpoint.

        Args:
            store: Cache backend
            ttl: Lifetime of stored responses in seconds (None = store default)
            handler: Starlette-style handler, sync or async
            include_query: Whether the query string is part of the key
            replay_headers: Replay stored headers and set the diagnostic header
            config: Cache configuration. Defaults to `CacheConfig()`.
            metrics: Optional outcome counters
        """
        self._store = store
        self._ttl = ttl
        self._handler = handler
        self._include_query = include_query
        self._replay_headers = replay_headers
        self._config = config or CacheConfig()
        self._metrics = metrics

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def config(self) -> CacheConfig:
        return self._config

    def key_for(self, request: Request) -> str:
        return create_key(request_identity(request, self._include_query), self._config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        key = self.key_for(request)

        started = time.perf_counter()
        try:
            record = self._store.get(key)
            if not isinstance(record, ResponseRecord):
                raise CacheStoreError(f"unexpected {type(record).__name__} stored under {key}")
        except CacheMissError:
            self._observe("miss", started)
            logger.debug("Cache miss for %s", key)
            extra_headers = self._status_headers(MISS)
        except CacheStoreError as e:
            self._observe("error", started)
            logger.warning("Cache lookup failed for %s: %s", key, e)
            extra_headers = []
        else:
            self._observe("hit", started)
            logger.debug("Cache hit for %s", key)
            await replay_record(send, record, self._config, self._replay_headers)
            return

        collector = ResponseCollector(
            send,
            self._store,
            key,
            self._ttl,
            config=self._config,
            extra_headers=extra_headers,
        )
        response = await self._call_handler(request)
        await response(scope, receive, collector)

        if is_aborted(request):
            self._drop(key)
        else:
            collector.flush()

    def _status_headers(self, value: str) -> list[tuple[bytes, bytes]]:
        if not self._replay_headers:
            return []
        return [(self._config.status_header.encode("latin-1"), value.encode("latin-1"))]

    async def _call_handler(self, request: Request) -> Response:
        if _is_async_callable(self._handler):
            return await self._handler(request)  # type: ignore[misc]
        return await run_in_threadpool(self._handler, request)  # type: ignore[arg-type]

    def _drop(self, key: str) -> None:
        if self._metrics is not None:
            self._metrics.record_abort()
        try:
            self._store.delete(key)
        except CacheMissError:
            pass
        except CacheStoreError as e:
            logger.warning("Failed to drop aborted response for %s: %s", key, e)

    def _observe(self, outcome: str, started: float) -> None:
        if self._metrics is None:
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        if outcome == "hit":
            self._metrics.record_hit(elapsed_ms)
        elif outcome == "miss":
            self._metrics.record_miss(elapsed_ms)
        else:
            self._metrics.record_store_error(elapsed_ms)


def cache_page(
    store: CacheStore,
    ttl: int | None,
    handler: Handler,
    config: CacheConfig | None = None,
    metrics: CacheMetrics | None = None,
) -> CachePage:
    """Cache `handler` keyed on path and query, replaying headers."""
    return CachePage(store, ttl, handler, config=config, metrics=metrics)


def cache_page_without_query(
    store: CacheStore,
    ttl: int | None,
    handler: Handler,
    config: CacheConfig | None = None,
    metrics: CacheMetrics | None = None,
) -> CachePage:
    """Cache `handler` keyed on the path only; query parameters are ignored."""
    return CachePage(store, ttl, handler, include_query=False, config=config, metrics=metrics)


def cache_page_without_header(
    store: CacheStore,
    ttl: int | None,
    handler: Handler,
    config: CacheConfig | None = None,
    metrics: CacheMetrics | None = None,
) -> CachePage:
    """Cache `handler` but replay only status and body on a hit.

    No diagnostic header is set on either hits or misses.
    """
    return CachePage(store, ttl, handler, replay_headers=False, config=config, metrics=metrics)


def cache_page_atomic(
    store: CacheStore,
    ttl: int | None,
    handler: Handler,
    config: CacheConfig | None = None,
    metrics: CacheMetrics | None = None,
    scope: GuardScope = "key",
) -> SerializationGuard:
    """`cache_page` with concurrent requests serialized.

    Args:
        scope: "key" serializes requests sharing a cache key; "route"
            serializes every request to the route
    """
    return SerializationGuard(cache_page(store, ttl, handler, config=config, metrics=metrics), scope=scope)
