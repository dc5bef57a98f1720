"""Response Cache - HTTP response caching for ASGI applications.

This package provides a layered architecture for response caching:

Layers:
    - protocols: Interface contracts (CacheStore)
    - repositories: Store backends (in-memory, Redis) and the record codec
    - services: Key derivation, header sanitization, response collection,
      request serialization
    - handlers: ASGI endpoints and middleware making the cache decision
    - entities: Domain models (ResponseRecord)

Usage:
    ```python
    from response_cache import InMemoryCacheRepository, cache_page

    store = InMemoryCacheRepository.create(default_ttl=60)
    app.add_route("/ping", cache_page(store, 30, ping), methods=["GET"])
    ```

For the demo HTTP API:
    ```python
    from response_cache.api.app import app
    ```
"""

from response_cache.config import CacheConfig, get_redis_client, settings
from response_cache.entities import ResponseRecord
from response_cache.exceptions import (
    CacheError,
    CacheMissError,
    CacheStoreError,
    NotStoredError,
    SerializationError,
)
from response_cache.handlers import (
    CACHE_MIDDLEWARE_KEY,
    CachePage,
    CacheStoreMiddleware,
    SiteCacheMiddleware,
    abort_caching,
    cache_page,
    cache_page_atomic,
    cache_page_without_header,
    cache_page_without_query,
    get_cache_store,
)
from response_cache.models import CacheMetrics
from response_cache.protocols import CacheStore
from response_cache.repositories import (
    InMemoryCacheRepository,
    RedisCacheRepository,
    register_response_record,
)
from response_cache.services import (
    ResponseCollector,
    SerializationGuard,
    create_key,
    derive_key,
    sanitize_headers,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    "CacheConfig",
    # Protocols (interfaces)
    "CacheStore",
    # Handlers (HTTP)
    "CACHE_MIDDLEWARE_KEY",
    "CachePage",
    "CacheStoreMiddleware",
    "SiteCacheMiddleware",
    "abort_caching",
    "cache_page",
    "cache_page_atomic",
    "cache_page_without_header",
    "cache_page_without_query",
    "get_cache_store",
    # Services
    "ResponseCollector",
    "SerializationGuard",
    "create_key",
    "derive_key",
    "sanitize_headers",
    # Repositories (data access)
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    "register_response_record",
    # Entities and metrics
    "ResponseRecord",
    "CacheMetrics",
    # Errors
    "CacheError",
    "CacheMissError",
    "CacheStoreError",
    "NotStoredError",
    "SerializationError",
]
