"""HTTP layer: ASGI endpoints and middleware built on the cache services."""

from .cache_page import (
    CachePage,
    abort_caching,
    cache_page,
    cache_page_atomic,
    cache_page_without_header,
    cache_page_without_query,
    is_aborted,
    replay_record,
)
from .middleware import (
    CACHE_MIDDLEWARE_KEY,
    CacheStoreMiddleware,
    SiteCacheMiddleware,
    get_cache_store,
)

__all__ = [
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
    "is_aborted",
    "replay_record",
]
