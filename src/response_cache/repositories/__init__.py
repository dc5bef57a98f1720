"""Repository layer for data access.

Store backends satisfying the CacheStore protocol. They are
protocol-based (structural typing), not inheritance-based: any class
implementing the required methods can be passed to the cache handlers.
"""

from response_cache.protocols import CacheStore

from .codec import register_response_record, register_type
from .memory_repository import InMemoryCacheRepository
from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStore",
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    "register_response_record",
    "register_type",
]
