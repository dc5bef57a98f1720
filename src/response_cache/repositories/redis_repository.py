"""Redis implementation of CacheStore.

Values are encoded with the JSON codec and written with a native Redis
expiry, so entries shared between worker processes expire consistently.
"""

from typing import Any

import redis

from response_cache.config import get_redis_client, settings
from response_cache.exceptions import CacheMissError, CacheStoreError, NotStoredError

from . import codec


class RedisCacheRepository:
    """Redis-backed store.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Uses:
    - SET EX for unconditional writes
    - SET NX / SET XX for add and replace
    - SCAN over the cache namespace for flush
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        default_ttl: int | None = None,
        key_prefix: str = "",
        namespace: str | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            default_ttl: Expiry in seconds used when `ttl` is None. Defaults to settings.
            key_prefix: Prefix prepended to every Redis key.
            namespace: Cache key namespace. Flush only deletes keys under
                it. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._default_ttl = settings.cache_ttl if default_ttl is None else default_ttl
        self._prefix = key_prefix
        self._namespace = settings.cache_namespace if namespace is None else namespace

    @classmethod
    def create(
        cls,
        default_ttl: int | None = None,
        key_prefix: str = "",
        namespace: str | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Registers the response record type with the codec, which must
        happen before any record is encoded.

        Args:
            default_ttl: Entry TTL in seconds. If None, uses settings.
            key_prefix: Redis key prefix.
            namespace: Cache key namespace scoping flush. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        codec.register_response_record()
        return cls(default_ttl=default_ttl, key_prefix=key_prefix, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _expiry(self, ttl: int | None) -> int | None:
        ttl = self._default_ttl if ttl is None else ttl
        return ttl if ttl > 0 else None

    def get(self, key: str) -> Any:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as e:
            raise CacheStoreError(f"redis get failed for {key}: {e}") from e
        if raw is None:
            raise CacheMissError(key)
        return codec.loads(raw)

    def _write(self, key: str, value: Any, ttl: int | None, **flags: bool) -> bool:
        payload = codec.dumps(value)
        try:
            return bool(self._client.set(self._key(key), payload, ex=self._expiry(ttl), **flags))
        except redis.RedisError as e:
            raise CacheStoreError(f"redis set failed for {key}: {e}") from e

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._write(key, value, ttl)

    def add(self, key: str, value: Any, ttl: int | None = None) -> None:
        if not self._write(key, value, ttl, nx=True):
            raise NotStoredError(key, "entry exists")

    def replace(self, key: str, value: Any, ttl: int | None = None) -> None:
        if not self._write(key, value, ttl, xx=True):
            raise NotStoredError(key, "entry missing")

    def delete(self, key: str) -> None:
        try:
            deleted: int = self._client.delete(self._key(key))  # type: ignore[assignment]
        except redis.RedisError as e:
            raise CacheStoreError(f"redis delete failed for {key}: {e}") from e
        if deleted == 0:
            raise CacheMissError(key)

    def flush(self) -> None:
        try:
            pattern = f"{self._prefix}{self._namespace}:*"
            for key in self._client.scan_iter(match=pattern):
                self._client.delete(key)
        except redis.RedisError as e:
            raise CacheStoreError(f"redis flush failed: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
