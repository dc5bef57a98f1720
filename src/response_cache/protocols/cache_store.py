"""Cache storage protocol.

Defines the key-value contract any response cache backend must satisfy.

Implementations can include:
- In-memory dictionary with lazy expiry (default, tests)
- Redis (shared between processes)
- Memcached
- Any other store offering get/set/add/delete with per-entry expiry
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations must be safe to call from
    concurrent requests.

    Example:
        ```python
        from response_cache.protocols import CacheStore

        store: CacheStore = InMemoryCacheRepository(default_ttl=60)
        store: CacheStore = RedisCacheRepository.create()
        ```
    """

    def get(self, key: str) -> Any:
        """Fetch a live entry.

        Args:
            key: The cache key

        Returns:
            The stored value (never an alias of the stored object)

        Raises:
            CacheMissError: No live entry exists for the key
            CacheStoreError: The backend failed
        """
        ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value unconditionally.

        Args:
            key: The cache key
            value: Value to store
            ttl: Time-to-live in seconds. None uses the store default.
        """
        ...

    def add(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value only if no live entry exists.

        Raises:
            NotStoredError: A live entry already exists
        """
        ...

    def replace(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value only if a live entry already exists.

        Raises:
            NotStoredError: No live entry exists
        """
        ...

    def delete(self, key: str) -> None:
        """Remove an entry.

        Raises:
            CacheMissError: No entry exists for the key
        """
        ...

    def flush(self) -> None:
        """Remove every entry."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...
