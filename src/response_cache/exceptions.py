"""Error taxonomy for the response cache.

Only failures talking to the client propagate out of a request. Store
failures are logged and degrade to miss-like behaviour.
"""


class CacheError(Exception):
    """Base class for all response cache errors."""


class CacheStoreError(CacheError):
    """A cache backend failed (connection, timeout, decoding, ...)."""


class CacheMissError(CacheStoreError):
    """No live entry exists for the key. Expected, never logged."""

    def __init__(self, key: str) -> None:
        super().__init__(f"cache miss: {key}")
        self.key = key


class NotStoredError(CacheStoreError):
    """An add/replace precondition failed (entry present or absent)."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"not stored: {key} ({reason})")
        self.key = key
        self.reason = reason


class SerializationError(CacheStoreError):
    """A stored value could not be encoded or decoded."""
