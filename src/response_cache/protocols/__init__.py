"""Protocol interfaces for swappable implementations.

Protocols enable:
- Easy swapping of store backends (memory → Redis → Memcached)
- Unit testing with fake implementations
- Keeping the decision engine free of backend details
"""

from .cache_store import CacheStore

__all__ = [
    "CacheStore",
]
