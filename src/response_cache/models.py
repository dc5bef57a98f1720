from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track outcomes of cache decisions."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    store_errors: int = 0
    aborted: int = 0
    total_lookup_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests

    @property
    def avg_lookup_time_ms(self) -> float:
        """Calculate average lookup time."""
        if self.total_requests == 0:
            return 0.0
        return self.total_lookup_time_ms / self.total_requests

    def record_hit(self, lookup_time_ms: float) -> None:
        """Record a cache hit."""
        self.total_requests += 1
        self.cache_hits += 1
        self.total_lookup_time_ms += lookup_time_ms

    def record_miss(self, lookup_time_ms: float) -> None:
        """Record a cache miss."""
        self.total_requests += 1
        self.cache_misses += 1
        self.total_lookup_time_ms += lookup_time_ms

    def record_store_error(self, lookup_time_ms: float) -> None:
        """Record a failed lookup (served as a miss)."""
        self.record_miss(lookup_time_ms)
        self.store_errors += 1

    def record_abort(self) -> None:
        """Record a handler that aborted caching."""
        self.aborted += 1

    def reset(self) -> None:
        """Zero all counters."""
        self.total_requests = 0
        self.cache_hits = 0
        self.cache_misses = 0
        self.store_errors = 0
        self.aborted = 0
        self.total_lookup_time_ms = 0.0

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "store_errors": self.store_errors,
            "aborted": self.aborted,
            "hit_rate": self.hit_rate,
            "avg_lookup_time_ms": self.avg_lookup_time_ms,
        }
