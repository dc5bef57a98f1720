"""Response DTOs for the demo API endpoints."""

from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    backend: str = Field(..., description="Store implementation in use")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_requests: int = Field(..., description="Cache decisions taken", ge=0)
    cache_hits: int = Field(..., description="Requests served from the cache", ge=0)
    cache_misses: int = Field(..., description="Requests that ran the handler", ge=0)
    store_errors: int = Field(..., description="Lookups that failed and degraded to a miss", ge=0)
    aborted: int = Field(..., description="Handler runs that aborted caching", ge=0)
    hit_rate: float = Field(..., description="Hits divided by decisions", ge=0.0, le=1.0)
    avg_lookup_time_ms: float = Field(..., description="Mean store lookup latency in milliseconds", ge=0.0)


class MessageResponse(BaseModel):
    """Response DTO for simple acknowledgements."""

    message: str = Field(..., description="Human-readable status message")
