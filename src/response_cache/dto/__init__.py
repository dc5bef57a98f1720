"""Data Transfer Objects for the demo API contract."""

from .responses import CacheStatsResponse, HealthCheckResponse, MessageResponse

__all__ = [
    "CacheStatsResponse",
    "HealthCheckResponse",
    "MessageResponse",
]
