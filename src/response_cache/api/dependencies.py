"""Dependency injection helpers for the demo FastAPI app.

Pattern:
    - The store reaches handlers through `CacheStoreMiddleware`
    - Metrics live in app.state, set up by `create_app`
    - Dependency functions retrieve both from the request
"""

from typing import Annotated

from fastapi import Depends, Request

from response_cache.handlers import get_cache_store
from response_cache.models import CacheMetrics
from response_cache.protocols import CacheStore


def get_metrics(request: Request) -> CacheMetrics:
    """Dependency injection for CacheMetrics from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The CacheMetrics instance from app.state

    Raises:
        RuntimeError: If metrics are not initialized
    """
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is None:
        raise RuntimeError("CacheMetrics not initialized. Check create_app setup.")
    return metrics


# Type aliases for cleaner dependency injection
StoreDep = Annotated[CacheStore, Depends(get_cache_store)]
MetricsDep = Annotated[CacheMetrics, Depends(get_metrics)]
