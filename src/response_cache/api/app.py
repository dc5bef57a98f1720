"""Demo HTTP API showing the cache handlers on a FastAPI app.

Run with:
    ```bash
    python -m response_cache.api.app
    ```
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from response_cache.api.dependencies import MetricsDep, StoreDep
from response_cache.config import Settings, configure_logging, get_settings
from response_cache.dto import CacheStatsResponse, HealthCheckResponse, MessageResponse
from response_cache.exceptions import CacheStoreError
from response_cache.handlers import (
    CacheStoreMiddleware,
    cache_page,
    cache_page_atomic,
    cache_page_without_header,
    cache_page_without_query,
)
from response_cache.models import CacheMetrics
from response_cache.protocols import CacheStore
from response_cache.repositories import InMemoryCacheRepository, RedisCacheRepository

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> CacheStore:
    """Create the store selected by CACHE_BACKEND."""
    if settings.cache_backend == "redis":
        return RedisCacheRepository.create(
            default_ttl=settings.cache_ttl,
            namespace=settings.cache_config.namespace,
        )
    return InMemoryCacheRepository.create(default_ttl=settings.cache_ttl)


async def ping(request: Request) -> PlainTextResponse:
    """Non-deterministic body, so hits are easy to tell from misses."""
    return PlainTextResponse(f"pong {time.time_ns()}")


async def search(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "query": request.query_params.get("q"),
            "generated_at": time.time_ns(),
        }
    )


def plain(request: Request) -> PlainTextResponse:
    return PlainTextResponse(f"plain {time.time_ns()}")


def create_app(store: CacheStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the demo application.

    Args:
        store: Cache backend. If None, built from settings.
        settings: Application settings. If None, uses environment settings.

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    metrics = CacheMetrics()
    config = settings.cache_config
    ttl = settings.cache_ttl

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        configure_logging(settings.log_level)
        logger.info("Starting Response Cache API (backend=%s, ttl=%ss)", type(store).__name__, ttl)
        if not store.health_check():
            logger.warning("Cache backend is not reachable; requests will run uncached")

        yield

        logger.info("Shutting down Response Cache API")

    app = FastAPI(
        title="Response Cache API",
        description="Demo service for the HTTP response cache handlers",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.metrics = metrics
    app.state.store = store

    app.add_middleware(CacheStoreMiddleware, store=store)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_route("/ping", cache_page(store, ttl, ping, config=config, metrics=metrics), methods=["GET"])
    app.add_route(
        "/ping/atomic",
        cache_page_atomic(store, ttl, ping, config=config, metrics=metrics),
        methods=["GET"],
    )
    app.add_route(
        "/search",
        cache_page_without_query(store, ttl, search, config=config, metrics=metrics),
        methods=["GET"],
    )
    app.add_route(
        "/plain",
        cache_page_without_header(store, ttl, plain, config=config, metrics=metrics),
        methods=["GET"],
    )

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(cache_store: StoreDep) -> HealthCheckResponse:
        """Health check endpoint."""
        healthy = cache_store.health_check()
        if not healthy:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Cache backend is not reachable",
            )
        return HealthCheckResponse(status="healthy", cache_healthy=True, backend=type(cache_store).__name__)

    @app.get("/stats", response_model=CacheStatsResponse)
    async def get_stats(cache_metrics: MetricsDep) -> CacheStatsResponse:
        """Get cache decision statistics."""
        return CacheStatsResponse(**cache_metrics.to_dict())

    @app.post("/stats/reset", response_model=MessageResponse)
    async def reset_stats(cache_metrics: MetricsDep) -> MessageResponse:
        """Reset cache decision statistics."""
        cache_metrics.reset()
        return MessageResponse(message="Cache statistics reset")

    @app.delete("/cache", response_model=MessageResponse)
    async def clear_cache(cache_store: StoreDep) -> MessageResponse:
        """Clear all entries from the cache."""
        try:
            cache_store.flush()
        except CacheStoreError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Cache clear failed: {e}",
            )
        return MessageResponse(message="Cache cleared successfully")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "response_cache.api.app:app",
        host=_settings.api_host,
        port=_settings.api_port,
        reload=_settings.api_reload,
    )
