import logging
import os
import sys
from dataclasses import dataclass, field
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

DEFAULT_NAMESPACE = "response_cache.page"
DEFAULT_STATUS_HEADER = "x-cache-status"
DEFAULT_DISALLOWED_HEADERS = frozenset({"authorization", DEFAULT_STATUS_HEADER})
DEFAULT_KEY_MAX_LENGTH = 200


@dataclass(frozen=True)
class CacheConfig:
    """Per-engine cache configuration.

    Passed explicitly to engines and middleware; never mutated after
    construction.

    Attributes:
        namespace: Prefix scoping every derived cache key
        disallowed_headers: Header names never written to or served from the cache
        status_header: Name of the HIT/MISS diagnostic header
        key_max_length: Escaped identities longer than this are digested
    """

    namespace: str = DEFAULT_NAMESPACE
    disallowed_headers: frozenset[str] = DEFAULT_DISALLOWED_HEADERS
    status_header: str = DEFAULT_STATUS_HEADER
    key_max_length: int = DEFAULT_KEY_MAX_LENGTH

    def __post_init__(self) -> None:
        # Header names are compared lower-cased everywhere.
        object.__setattr__(
            self,
            "disallowed_headers",
            frozenset(name.lower() for name in self.disallowed_headers),
        )
        object.__setattr__(self, "status_header", self.status_header.lower())
        if self.key_max_length <= 0:
            raise ValueError("key_max_length must be positive")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "memory")
    cache_ttl: int = int(os.getenv("CACHE_TTL", "60"))
    cache_namespace: str = os.getenv("CACHE_NAMESPACE", DEFAULT_NAMESPACE)
    cache_key_max_length: int = int(os.getenv("CACHE_KEY_MAX_LENGTH", str(DEFAULT_KEY_MAX_LENGTH)))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    cache_config: CacheConfig = field(init=False)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in ("memory", "redis"):
            raise ValueError(f"CACHE_BACKEND must be 'memory' or 'redis', got {self.cache_backend!r}")

        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL {self.log_level!r} is not a logging level")

        object.__setattr__(
            self,
            "cache_config",
            CacheConfig(
                namespace=self.cache_namespace,
                key_max_length=self.cache_key_max_length,
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure standard library logging for the service."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=(level or settings.log_level).upper(),
    )
