"""Cache key derivation.

Keys have the form ``<namespace>:<identity>`` where the identity is the
query-escaped request target, or its SHA-1 hex digest once the escaped
form grows past the configured maximum length.
"""

import hashlib
from urllib.parse import quote_plus

from starlette.requests import HTTPConnection

from response_cache.config import DEFAULT_KEY_MAX_LENGTH, CacheConfig


def derive_key(namespace: str, raw_identity: str, max_length: int = DEFAULT_KEY_MAX_LENGTH) -> str:
    """Map a request identity to a namespaced cache key.

    Args:
        namespace: Key prefix
        raw_identity: Request path, optionally with its query string
        max_length: Longest escaped identity kept verbatim

    Returns:
        The cache key
    """
    escaped = quote_plus(raw_identity, safe="")
    if len(escaped) > max_length:
        escaped = hashlib.sha1(raw_identity.encode("utf-8")).hexdigest()
    return f"{namespace}:{escaped}"


def create_key(raw_identity: str, config: CacheConfig | None = None) -> str:
    """Derive a key using the namespace and length limit of `config`."""
    config = config or CacheConfig()
    return derive_key(config.namespace, raw_identity, config.key_max_length)


def request_identity(request: HTTPConnection, include_query: bool = True) -> str:
    """Return the request path, with ``?query`` appended when asked and present."""
    path = request.url.path
    query = request.url.query
    if include_query and query:
        return f"{path}?{query}"
    return path
