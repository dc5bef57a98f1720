"""Service layer: the building blocks of the cache decision flow."""

from .header_sanitizer import headers_from_raw, headers_to_raw, sanitize_headers
from .key_deriver import create_key, derive_key, request_identity
from .response_collector import ResponseCollector
from .serialization_guard import KeyedLock, SerializationGuard

__all__ = [
    "KeyedLock",
    "ResponseCollector",
    "SerializationGuard",
    "create_key",
    "derive_key",
    "headers_from_raw",
    "headers_to_raw",
    "request_identity",
    "sanitize_headers",
]
