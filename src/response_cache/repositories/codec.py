"""JSON codec with an explicit type registry.

Backends that persist values outside the process (Redis) encode them with
this codec. Custom value types must be registered before first use; the
response record is registered with `register_response_record()`.
"""

import json
from typing import Any

from response_cache.entities import ResponseRecord
from response_cache.exceptions import SerializationError

TYPE_TAG = "__type__"

_registry: dict[str, type] = {}


def register_type(name: str, cls: type) -> None:
    """Register a type exposing `to_dict()` / `from_dict()`.

    Re-registering the same class under the same name is a no-op.

    Raises:
        ValueError: The name is already bound to a different class
    """
    existing = _registry.get(name)
    if existing is not None and existing is not cls:
        raise ValueError(f"codec name {name!r} already registered for {existing.__name__}")
    _registry[name] = cls


def register_response_record() -> None:
    """Register `ResponseRecord` with the codec."""
    register_type("response_record", ResponseRecord)


def _tag_for(value: Any) -> str | None:
    for name, cls in _registry.items():
        if type(value) is cls:
            return name
    return None


def dumps(value: Any) -> bytes:
    """Encode a value to bytes.

    Registered types are tagged; anything else must be JSON-serializable.

    Raises:
        SerializationError: The value cannot be encoded
    """
    tag = _tag_for(value)
    try:
        if tag is not None:
            return json.dumps({TYPE_TAG: tag, "data": value.to_dict()}).encode()
        if hasattr(value, "to_dict"):
            raise SerializationError(f"type {type(value).__name__} is not registered with the codec")
        return json.dumps(value).encode()
    except TypeError as e:
        raise SerializationError(f"cannot encode {type(value).__name__}: {e}") from e


def loads(raw: bytes | str) -> Any:
    """Decode bytes produced by `dumps`.

    Raises:
        SerializationError: Invalid JSON or an unregistered type tag
    """
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SerializationError(f"cannot decode cached value: {e}") from e

    if isinstance(decoded, dict) and TYPE_TAG in decoded:
        cls = _registry.get(decoded[TYPE_TAG])
        if cls is None:
            raise SerializationError(f"type {decoded[TYPE_TAG]!r} is not registered with the codec")
        try:
            return cls.from_dict(decoded["data"])
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"malformed {decoded[TYPE_TAG]} payload: {e}") from e
    return decoded
