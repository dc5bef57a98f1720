"""Cached response domain entity."""

import base64
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ResponseRecord:
    """Snapshot of a cacheable response.

    Written once per key by the response collector and replayed verbatim
    on a hit. Header names are lower-cased; each maps to its values in
    the order they were sent.

    Attributes:
        status: HTTP status code
        headers: Header name to ordered list of values
        body: Response body bytes
    """

    status: int
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (body base64-encoded)."""
        return {
            "status": self.status,
            "headers": {name: list(values) for name, values in self.headers.items()},
            "body": base64.b64encode(self.body).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResponseRecord":
        """Rebuild a record from `to_dict` output."""
        return cls(
            status=int(data["status"]),
            headers={name.lower(): list(values) for name, values in data.get("headers", {}).items()},
            body=base64.b64decode(data.get("body", "")),
        )
