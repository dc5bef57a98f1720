"""Header sanitization applied at both cache boundaries."""

from collections.abc import Iterable, Mapping, Sequence

from response_cache.config import DEFAULT_DISALLOWED_HEADERS

Headers = dict[str, list[str]]
RawHeaders = list[tuple[bytes, bytes]]


def sanitize_headers(
    headers: Mapping[str, Sequence[str]],
    disallowed: Iterable[str] = DEFAULT_DISALLOWED_HEADERS,
) -> Headers:
    """Copy `headers` without the disallowed names.

    Matching is case-insensitive. The result owns fresh value lists, so
    mutating it never touches the caller's mapping.
    """
    blocked = {name.lower() for name in disallowed}
    return {name: list(values) for name, values in headers.items() if name.lower() not in blocked}


def headers_from_raw(raw_headers: Iterable[tuple[bytes, bytes]]) -> Headers:
    """Group ASGI raw headers by lower-cased name, preserving value order."""
    headers: Headers = {}
    for name, value in raw_headers:
        headers.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
    return headers


def headers_to_raw(headers: Mapping[str, Sequence[str]]) -> RawHeaders:
    """Flatten a header mapping into ASGI raw headers."""
    return [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, values in headers.items()
        for value in values
    ]
