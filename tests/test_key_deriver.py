"""Tests for cache key derivation."""

import hashlib

from starlette.requests import Request

from response_cache.config import CacheConfig
from response_cache.services import create_key, derive_key, request_identity


def make_request(path: str, query: bytes = b"") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "query_string": query,
            "headers": [],
        }
    )


def test_derive_key_is_deterministic():
    first = derive_key("ns", "/items?page=2")
    assert all(derive_key("ns", "/items?page=2") == first for _ in range(10))


def test_derive_key_escapes_identity():
    assert derive_key("ns", "/a b?x=1&y=2") == "ns:%2Fa+b%3Fx%3D1%26y%3D2"


def test_derive_key_keeps_unreserved_characters():
    assert derive_key("ns", "abc-_.~123") == "ns:abc-_.~123"


def test_long_identity_uses_digest():
    identity = "/search?q=" + "x" * 250
    key = derive_key("ns", identity)

    namespace, digest = key.split(":", 1)
    assert namespace == "ns"
    assert digest == hashlib.sha1(identity.encode()).hexdigest()
    assert len(digest) == 40


def test_identity_at_limit_is_kept_verbatim():
    identity = "a" * 200
    assert derive_key("ns", identity) == f"ns:{identity}"
    assert derive_key("ns", identity + "a") != f"ns:{identity}a"


def test_escaping_counts_towards_limit():
    # 100 spaces escape to 100 "+" but 100 slashes escape to 300 characters.
    assert derive_key("ns", " " * 100) == "ns:" + "+" * 100
    assert len(derive_key("ns", "/" * 100)) == len("ns:") + 40


def test_create_key_uses_config():
    config = CacheConfig(namespace="site", key_max_length=10)
    assert create_key("/short", config) == "site:%2Fshort"
    assert len(create_key("/much-longer-path", config)) == len("site:") + 40


def test_create_key_default_namespace():
    assert create_key("/ping").startswith("response_cache.page:")


def test_request_identity_with_query():
    request = make_request("/items", b"a=1&b=2")
    assert request_identity(request) == "/items?a=1&b=2"


def test_request_identity_without_query():
    request = make_request("/items", b"a=1")
    assert request_identity(request, include_query=False) == "/items"


def test_request_identity_omits_empty_query():
    assert request_identity(make_request("/items")) == "/items"
