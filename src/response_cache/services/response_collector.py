"""Write-intercepting response sink.

`ResponseCollector` stands in for the ASGI ``send`` callable while a
handler's response is streamed. Every message is forwarded to the real
sink first; body chunks that reached the client are accumulated in
memory and persisted as a single `ResponseRecord` once the response is
complete.
"""

import logging

from starlette.types import Message, Send

from response_cache.config import CacheConfig
from response_cache.entities import ResponseRecord
from response_cache.exceptions import CacheStoreError
from response_cache.protocols import CacheStore

from .header_sanitizer import Headers, RawHeaders, headers_from_raw, sanitize_headers

logger = logging.getLogger(__name__)

CACHEABLE_STATUS_LIMIT = 300


class ResponseCollector:
    """Decorates an ASGI ``send`` and captures what it forwards.

    Example:
        ```python
        collector = ResponseCollector(send, store, key, ttl=60)
        await response(scope, receive, collector)
        collector.flush()
        ```
    """

    def __init__(
        self,
        send: Send,
        store: CacheStore,
        key: str,
        ttl: int | None,
        config: CacheConfig | None = None,
        extra_headers: RawHeaders | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            send: The real ASGI send callable
            store: Store the finished record is written to
            key: Cache key of the current request
            ttl: Expiry of the stored record in seconds (None = store default)
            config: Cache configuration (disallowed headers)
            extra_headers: Headers appended to the start message on the way
                out, e.g. the MISS diagnostic header
        """
        self._send = send
        self._store = store
        self._key = key
        self._ttl = ttl
        self._config = config or CacheConfig()
        self._extra_headers = list(extra_headers or [])
        self._status: int | None = None
        self._headers: Headers = {}
        self._body = bytearray()
        self._written = False
        self._finished = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def status(self) -> int | None:
        """Status code sent to the client, None before the headers."""
        return self._status

    @property
    def written(self) -> bool:
        """Whether status and headers have been committed."""
        return self._written

    @property
    def finished(self) -> bool:
        """Whether the final body chunk has been forwarded."""
        return self._finished

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            await self.write_header(message["status"], message.get("headers", []), message)
        elif message["type"] == "http.response.body":
            await self.write(message.get("body", b""), message.get("more_body", False))
        else:
            await self._send(message)

    async def write_header(
        self,
        status: int,
        raw_headers: RawHeaders,
        message: Message | None = None,
    ) -> None:
        """Record and forward the status line and headers.

        Raises:
            RuntimeError: Headers were already written
        """
        if self._written:
            raise RuntimeError("response headers already written")

        if self._extra_headers:
            # Extra headers replace any value the handler set under the same name.
            overridden = {name.lower() for name, _ in self._extra_headers}
            raw_headers = [(name, value) for name, value in raw_headers if name.lower() not in overridden]
        raw_headers = list(raw_headers) + self._extra_headers
        outgoing = dict(message or {})
        outgoing.update(type="http.response.start", status=status, headers=raw_headers)
        await self._send(outgoing)

        self._status = status
        self._headers = headers_from_raw(raw_headers)
        self._written = True

    async def write(self, data: bytes, more_body: bool = False) -> int:
        """Forward a body chunk, then accumulate it.

        Exceptions from the real sink propagate and leave the accumulated
        body untouched.

        Returns:
            Number of bytes forwarded
        """
        await self._forward(data, more_body)
        self._body.extend(data)
        return len(data)

    async def write_text(self, text: str, more_body: bool = False, encoding: str = "utf-8") -> int:
        """Forward `text` and make it the whole cached body.

        Unlike `write`, earlier chunks are not kept: the record holds
        exactly the text written last.

        Returns:
            Number of bytes forwarded
        """
        data = text.encode(encoding)
        await self._forward(data, more_body)
        self._body = bytearray(data)
        return len(data)

    async def _forward(self, data: bytes, more_body: bool) -> None:
        if not self._written:
            # ASGI servers reject a body before the start message.
            raise RuntimeError("response body written before headers")
        await self._send({"type": "http.response.body", "body": data, "more_body": more_body})
        if not more_body:
            self._finished = True

    def cacheable(self) -> bool:
        """Only complete responses with a status below 300 are cached."""
        return self._finished and self._status is not None and self._status < CACHEABLE_STATUS_LIMIT

    def record(self) -> ResponseRecord:
        """Snapshot of the response with disallowed headers removed."""
        return ResponseRecord(
            status=self._status or 200,
            headers=sanitize_headers(self._headers, self._config.disallowed_headers),
            body=bytes(self._body),
        )

    def flush(self) -> bool:
        """Persist the collected response if it is cacheable.

        Store failures are logged and swallowed so a cache outage never
        breaks response delivery.

        Returns:
            True if a record was written to the store
        """
        if not self.cacheable():
            return False
        try:
            self._store.set(self._key, self.record(), self._ttl)
        except CacheStoreError as e:
            logger.warning("Failed to persist response for %s: %s", self._key, e)
            return False
        logger.debug("Stored response for %s (status %s, %d bytes)", self._key, self._status, len(self._body))
        return True
