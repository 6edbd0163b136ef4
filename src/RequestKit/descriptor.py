# === NAVMAP v1 ===
# {
#   "module": "RequestKit.descriptor",
#   "purpose": "Request descriptor, body variants and the response result",
#   "sections": [
#     {"id": "bodykind", "name": "BodyKind", "anchor": "class-bodykind", "kind": "class"},
#     {"id": "requestbody", "name": "RequestBody", "anchor": "class-requestbody", "kind": "class"},
#     {"id": "consumptionmode", "name": "ConsumptionMode", "anchor": "class-consumptionmode", "kind": "class"},
#     {"id": "requestdescriptor", "name": "RequestDescriptor", "anchor": "class-requestdescriptor", "kind": "class"},
#     {"id": "response", "name": "Response", "anchor": "class-response", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Request descriptor, body variants and the response result.

A :class:`RequestDescriptor` is the fully resolved form of one request
attempt. It is frozen: normalization, multipart encoding and every redirect
hop produce a new descriptor with :func:`dataclasses.replace` rather than
editing the previous one, so no field from an earlier hop leaks into the next.
"""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass, field, replace
from typing import Any, AsyncIterator, Optional

import httpx

from .helpers import is_stream
from .policy import (
    DEFAULT_ENCODING,
    DEFAULT_PROTOCOL,
    DEFAULT_REDIRECT_LIMIT,
    STREAM_CHUNK_SIZE,
)

__all__ = [
    "BodyKind",
    "RequestBody",
    "ConsumptionMode",
    "RequestDescriptor",
    "Response",
]


class BodyKind(enum.Enum):
    """Shape of a request body."""

    EMPTY = "empty"
    BYTES = "bytes"
    TEXT = "text"
    STREAM = "stream"


@dataclass(frozen=True)
class RequestBody:
    """Tagged request body.

    ``content`` is ``None`` for :attr:`BodyKind.EMPTY`, ``bytes`` for
    :attr:`BodyKind.BYTES`, ``str`` for :attr:`BodyKind.TEXT` and a readable
    object or (async) iterator of bytes for :attr:`BodyKind.STREAM`.
    """

    kind: BodyKind = BodyKind.EMPTY
    content: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "RequestBody":
        if value is None or value == "" or value == b"":
            return cls()
        if isinstance(value, str):
            return cls(BodyKind.TEXT, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(BodyKind.BYTES, bytes(value))
        if is_stream(value):
            return cls(BodyKind.STREAM, value)
        raise TypeError(f"Unsupported request body type: {type(value).__name__}")

    @property
    def is_empty(self) -> bool:
        return self.kind is BodyKind.EMPTY

    def in_memory_bytes(self) -> Optional[bytes]:
        """Return the payload for in-memory bodies, ``None`` for streams."""
        if self.kind is BodyKind.TEXT:
            return self.content.encode("utf-8")
        if self.kind is BodyKind.BYTES:
            return self.content
        if self.kind is BodyKind.EMPTY:
            return b""
        return None

    async def aiter_chunks(self) -> AsyncIterator[bytes]:
        """Yield the body as byte chunks, reading streams incrementally."""
        payload = self.in_memory_bytes()
        if payload is not None:
            if payload:
                yield payload
            return

        source = self.content
        if hasattr(source, "__aiter__"):
            async for chunk in source:
                yield _to_bytes(chunk)
        elif callable(getattr(source, "read", None)):
            while True:
                chunk = source.read(STREAM_CHUNK_SIZE)
                if inspect.isawaitable(chunk):
                    chunk = await chunk
                if not chunk:
                    break
                yield _to_bytes(chunk)
        else:
            for chunk in source:
                yield _to_bytes(chunk)


def _to_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


class ConsumptionMode(enum.Enum):
    """How the response body is turned into :attr:`Response.body`.

    Chosen once during normalization, in priority order
    ``DOWNLOAD > BUFFER > JSON > TEXT``.
    """

    DOWNLOAD = "download"
    BUFFER = "buffer"
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class RequestDescriptor:
    """Fully resolved description of one HTTP request attempt."""

    protocol: str = DEFAULT_PROTOCOL
    hostname: str = ""
    port: Optional[int] = None
    path: str = "/"
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: RequestBody = field(default_factory=RequestBody)
    encoding: str = DEFAULT_ENCODING
    redirect_limit: int = DEFAULT_REDIRECT_LIMIT
    force_redirect: bool = False
    json: bool = False
    mode: ConsumptionMode = ConsumptionMode.TEXT
    download: Any = None
    include_headers: bool = False
    gzip: bool = False
    deflate: bool = False

    @property
    def host(self) -> str:
        hostname = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        if self.port is None:
            return hostname
        return f"{hostname}:{self.port}"

    @property
    def url(self) -> httpx.URL:
        return httpx.URL(f"{self.protocol}://{self.host}{self.path}")

    def context(self) -> dict[str, Any]:
        """Request context attached to every error raised for this attempt."""
        return {
            "host": self.host,
            "hostname": self.hostname,
            "method": self.method,
            "path": self.path,
        }

    def with_location(self, location: str) -> "RequestDescriptor":
        """Return the descriptor for the next hop of a redirect to ``location``.

        Relative locations resolve against the current URL.
        """
        target = self.url.join(location)
        return replace(
            self,
            protocol=target.scheme or self.protocol,
            hostname=target.host or self.hostname,
            port=target.port,
            path=target.raw_path.decode("ascii") or "/",
        )


@dataclass
class Response:
    """Successful result of a request.

    Attributes:
        body: Text, bytes, decoded JSON or the download confirmation,
            depending on the consumption mode.
        headers: Response headers when ``include_headers`` was requested.
        status_code: Status of the final hop.
        url: URL of the final hop.
    """

    body: Any
    headers: Optional[httpx.Headers] = None
    status_code: int = 200
    url: Optional[httpx.URL] = None
