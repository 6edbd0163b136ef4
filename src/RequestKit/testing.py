"""Testing utilities for exercising RequestKit without a network.

Provides :class:`MockServer`, a route table served through
:class:`httpx.MockTransport` that records every request it receives, and
:func:`use_mock_transport`, which routes all RequestKit calls through a given
transport until the block exits.

Examples:
    >>> server = MockServer()
    >>> server.add("/get/ok", ResponseSpec(body="ok"))
    >>> with use_mock_transport(server.transport):
    ...     response = anyio.run(RequestKit.get, "http://mock/get/ok")  # doctest: +SKIP
"""

from __future__ import annotations

import contextlib
import inspect
import json
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import httpx

from .client import override_transport

__all__ = [
    "ResponseSpec",
    "RequestRecord",
    "MockServer",
    "use_mock_transport",
]


@dataclass
class ResponseSpec:
    """HTTP response definition served by :class:`MockServer`."""

    status: int = 200
    body: Union[bytes, str, dict, list] = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def serialise_body(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return json.dumps(self.body).encode("utf-8")

    def to_response(self) -> httpx.Response:
        """Build an unread response whose body is served exactly as stored."""
        body = self.serialise_body()
        headers = httpx.Headers(self.headers)
        headers.setdefault("content-length", str(len(body)))
        return httpx.Response(self.status, headers=headers, stream=_StoredBody(body))


class _StoredBody(httpx.AsyncByteStream):
    """Async body stream replaying stored bytes, left undecoded for the reader."""

    def __init__(self, body: bytes) -> None:
        self._body = body

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._body:
            yield self._body


def _unread(response: httpx.Response) -> httpx.Response:
    # httpx reads in-memory responses on construction; serve them as a fresh stream
    if not isinstance(response.stream, httpx.ByteStream):
        return response
    body = b"".join(response.stream)
    return httpx.Response(response.status_code, headers=response.headers, stream=_StoredBody(body))


def _as_handler(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[httpx.Request], object]:
    async def handle(request: httpx.Request) -> httpx.Response:
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return _unread(result)

    return handle


@dataclass
class RequestRecord:
    """Captured HTTP request received by :class:`MockServer`."""

    method: str
    path: str
    headers: httpx.Headers
    body: bytes

    @property
    def host(self) -> Optional[str]:
        return self.headers.get("host")


Responder = Union[ResponseSpec, Callable[[httpx.Request], Union[httpx.Response, ResponseSpec]]]


class MockServer:
    """In-process route table answering RequestKit requests.

    Routes are keyed by path, optionally restricted to one method. Method
    specific routes win over method-agnostic ones; unknown paths get ``404``.
    """

    def __init__(self) -> None:
        self._routes: Dict[Tuple[Optional[str], str], Responder] = {}
        self.requests: List[RequestRecord] = []

    def add(self, path: str, responder: Responder, *, method: Optional[str] = None) -> None:
        """Register ``responder`` for ``path`` (and ``method`` when given)."""
        self._routes[(method.upper() if method else None, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(
            RequestRecord(
                method=request.method,
                path=request.url.raw_path.decode("ascii"),
                headers=httpx.Headers(request.headers),
                body=request.content,
            )
        )
        path = request.url.path
        responder = self._routes.get((request.method, path)) or self._routes.get((None, path))
        if responder is None:
            return ResponseSpec(status=404, body="Not Found").to_response()
        result = responder if isinstance(responder, ResponseSpec) else responder(request)
        if isinstance(result, ResponseSpec):
            return result.to_response()
        return _unread(result)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@contextlib.contextmanager
def use_mock_transport(
    transport: Union[httpx.AsyncBaseTransport, Callable[[httpx.Request], httpx.Response]],
) -> Iterator[httpx.AsyncBaseTransport]:
    """Temporarily route RequestKit requests through ``transport``.

    A plain handler function is wrapped in :class:`httpx.MockTransport`; the
    responses it builds are served as unread streams.
    """
    if not isinstance(transport, httpx.AsyncBaseTransport):
        transport = httpx.MockTransport(_as_handler(transport))
    with override_transport(transport) as installed:
        yield installed
