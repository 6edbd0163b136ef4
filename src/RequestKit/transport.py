# === NAVMAP v1 ===
# {
#   "module": "RequestKit.transport",
#   "purpose": "Send a request descriptor and follow redirects under policy",
#   "sections": [
#     {"id": "send", "name": "send", "anchor": "function-send", "kind": "function"},
#     {"id": "should-follow-redirect", "name": "should_follow_redirect", "anchor": "function-should-follow-redirect", "kind": "function"},
#     {"id": "send-loop", "name": "_send_loop", "anchor": "function-send-loop", "kind": "function"},
#     {"id": "pipe-body", "name": "_pipe_body", "anchor": "function-pipe-body", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Send a request descriptor and follow redirects under policy.

HTTPX auto-redirect is disabled (see :mod:`RequestKit.client`); this module
follows redirects itself so the policy can depend on the request method:

- **Redirect-class**: 300, 301, 302, 303, 305, 307 or 308 *with* a
  ``Location`` header. Without the header the response is final.
- **Always followed**: 300, 303, 307, 308.
- **GET/HEAD only**: 301, 302, 305, unless ``force_redirect`` is set; any
  other method gets :class:`~RequestKit.errors.RedirectError`.
- **Budget**: each followed redirect increments a hop counter; exceeding
  ``redirect_limit`` raises :class:`~RequestKit.errors.MaxRedirectsError`.

Each hop completes (headers received, decision made, response closed) before
the next one starts. The final response body is read fully, still encoded,
and handed to :func:`RequestKit.decode.decode_response`.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

import httpx

from .client import create_http_client
from .decode import decode_response
from .descriptor import RequestDescriptor, Response
from .errors import MaxRedirectsError, RedirectError, RequestError
from .helpers import is_redirect, is_redirect_all
from .policy import REDIRECT_SAFE_METHODS

__all__ = ["send", "should_follow_redirect"]

logger = logging.getLogger(__name__)


def should_follow_redirect(status_code: int, method: str, force_redirect: bool = False) -> bool:
    """Return ``True`` when a redirect-class response may be followed.

    Examples:
        >>> should_follow_redirect(307, "POST")
        True
        >>> should_follow_redirect(302, "POST")
        False
        >>> should_follow_redirect(302, "POST", force_redirect=True)
        True
    """
    return force_redirect or is_redirect_all(status_code) or method.upper() in REDIRECT_SAFE_METHODS


async def send(
    descriptor: RequestDescriptor, *, client: Optional[httpx.AsyncClient] = None
) -> Response:
    """Perform ``descriptor``, following redirects, and decode the response.

    Args:
        descriptor: Normalized request descriptor.
        client: Client to reuse; when omitted a client is created for this call
            and closed before returning.

    Raises:
        RedirectError: Redirect refused for the request method.
        MaxRedirectsError: Redirect budget exhausted.
        RequestError: Transport failure, including request body stream errors.
        HTTPError, ParseError, FileError: Raised while decoding the response.
    """
    if client is not None:
        return await _send_loop(client, descriptor)
    async with create_http_client() as owned:
        return await _send_loop(owned, descriptor)


async def _send_loop(client: httpx.AsyncClient, descriptor: RequestDescriptor) -> Response:
    current = descriptor
    redirects_followed = 0

    while True:
        response = await _dispatch(client, current)
        try:
            location = response.headers.get("location")
            if is_redirect(response.status_code) and location is not None:
                if not should_follow_redirect(
                    response.status_code, current.method, current.force_redirect
                ):
                    logger.warning(
                        "Redirect refused for method",
                        extra={
                            "method": current.method,
                            "status": response.status_code,
                            "location": location,
                        },
                    )
                    raise RedirectError(
                        response.status_code, location=location, context=current.context()
                    )

                redirects_followed += 1
                if redirects_followed > current.redirect_limit:
                    raise MaxRedirectsError(
                        response.status_code,
                        location=location,
                        redirect_limit=current.redirect_limit,
                        context=current.context(),
                    )

                next_hop = _next_hop(current, location)
                logger.debug(
                    "Following redirect",
                    extra={
                        "from": str(current.url),
                        "to": str(next_hop.url),
                        "status": response.status_code,
                        "hop": redirects_followed,
                    },
                )
                current = next_hop
                continue

            raw = await _read_raw(response, current)
        finally:
            await response.aclose()

        return await decode_response(
            current, response.status_code, response.headers, raw, url=response.url
        )


async def _dispatch(client: httpx.AsyncClient, descriptor: RequestDescriptor) -> httpx.Response:
    """Send one hop and return the streamed response (body not yet read)."""
    try:
        request = client.build_request(
            descriptor.method,
            descriptor.url,
            headers=descriptor.headers,
            content=None if descriptor.body.is_empty else _pipe_body(descriptor),
        )
        return await client.send(request, stream=True)
    except httpx.TransportError as exc:
        raise RequestError(
            str(exc) or type(exc).__name__,
            code=type(exc).__name__,
            context=descriptor.context(),
        ) from exc
    except httpx.InvalidURL as exc:
        raise RequestError(str(exc), code="InvalidURL", context=descriptor.context()) from exc


async def _pipe_body(descriptor: RequestDescriptor) -> AsyncIterator[bytes]:
    """Stream the request body, turning read failures into :class:`RequestError`."""
    try:
        async for chunk in descriptor.body.aiter_chunks():
            yield chunk
    except Exception as exc:
        logger.warning(
            "Request body stream failed; aborting request",
            extra={"method": descriptor.method, "error": str(exc)},
        )
        raise RequestError(
            str(exc) or type(exc).__name__,
            code=type(exc).__name__,
            context=descriptor.context(),
        ) from exc


async def _read_raw(response: httpx.Response, descriptor: RequestDescriptor) -> bytes:
    """Accumulate the undecoded response body."""
    chunks: list[bytes] = []
    try:
        async for chunk in response.aiter_raw():
            chunks.append(chunk)
    except (httpx.TransportError, httpx.StreamError) as exc:
        raise RequestError(
            str(exc) or type(exc).__name__,
            code=type(exc).__name__,
            context=descriptor.context(),
        ) from exc
    return b"".join(chunks)


def _next_hop(descriptor: RequestDescriptor, location: str) -> RequestDescriptor:
    try:
        return descriptor.with_location(location)
    except httpx.InvalidURL as exc:
        raise RequestError(
            f"Invalid redirect location {location!r}: {exc}",
            code="InvalidURL",
            context=descriptor.context(),
        ) from exc
