# === NAVMAP v1 ===
# {
#   "module": "RequestKit.instrumentation",
#   "purpose": "HTTPX event hooks that log every request hop",
#   "sections": [
#     {"id": "create-http-event-hooks", "name": "create_http_event_hooks", "anchor": "function-create-http-event-hooks", "kind": "function"},
#     {"id": "redact-url", "name": "_redact_url", "anchor": "function-redact-url", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""HTTPX event hooks that log every request hop.

Each hop of a redirect chain is a separate HTTPX request, so the hooks emit
one ``http.request`` / ``http.response`` pair per hop with the elapsed time.
Query strings are stripped from logged URLs.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def create_http_event_hooks() -> dict[str, list[Any]]:
    """Create async HTTPX event hooks for request/response logging.

    Returns:
        Dict with ``request`` and ``response`` hook lists for
        :class:`httpx.AsyncClient`.

    Usage:
        >>> hooks = create_http_event_hooks()
        >>> client = httpx.AsyncClient(event_hooks=hooks)
    """
    request_start_time: dict[int, float] = {}

    async def on_request(request: httpx.Request) -> None:
        request_start_time[id(request)] = time.perf_counter()
        logger.debug(
            "http.request",
            extra={"method": request.method, "url_redacted": _redact_url(request.url)},
        )

    async def on_response(response: httpx.Response) -> None:
        start_time = request_start_time.pop(id(response.request), None)
        elapsed_ms = None if start_time is None else (time.perf_counter() - start_time) * 1000
        logger.debug(
            "http.response",
            extra={
                "method": response.request.method,
                "url_redacted": _redact_url(response.request.url),
                "status": response.status_code,
                "http_version": response.http_version,
                "elapsed_ms": elapsed_ms,
            },
        )

    return {"request": [on_request], "response": [on_response]}


def _redact_url(url: httpx.URL) -> str:
    """Return ``url`` without query string, fragment or credentials."""
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.path}"


__all__ = ["create_http_event_hooks"]
