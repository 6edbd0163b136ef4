# === NAVMAP v1 ===
# {
#   "module": "RequestKit.client",
#   "purpose": "Per-call HTTPX async client factory",
#   "sections": [
#     {"id": "create-http-client", "name": "create_http_client", "anchor": "function-create-http-client", "kind": "function"},
#     {"id": "override-transport", "name": "override_transport", "anchor": "function-override-transport", "kind": "function"},
#     {"id": "create-ssl-context", "name": "_create_ssl_context", "anchor": "function-create-ssl-context", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Per-call HTTPX async client factory.

Every top-level request builds its own :class:`httpx.AsyncClient` and closes it
when the pipeline ends, so concurrent calls share no connection pool or other
mutable state.

Key design:
- **Redirects**: disabled in HTTPX; :mod:`RequestKit.transport` follows them.
- **Timeouts**: none; requests wait as long as the transport allows.
- **Environment**: proxy variables are ignored (``trust_env=False``).
- **Transport override**: tests install a process-wide mock transport with
  :func:`override_transport`.
"""

from __future__ import annotations

import contextlib
import logging
import ssl
import threading
from typing import Iterator, Optional

import certifi
import httpx

from .instrumentation import create_http_event_hooks
from .settings import get_settings

logger = logging.getLogger(__name__)

_transport_override: Optional[httpx.AsyncBaseTransport] = None
_override_lock = threading.Lock()


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the HTTPX client used for one top-level request.

    Args:
        transport: Explicit transport; defaults to the installed override, or
            the standard HTTPX network transport when none is installed.

    Returns:
        Configured :class:`httpx.AsyncClient`. The caller owns it and must
        close it.
    """
    transport = transport or _transport_override
    client_kwargs: dict = {
        "timeout": None,
        "follow_redirects": False,
        "trust_env": False,
        "event_hooks": create_http_event_hooks(),
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    else:
        client_kwargs["verify"] = _create_ssl_context(get_settings().verify_tls)
    return httpx.AsyncClient(**client_kwargs)


@contextlib.contextmanager
def override_transport(transport: httpx.AsyncBaseTransport) -> Iterator[httpx.AsyncBaseTransport]:
    """Route every RequestKit request through ``transport`` until exit."""
    global _transport_override

    with _override_lock:
        previous = _transport_override
        _transport_override = transport
    try:
        yield transport
    finally:
        with _override_lock:
            _transport_override = previous


def _create_ssl_context(verify: bool) -> ssl.SSLContext:
    """Create SSL context with system + certifi certificates.

    Returns:
        Configured ssl.SSLContext; verification disabled only when
        ``REQUESTKIT_VERIFY_TLS`` is false.
    """
    if not verify:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS verification DISABLED")
        return ctx

    ctx = ssl.create_default_context(cafile=certifi.where())
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx


__all__ = ["create_http_client", "override_transport"]
