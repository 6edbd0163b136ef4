# === NAVMAP v1 ===
# {
#   "module": "RequestKit.helpers",
#   "purpose": "Pure predicates for request bodies, sinks, redirects and URLs.",
#   "sections": [
#     {"id": "is-stream", "name": "is_stream", "anchor": "function-is-stream", "kind": "function"},
#     {"id": "is-write-sink", "name": "is_write_sink", "anchor": "function-is-write-sink", "kind": "function"},
#     {"id": "is-redirect", "name": "is_redirect", "anchor": "function-is-redirect", "kind": "function"},
#     {"id": "is-redirect-all", "name": "is_redirect_all", "anchor": "function-is-redirect-all", "kind": "function"},
#     {"id": "prepend-http", "name": "prepend_http", "anchor": "function-prepend-http", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Pure predicates for request bodies, sinks, redirects and URLs.

None of these helpers perform I/O; they classify caller input so the
normalizer and the transport loop can branch on explicit kinds.
"""

from __future__ import annotations

import io
import os
import re
from collections.abc import AsyncIterable, Iterator, Mapping
from typing import Any

from .policy import REDIRECT_ALL_STATUS_CODES, REDIRECT_STATUS_CODES

_SCHEME_PREFIX = re.compile(r"^(?:http[a-z]?:)?//", re.IGNORECASE)


def is_stream(value: Any) -> bool:
    """Return ``True`` when ``value`` can be piped as a request body.

    Readable file objects, iterators of bytes and async iterables of bytes
    qualify. Strings, bytes, lists and mappings do not.
    """
    if isinstance(value, (str, bytes, bytearray, memoryview, Mapping, list, tuple)):
        return False
    if callable(getattr(value, "read", None)):
        return True
    return isinstance(value, (AsyncIterable, Iterator))


def is_write_sink(value: Any) -> bool:
    """Return ``True`` for an open, writable binary object exposing ``write``.

    Text streams (``io.StringIO``, ``sys.stdout``) are rejected: the payload
    is written as bytes.
    """
    if isinstance(value, (str, bytes, os.PathLike, io.TextIOBase)) or value is None:
        return False
    if not callable(getattr(value, "write", None)):
        return False
    if getattr(value, "closed", False):
        return False
    writable = getattr(value, "writable", None)
    if callable(writable):
        try:
            return bool(writable())
        except ValueError:
            # io raises ValueError on closed files
            return False
    return True


def is_download_target(value: Any) -> bool:
    """Return ``True`` for a filesystem path or an open writable sink."""
    return isinstance(value, (str, os.PathLike)) or is_write_sink(value)


def is_redirect(status_code: int) -> bool:
    """Return ``True`` for redirect-class status codes."""
    return status_code in REDIRECT_STATUS_CODES


def is_redirect_all(status_code: int) -> bool:
    """Return ``True`` for redirects followed regardless of request method."""
    return status_code in REDIRECT_ALL_STATUS_CODES


def prepend_http(url: str) -> str:
    """Coerce ``url`` into an absolute ``http://`` or ``https://`` URL.

    Examples:
        >>> prepend_http("  example.com/path ")
        'http://example.com/path'
        >>> prepend_http("https://example.com")
        'https://example.com'
        >>> prepend_http("//example.com")
        'http://example.com'
    """
    url = url.strip()
    match = _SCHEME_PREFIX.match(url)
    remainder = url[match.end():] if match else url
    if match and match.group(0).lower() == "https://":
        return f"https://{remainder}"
    return f"http://{remainder}"


__all__ = [
    "is_stream",
    "is_write_sink",
    "is_download_target",
    "is_redirect",
    "is_redirect_all",
    "prepend_http",
]
