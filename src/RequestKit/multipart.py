# === NAVMAP v1 ===
# {
#   "module": "RequestKit.multipart",
#   "purpose": "Multipart/form-data body encoding",
#   "sections": [
#     {"id": "encode-multipart", "name": "encode_multipart", "anchor": "function-encode-multipart", "kind": "function"},
#     {"id": "multipart-field", "name": "_multipart_field", "anchor": "function-multipart-field", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Multipart/form-data body encoding.

MIME framing is delegated to HTTPX: the fields are handed to
:class:`httpx.Request` through its ``files`` argument and the resulting
stream and framing headers are adopted by the descriptor. Every field goes
through ``files`` (plain values as ``(None, value)`` pairs) so the parts are
written in the caller's mapping order.

Field values are either plain values (``str``, ``bytes``, numbers, readable
binary files) or ``{"value": ..., "options": {"filename": ..., "content_type":
...}}`` pairs that attach file metadata to the value.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator, Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import httpx

from .descriptor import BodyKind, RequestBody, RequestDescriptor
from .errors import OptionTypeError
from .policy import MULTIPART_BOUNDARY_PREFIX

__all__ = ["encode_multipart", "new_boundary"]

logger = logging.getLogger(__name__)

_FRAMING_HEADERS = ("content-type", "content-length", "transfer-encoding")


def new_boundary() -> str:
    """Return a fresh multipart boundary."""
    return f"{MULTIPART_BOUNDARY_PREFIX}{secrets.token_hex(12)}"


def encode_multipart(descriptor: RequestDescriptor, fields: Mapping[str, Any]) -> RequestDescriptor:
    """Return ``descriptor`` with ``fields`` encoded as a multipart stream body.

    The returned descriptor's headers hold only the multipart framing headers
    (``content-type`` with boundary, and ``content-length`` when every part
    has a known size); the caller merges its own headers on top.

    Raises:
        OptionTypeError: If a field value cannot be sent as a form part.
    """
    boundary = new_boundary()
    parts = [(str(name), _multipart_field(str(name), value)) for name, value in fields.items()]
    try:
        encoded = httpx.Request(
            descriptor.method,
            descriptor.url,
            files=parts,
            headers={"content-type": f"multipart/form-data; boundary={boundary}"},
        )
    except TypeError as exc:
        # httpx rejects text-mode file objects
        raise OptionTypeError(f"Invalid multipart body: {exc}") from exc
    headers = httpx.Headers(
        {name: encoded.headers[name] for name in _FRAMING_HEADERS if name in encoded.headers}
    )
    logger.debug(
        "Multipart body encoded",
        extra={"fields": len(parts), "content_length": headers.get("content-length")},
    )
    return replace(descriptor, headers=headers, body=RequestBody(BodyKind.STREAM, encoded.stream))


def _multipart_field(name: str, value: Any) -> tuple[Optional[str], Any, Optional[str]]:
    """Convert one body entry into an httpx ``(filename, content, content_type)`` tuple."""
    if isinstance(value, Mapping) and "value" in value and "options" in value:
        options = value["options"] or {}
        if not isinstance(options, Mapping):
            raise OptionTypeError(f"Multipart field {name!r}: options must be a mapping")
        content = _part_content(name, value["value"])
        filename = options.get("filename") or _filename_of(value["value"]) or name
        content_type = options.get("content_type") or options.get("contentType")
        return filename, content, content_type

    content = _part_content(name, value)
    if callable(getattr(content, "read", None)):
        return _filename_of(content) or "upload", content, None
    return None, content, None


def _part_content(name: str, value: Any) -> Any:
    if value is None:
        return b""
    if isinstance(value, bool):
        return str(value).lower().encode("utf-8")
    if isinstance(value, (int, float)):
        return str(value).encode("utf-8")
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if callable(getattr(value, "read", None)):
        return value
    if isinstance(value, Iterator):
        return b"".join(
            chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk) for chunk in value
        )
    raise OptionTypeError(
        f"Multipart field {name!r} must be str, bytes, a number or a readable file, "
        f"not {type(value).__name__}"
    )


def _filename_of(value: Any) -> Optional[str]:
    source = getattr(value, "name", None)
    if isinstance(source, (str, Path)):
        return Path(source).name
    return None
