# === NAVMAP v1 ===
# {
#   "module": "RequestKit.decode",
#   "purpose": "Turn a completed response into a Response or a typed error",
#   "sections": [
#     {"id": "decode-response", "name": "decode_response", "anchor": "function-decode-response", "kind": "function"},
#     {"id": "decompress", "name": "_decompress", "anchor": "function-decompress", "kind": "function"},
#     {"id": "write-download", "name": "_write_download", "anchor": "function-write-download", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Turn a completed response into a :class:`Response` or a typed error.

Stages, in order:

1. Decompress gzip/zlib payloads (header auto-detected).
2. Reject statuses outside ``[200, 299]`` with :class:`HTTPError`.
3. Consume the body according to the descriptor's :class:`ConsumptionMode`.
"""

from __future__ import annotations

import inspect
import json
import logging
import os
import zlib
from typing import Any, Optional

import anyio
import httpx

from .descriptor import ConsumptionMode, RequestDescriptor, Response
from .errors import FileError, HTTPError, ParseError, ParseStage
from .policy import DECOMPRESSIBLE_ENCODINGS, DOWNLOAD_SUCCESS_MESSAGE

__all__ = ["decode_response", "should_decompress"]

logger = logging.getLogger(__name__)

# accept both gzip and zlib headers
_AUTO_WBITS = zlib.MAX_WBITS | 32


def should_decompress(descriptor: RequestDescriptor, headers: httpx.Headers) -> bool:
    """Return ``True`` when the payload must be inflated before use."""
    if descriptor.gzip or descriptor.deflate:
        return True
    encoding = headers.get("content-encoding", "").strip().lower()
    return encoding in DECOMPRESSIBLE_ENCODINGS and descriptor.method != "HEAD"


async def decode_response(
    descriptor: RequestDescriptor,
    status_code: int,
    headers: httpx.Headers,
    raw: bytes,
    *,
    url: Optional[httpx.URL] = None,
) -> Response:
    """Decode the final response of a request.

    Args:
        descriptor: Descriptor of the hop that produced the response.
        status_code: Response status.
        headers: Response headers.
        raw: Response body exactly as received (possibly compressed).
        url: Final URL, recorded on the result.

    Returns:
        :class:`Response` whose ``body`` shape follows ``descriptor.mode``.

    Raises:
        ParseError: Decompression or JSON parsing failed.
        HTTPError: Status outside ``[200, 299]``.
        FileError: The download destination could not be written.
    """
    context = descriptor.context()
    body = raw
    if raw and should_decompress(descriptor, headers):
        body = _decompress(descriptor, raw)

    if not 200 <= status_code <= 299:
        text = body.decode(descriptor.encoding, errors="replace")
        logger.info(
            "Request failed with HTTP status",
            extra={"method": descriptor.method, "status": status_code, "path": descriptor.path},
        )
        raise HTTPError(status_code, body=text, context=context)

    result = Response(
        body=None,
        headers=headers if descriptor.include_headers else None,
        status_code=status_code,
        url=url if url is not None else descriptor.url,
    )

    if descriptor.mode is ConsumptionMode.DOWNLOAD:
        await _write_download(descriptor, body)
        result.body = DOWNLOAD_SUCCESS_MESSAGE
    elif descriptor.mode is ConsumptionMode.BUFFER:
        result.body = body
    elif descriptor.mode is ConsumptionMode.JSON:
        text = body.decode(descriptor.encoding, errors="replace")
        try:
            result.body = json.loads(text)
        except ValueError as exc:
            raise ParseError(
                str(exc), stage=ParseStage.JSON_PARSE, body=text, context=context
            ) from exc
    else:
        result.body = body.decode(descriptor.encoding, errors="replace")
    return result


def _decompress(descriptor: RequestDescriptor, raw: bytes) -> bytes:
    try:
        return zlib.decompress(raw, _AUTO_WBITS)
    except zlib.error as exc:
        raise ParseError(
            str(exc),
            stage=ParseStage.UNZIP,
            body=raw.decode(descriptor.encoding, errors="replace"),
            context=descriptor.context(),
        ) from exc


async def _write_download(descriptor: RequestDescriptor, payload: bytes) -> None:
    """Write ``payload`` to the download destination.

    Paths are opened and written on a worker thread and closed before
    returning. Caller-provided sinks are flushed but left open; their owner
    closes them.
    """
    destination = descriptor.download
    try:
        if isinstance(destination, (str, os.PathLike)):
            await anyio.to_thread.run_sync(_write_path, destination, payload)
        else:
            await _maybe_await(destination.write(payload))
            flush = getattr(destination, "flush", None)
            if callable(flush):
                await _maybe_await(flush())
    except (OSError, ValueError, TypeError) as exc:
        raise FileError(
            str(exc), destination=destination, context=descriptor.context()
        ) from exc
    logger.debug(
        "Response written to download destination",
        extra={"destination": str(getattr(destination, "name", destination)), "bytes": len(payload)},
    )


def _write_path(destination: Any, payload: bytes) -> None:
    with open(destination, "wb") as handle:
        handle.write(payload)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
