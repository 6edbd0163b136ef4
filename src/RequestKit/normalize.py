# === NAVMAP v1 ===
# {
#   "module": "RequestKit.normalize",
#   "purpose": "Turn a URL plus request options into a RequestDescriptor",
#   "sections": [
#     {"id": "normalize", "name": "normalize", "anchor": "function-normalize", "kind": "function"},
#     {"id": "encode-query", "name": "encode_query", "anchor": "function-encode-query", "kind": "function"},
#     {"id": "base-descriptor", "name": "_base_descriptor", "anchor": "function-base-descriptor", "kind": "function"},
#     {"id": "encode-body", "name": "_encode_body", "anchor": "function-encode-body", "kind": "function"},
#     {"id": "select-mode", "name": "_select_mode", "anchor": "function-select-mode", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Turn a URL plus request options into a :class:`RequestDescriptor`.

Normalization is the only stage that inspects caller input. It fails fast with
:class:`~RequestKit.errors.ValidationError` or
:class:`~RequestKit.errors.OptionTypeError` before any network I/O, and
otherwise returns a descriptor whose method, headers, body framing and
consumption mode are fully decided.

Order of operations:

1. Resolve the target (string URL, ``httpx.URL``, mapping or descriptor).
2. Apply the ``query`` option to the path.
3. Validate and encode the body (multipart, form or JSON) and pick framing.
4. Merge default headers under the caller's headers.
5. Choose the consumption mode.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Optional, Union
from urllib.parse import parse_qsl, quote, urlencode

import httpx

from .descriptor import BodyKind, ConsumptionMode, RequestBody, RequestDescriptor
from .errors import OptionTypeError, ValidationError
from .helpers import is_download_target, is_stream, prepend_http
from .multipart import encode_multipart
from .options import RequestOptions, coerce_options
from .policy import FORM_CONTENT_TYPE, JSON_CONTENT_TYPE
from .settings import ClientSettings, get_settings

__all__ = ["normalize", "encode_query"]

logger = logging.getLogger(__name__)

BODY_TYPE_MESSAGE = "options.body must be a str, bytes, stream or mapping"
ENCODED_BODY_TYPE_MESSAGE = (
    "options.body must be a mapping or list when options.form or options.json is used"
)
QUERY_TYPE_MESSAGE = "options.query must be a str or mapping"
QUERY_SYNTAX_MESSAGE = "String must be correctly URL-encoded"
DOWNLOAD_TYPE_MESSAGE = "The options.download must be path or write stream"

# querystring codec: spaces as %20, sub-delimiters left bare
_QUERY_SAFE = "!'()*"

_DESCRIPTOR_KEYS = {"protocol", "hostname", "port", "path", "method"}

Target = Union[str, httpx.URL, RequestDescriptor, Mapping[str, Any]]


def normalize(
    target: Target,
    options: Union[RequestOptions, Mapping[str, Any], None] = None,
) -> RequestDescriptor:
    """Resolve ``target`` and ``options`` into a request descriptor.

    Args:
        target: URL string (bare host names allowed), ``httpx.URL``,
            :class:`RequestDescriptor` or a mapping of descriptor fields
            (``protocol``, ``hostname``, ``port``, ``path``, ``method``).
        options: :class:`RequestOptions` or a mapping of option names.

    Returns:
        Descriptor ready for :func:`RequestKit.transport.send`.

    Raises:
        ValidationError: Unknown options, malformed URL or query string.
        OptionTypeError: Option values of the wrong type.
    """
    opts = coerce_options(options)
    settings = get_settings()
    descriptor, explicit_method = _base_descriptor(target, settings)

    query = encode_query(opts.query)
    if query:
        descriptor = replace(descriptor, path=f"{descriptor.path.split('?', 1)[0]}?{query}")

    caller_headers = _coerce_headers(opts.headers)
    headers = httpx.Headers(descriptor.headers)
    headers.update(caller_headers)
    method = (opts.method or explicit_method or "").upper()

    # a descriptor target keeps every value the options leave unset
    inherit = isinstance(target, RequestDescriptor)
    given = opts.model_fields_set

    def pick(option: str, field: str) -> Any:
        if inherit and option not in given:
            return getattr(descriptor, field)
        return getattr(opts, option)

    if _has_body(opts.body):
        descriptor, headers = _encode_body(
            replace(descriptor, method=method or "POST"), opts, headers, caller_headers
        )
    elif inherit and "body" not in given and descriptor.body.kind is not BodyKind.EMPTY:
        descriptor = replace(descriptor, method=method or "POST")
    else:
        descriptor = replace(descriptor, method=method or "GET", body=RequestBody())

    headers.setdefault("user-agent", settings.user_agent)
    headers.setdefault("accept-encoding", settings.accept_encoding)
    json_flag = pick("json_", "json")
    if json_flag and "accept" not in headers:
        headers["accept"] = JSON_CONTENT_TYPE

    download = pick("download", "download")
    if inherit and "buffer" not in given:
        buffer = descriptor.mode is ConsumptionMode.BUFFER
    else:
        buffer = opts.buffer
    mode = _select_mode(download, buffer, json_flag)
    descriptor = replace(
        descriptor,
        headers=headers,
        encoding=opts.encoding or descriptor.encoding,
        redirect_limit=(
            opts.redirect_count if opts.redirect_count is not None else descriptor.redirect_limit
        ),
        force_redirect=pick("force_redirect", "force_redirect"),
        json=json_flag,
        mode=mode,
        download=download if mode is ConsumptionMode.DOWNLOAD else None,
        include_headers=pick("include_headers", "include_headers"),
        gzip=pick("gzip", "gzip"),
        deflate=pick("deflate", "deflate"),
    )
    logger.debug(
        "Request normalized",
        extra={
            "method": descriptor.method,
            "url": str(descriptor.url),
            "body_kind": descriptor.body.kind.value,
            "mode": mode.value,
        },
    )
    return descriptor


def encode_query(query: Any) -> Optional[str]:
    """Return the URL-encoded form of the ``query`` option.

    Mappings are encoded (sequence values become repeated keys). Strings must
    already be correctly encoded: they have to survive a parse/re-encode round
    trip unchanged.

    Examples:
        >>> encode_query({"with": "query"})
        'with=query'
        >>> encode_query({"with": "a b"})
        'with=a%20b'
        >>> encode_query("a=1&b=2")
        'a=1&b=2'
    """
    if query is None:
        return None
    if isinstance(query, Mapping):
        return _urlencode(query)
    if isinstance(query, str):
        if query and _urlencode(parse_qsl(query, keep_blank_values=True)) != query:
            raise ValidationError(QUERY_SYNTAX_MESSAGE)
        return query
    raise OptionTypeError(QUERY_TYPE_MESSAGE)


def _urlencode(pairs: Any) -> str:
    return urlencode(pairs, doseq=True, safe=_QUERY_SAFE, quote_via=quote)


def _base_descriptor(
    target: Target, settings: ClientSettings
) -> tuple[RequestDescriptor, Optional[str]]:
    """Build the starting descriptor and report any method it already carries."""
    defaults = RequestDescriptor(encoding=settings.encoding, redirect_limit=settings.redirect_limit)

    if isinstance(target, RequestDescriptor):
        return target, target.method
    if isinstance(target, str):
        try:
            url = httpx.URL(prepend_http(target))
        except httpx.InvalidURL as exc:
            raise ValidationError(f"Invalid URL {target!r}: {exc}") from exc
        return _from_url(defaults, url), None
    if isinstance(target, httpx.URL):
        if target.scheme not in {"http", "https"}:
            raise ValidationError(f"Unsupported URL scheme: {target.scheme!r}")
        return _from_url(defaults, target), None
    if isinstance(target, Mapping):
        unknown = set(target) - _DESCRIPTOR_KEYS
        if unknown:
            raise ValidationError(f"Unknown descriptor fields: {', '.join(sorted(unknown))}")
        values = dict(target)
        if "protocol" in values:
            values["protocol"] = str(values["protocol"]).rstrip(":").lower()
            if values["protocol"] not in {"http", "https"}:
                raise ValidationError(f"Unsupported protocol: {target['protocol']!r}")
        if not values.get("hostname"):
            raise ValidationError("Descriptor mapping must include a hostname")
        if "port" in values and values["port"] is not None:
            values["port"] = int(values["port"])
        values["path"] = values.get("path") or "/"
        method = values.pop("method", None)
        return replace(defaults, **values), method
    raise OptionTypeError(
        f"url must be a str, httpx.URL, mapping or RequestDescriptor, not {type(target).__name__}"
    )


def _from_url(defaults: RequestDescriptor, url: httpx.URL) -> RequestDescriptor:
    if not url.host:
        raise ValidationError(f"URL must include a host name: {str(url)!r}")
    return replace(
        defaults,
        protocol=url.scheme,
        hostname=url.host,
        port=url.port,
        path=url.raw_path.decode("ascii") or "/",
    )


def _coerce_headers(headers: Any) -> httpx.Headers:
    if headers is None:
        return httpx.Headers()
    if not isinstance(headers, Mapping):
        raise OptionTypeError("options.headers must be a mapping")
    return httpx.Headers(
        {
            str(name): value if isinstance(value, (str, bytes)) else str(value)
            for name, value in headers.items()
        }
    )


def _has_body(body: Any) -> bool:
    return body is not None and not (isinstance(body, (str, bytes)) and len(body) == 0)


def _encode_body(
    descriptor: RequestDescriptor,
    opts: RequestOptions,
    headers: httpx.Headers,
    caller_headers: httpx.Headers,
) -> tuple[RequestDescriptor, httpx.Headers]:
    """Validate, encode and frame the request body."""
    raw = opts.body
    in_memory = isinstance(raw, (str, bytes, bytearray, memoryview))
    encoded_by_flag = opts.form or opts.json_
    if not (
        in_memory
        or is_stream(raw)
        or encoded_by_flag
        or (opts.multipart and isinstance(raw, Mapping))
    ):
        raise OptionTypeError(BODY_TYPE_MESSAGE)
    if encoded_by_flag and not isinstance(raw, (Mapping, list, tuple)):
        raise OptionTypeError(ENCODED_BODY_TYPE_MESSAGE)

    if opts.multipart and isinstance(raw, Mapping):
        descriptor = encode_multipart(descriptor, raw)
        headers = httpx.Headers(descriptor.headers)
        headers.update(caller_headers)
    elif opts.form:
        headers.setdefault("content-type", FORM_CONTENT_TYPE)
        try:
            payload = _urlencode(raw)
        except TypeError as exc:
            raise OptionTypeError(f"options.body cannot be form-encoded: {exc}") from exc
        descriptor = replace(descriptor, body=RequestBody(BodyKind.TEXT, payload))
    elif opts.json_:
        headers.setdefault("content-type", JSON_CONTENT_TYPE)
        try:
            payload = json.dumps(raw, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise OptionTypeError(f"options.body cannot be JSON-encoded: {exc}") from exc
        descriptor = replace(descriptor, body=RequestBody(BodyKind.TEXT, payload))
    else:
        descriptor = replace(descriptor, body=RequestBody.from_value(raw))

    if "content-length" not in headers and "transfer-encoding" not in headers:
        payload_bytes = descriptor.body.in_memory_bytes()
        if opts.chunked is False and payload_bytes is not None:
            headers["content-length"] = str(len(payload_bytes))
        else:
            headers["transfer-encoding"] = "chunked"
    return descriptor, headers


def _select_mode(download: Any, buffer: bool, json_flag: bool) -> ConsumptionMode:
    """Pick the single consumption mode, ``download > buffer > json > text``."""
    if download is not None:
        if not is_download_target(download):
            raise OptionTypeError(DOWNLOAD_TYPE_MESSAGE)
        return ConsumptionMode.DOWNLOAD
    if buffer:
        return ConsumptionMode.BUFFER
    if json_flag:
        return ConsumptionMode.JSON
    return ConsumptionMode.TEXT

