# === NAVMAP v1 ===
# {
#   "module": "RequestKit.api",
#   "purpose": "Public request entry points",
#   "sections": [
#     {"id": "request", "name": "request", "anchor": "function-request", "kind": "function"},
#     {"id": "get", "name": "get", "anchor": "function-get", "kind": "function"},
#     {"id": "head", "name": "head", "anchor": "function-head", "kind": "function"},
#     {"id": "download", "name": "download", "anchor": "function-download", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Public request entry points.

Every function is a coroutine that runs the whole pipeline (normalize, send,
decode) and returns a :class:`~RequestKit.descriptor.Response`, or raises
exactly one :class:`~RequestKit.errors.RequestKitError`.

Examples:
    >>> import anyio
    >>> from RequestKit import get
    >>> response = anyio.run(get, "example.org")  # doctest: +SKIP
    >>> response.body[:15]  # doctest: +SKIP
    '<!doctype html>'
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from .descriptor import Response
from .errors import OptionTypeError
from .helpers import is_download_target
from .normalize import Target, normalize
from .options import RequestOptions, coerce_options
from .transport import send

__all__ = ["request", "get", "head", "post", "put", "patch", "delete", "download"]

Options = Union[RequestOptions, Mapping[str, Any], None]

DOWNLOAD_DESTINATION_MESSAGE = "The second argument must be path or write stream"


async def request(url: Target, options: Options = None, **kwargs: Any) -> Response:
    """Perform an HTTP request.

    Args:
        url: URL string (bare host names allowed), ``httpx.URL``, descriptor
            mapping or :class:`~RequestKit.descriptor.RequestDescriptor`.
        options: Request options as a mapping or :class:`RequestOptions`.
        **kwargs: Individual options; they override ``options``.

    Returns:
        Decoded response.
    """
    descriptor = normalize(url, coerce_options(options, **kwargs))
    return await send(descriptor)


async def get(url: Target, options: Options = None, **kwargs: Any) -> Response:
    """Perform a ``GET`` request."""
    return await request(url, options, **{**kwargs, "method": "GET"})


async def head(url: Target, options: Options = None, **kwargs: Any) -> Response:
    """Perform a ``HEAD`` request; response headers are always included."""
    return await request(
        url,
        options,
        **{**kwargs, "method": "HEAD", "include_headers": True, "json": False},
    )


async def post(url: Target, options: Options = None, **kwargs: Any) -> Response:
    return await request(url, options, **{**kwargs, "method": "POST"})


async def put(url: Target, options: Options = None, **kwargs: Any) -> Response:
    return await request(url, options, **{**kwargs, "method": "PUT"})


async def patch(url: Target, options: Options = None, **kwargs: Any) -> Response:
    return await request(url, options, **{**kwargs, "method": "PATCH"})


async def delete(url: Target, options: Options = None, **kwargs: Any) -> Response:
    return await request(url, options, **{**kwargs, "method": "DELETE"})


async def download(url: Target, destination: Any) -> Response:
    """``GET`` ``url`` and write the body to ``destination``.

    Args:
        url: Request target.
        destination: Filesystem path or an open writable sink. Paths are
            opened and closed by RequestKit; sinks are flushed and left open.

    Raises:
        OptionTypeError: ``destination`` is neither, checked before any
            network activity.
    """
    if not is_download_target(destination):
        raise OptionTypeError(DOWNLOAD_DESTINATION_MESSAGE)
    return await request(url, method="GET", download=destination)
