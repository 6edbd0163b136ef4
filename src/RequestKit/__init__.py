"""RequestKit: asynchronous HTTP requests with explicit redirect policy.

This package wraps HTTPX with a small request pipeline:

- normalize: URL and option validation into a frozen request descriptor
- multipart: multipart/form-data body encoding
- transport: redirect state machine (method-aware, bounded)
- decode: decompression, status check and body consumption
- errors: typed failures carrying the attempted request's context

Example:
    >>> import anyio
    >>> from RequestKit import get, post
    >>>
    >>> async def main():
    ...     page = await get("example.org")
    ...     echo = await post("httpbin.org/post", json=True, body={"hello": "world"})
    ...     return page.body, echo.body["json"]
    >>>
    >>> anyio.run(main)  # doctest: +SKIP
"""

__version__ = "0.1.0"

from RequestKit.api import delete, download, get, head, patch, post, put, request
from RequestKit.descriptor import (
    BodyKind,
    ConsumptionMode,
    RequestBody,
    RequestDescriptor,
    Response,
)
from RequestKit.errors import (
    FileError,
    HTTPError,
    MaxRedirectsError,
    OptionTypeError,
    ParseError,
    ParseStage,
    RedirectError,
    RequestContextError,
    RequestError,
    RequestKitError,
    ValidationError,
)
from RequestKit.normalize import normalize
from RequestKit.options import RequestOptions
from RequestKit.settings import ClientSettings, get_settings, reset_settings
from RequestKit.transport import send

__all__ = [
    "__version__",
    # Entry points
    "request",
    "get",
    "head",
    "post",
    "put",
    "patch",
    "delete",
    "download",
    # Pipeline
    "normalize",
    "send",
    "RequestOptions",
    "RequestDescriptor",
    "RequestBody",
    "BodyKind",
    "ConsumptionMode",
    "Response",
    # Configuration
    "ClientSettings",
    "get_settings",
    "reset_settings",
    # Errors
    "RequestKitError",
    "ValidationError",
    "OptionTypeError",
    "RequestContextError",
    "HTTPError",
    "ParseError",
    "ParseStage",
    "RedirectError",
    "MaxRedirectsError",
    "RequestError",
    "FileError",
]
