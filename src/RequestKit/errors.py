# === NAVMAP v1 ===
# {
#   "module": "RequestKit.errors",
#   "purpose": "Exception hierarchy raised by the request pipeline",
#   "sections": [
#     {"id": "requestkiterror", "name": "RequestKitError", "anchor": "class-requestkiterror", "kind": "class"},
#     {"id": "validationerror", "name": "ValidationError", "anchor": "class-validationerror", "kind": "class"},
#     {"id": "optiontypeerror", "name": "OptionTypeError", "anchor": "class-optiontypeerror", "kind": "class"},
#     {"id": "requestcontexterror", "name": "RequestContextError", "anchor": "class-requestcontexterror", "kind": "class"},
#     {"id": "httperror", "name": "HTTPError", "anchor": "class-httperror", "kind": "class"},
#     {"id": "parseerror", "name": "ParseError", "anchor": "class-parseerror", "kind": "class"},
#     {"id": "redirecterror", "name": "RedirectError", "anchor": "class-redirecterror", "kind": "class"},
#     {"id": "maxredirectserror", "name": "MaxRedirectsError", "anchor": "class-maxredirectserror", "kind": "class"},
#     {"id": "requesterror", "name": "RequestError", "anchor": "class-requesterror", "kind": "class"},
#     {"id": "fileerror", "name": "FileError", "anchor": "class-fileerror", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy raised by the request pipeline.

Failures fall into two groups. Input errors (:class:`ValidationError`,
:class:`OptionTypeError`) are raised while options are normalized, before any
network I/O. Everything raised afterwards derives from
:class:`RequestContextError` and carries the ``host``, ``hostname``,
``method`` and ``path`` of the attempted request so callers can report what
was tried without going back to the call site.
"""

from __future__ import annotations

import enum
from http import HTTPStatus
from typing import Any, Mapping, Optional

__all__ = [
    "RequestKitError",
    "ValidationError",
    "OptionTypeError",
    "RequestContextError",
    "HTTPError",
    "ParseStage",
    "ParseError",
    "RedirectError",
    "MaxRedirectsError",
    "RequestError",
    "FileError",
    "status_message",
]


def status_message(status_code: int) -> str:
    """Return the standard reason phrase for ``status_code``."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


class RequestKitError(RuntimeError):
    """Base exception for every failure raised by RequestKit."""


class ValidationError(RequestKitError, ValueError):
    """Raised when caller input is malformed (bad query string, unknown option)."""


class OptionTypeError(RequestKitError, TypeError):
    """Raised when an option has a type the pipeline cannot use."""


class RequestContextError(RequestKitError):
    """Base for errors raised once a request descriptor exists.

    Attributes:
        host: ``hostname[:port]`` of the attempted request.
        hostname: Host name without port.
        method: HTTP method of the attempt.
        path: Path including the query string.
    """

    def __init__(self, message: str, *, context: Mapping[str, Any]) -> None:
        super().__init__(message)
        self.host: Optional[str] = context.get("host")
        self.hostname: Optional[str] = context.get("hostname")
        self.method: Optional[str] = context.get("method")
        self.path: Optional[str] = context.get("path")

    @property
    def context(self) -> dict[str, Optional[str]]:
        return {
            "host": self.host,
            "hostname": self.hostname,
            "method": self.method,
            "path": self.path,
        }


class HTTPError(RequestContextError):
    """Raised when the final response status is outside ``[200, 299]``."""

    def __init__(self, status_code: int, *, body: str, context: Mapping[str, Any]) -> None:
        self.status_code = status_code
        self.status_message = status_message(status_code)
        self.body = body
        super().__init__(
            f"Response code {status_code} ({self.status_message})", context=context
        )


class ParseStage(str, enum.Enum):
    """Decoding stage that failed."""

    UNZIP = "unzip"
    JSON_PARSE = "JSON-parse"


class ParseError(RequestContextError):
    """Raised when a response body cannot be decompressed or parsed as JSON.

    ``body`` holds the raw response text for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: ParseStage,
        body: str,
        context: Mapping[str, Any],
    ) -> None:
        self.stage = stage
        self.body = body
        super().__init__(message, context=context)

    def __str__(self) -> str:
        return f"ParseError in {self.stage.value}: {self.args[0]}"


class RedirectError(RequestContextError):
    """Raised when a redirect is offered but the method may not follow it."""

    reason = (
        "Redirect allowed only for GET and HEAD methods. "
        "Use option force_redirect to force instead."
    )

    def __init__(
        self, status_code: int, *, location: str, context: Mapping[str, Any]
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message(status_code)
        self.location = location
        super().__init__("Unauthorized redirect", context=context)


class MaxRedirectsError(RequestContextError):
    """Raised when a redirect chain exceeds the configured limit."""

    def __init__(
        self,
        status_code: int,
        *,
        location: str,
        redirect_limit: int,
        context: Mapping[str, Any],
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message(status_code)
        self.location = location
        self.redirect_limit = redirect_limit
        self.reason = f"Redirected {redirect_limit} times. Aborting."
        super().__init__("Max redirects error", context=context)


class RequestError(RequestContextError):
    """Raised when the transport fails (refused, reset, DNS, hang-up).

    ``code`` names the underlying failure, e.g. ``"ConnectError"``.
    """

    def __init__(
        self, message: str, *, code: Optional[str], context: Mapping[str, Any]
    ) -> None:
        self.code = code
        super().__init__(message, context=context)


class FileError(RequestContextError):
    """Raised when the download destination cannot be opened or written."""

    def __init__(
        self, message: str, *, destination: Any, context: Mapping[str, Any]
    ) -> None:
        self.destination = destination
        super().__init__(message, context=context)
