# === NAVMAP v1 ===
# {
#   "module": "RequestKit.options",
#   "purpose": "Closed set of per-request options",
#   "sections": [
#     {"id": "requestoptions", "name": "RequestOptions", "anchor": "class-requestoptions", "kind": "class"},
#     {"id": "coerce-options", "name": "coerce_options", "anchor": "function-coerce-options", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Closed set of per-request options.

Options are validated with pydantic so that misspelled or unknown keys fail
loudly instead of silently riding along with the request. The camelCase names
used by earlier releases (``redirectCount``, ``forceRedirect``,
``includeHeaders``) are accepted as aliases. Value-level checks that depend on
other options (body versus ``form``/``json``, query syntax) live in
:mod:`RequestKit.normalize`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

__all__ = ["RequestOptions", "coerce_options"]


class RequestOptions(BaseModel):
    """Options accepted by :func:`RequestKit.request` and its wrappers."""

    method: Optional[str] = Field(default=None, description="HTTP method; GET or POST by default")
    headers: Any = Field(default=None, description="Request headers (mapping)")
    query: Any = Field(default=None, description="Query string or mapping")
    body: Any = Field(default=None, description="Request body")
    form: bool = Field(default=False, description="URL-encode a mapping body")
    json_: bool = Field(
        default=False,
        validation_alias=AliasChoices("json", "json_"),
        description="JSON-encode the body and parse the response as JSON",
    )
    multipart: bool = Field(default=False, description="Send a mapping body as multipart/form-data")
    chunked: Optional[bool] = Field(
        default=None,
        description="Use chunked framing for in-memory bodies (default) or send content-length",
    )
    encoding: Optional[str] = Field(default=None, description="Charset used to decode text bodies")
    redirect_count: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("redirect_count", "redirectCount"),
        description="Maximum number of redirects to follow",
    )
    force_redirect: bool = Field(
        default=False,
        validation_alias=AliasChoices("force_redirect", "forceRedirect"),
        description="Follow 301/302/305 redirects for non-GET/HEAD methods",
    )
    include_headers: bool = Field(
        default=False,
        validation_alias=AliasChoices("include_headers", "includeHeaders"),
        description="Attach response headers to the result",
    )
    buffer: bool = Field(default=False, description="Return the body as raw bytes")
    gzip: bool = Field(default=False, description="Always gunzip the response body")
    deflate: bool = Field(default=False, description="Always inflate the response body")
    download: Any = Field(default=None, description="Destination path or writable sink")

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )


_ALIASES = {
    "json": "json_",
    "redirectCount": "redirect_count",
    "forceRedirect": "force_redirect",
    "includeHeaders": "include_headers",
}


def _canonical(name: str) -> str:
    # one key per field, so an override always replaces the caller's spelling
    return _ALIASES.get(name, name)


def coerce_options(
    options: Union[RequestOptions, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> RequestOptions:
    """Merge ``options`` with keyword ``overrides`` into :class:`RequestOptions`.

    Raises:
        ValidationError: If an option is unknown or has an invalid value.
    """
    if isinstance(options, RequestOptions):
        if not overrides:
            return options
        merged: dict[str, Any] = {
            name: getattr(options, name) for name in options.model_fields_set
        }
    elif options is None:
        merged = {}
    elif isinstance(options, Mapping):
        merged = {_canonical(str(name)): value for name, value in options.items()}
    else:
        raise ValidationError(
            f"options must be a mapping or RequestOptions, not {type(options).__name__}"
        )
    merged.update({_canonical(name): value for name, value in overrides.items()})
    try:
        return RequestOptions.model_validate(merged)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid request options: {problems}") from exc
