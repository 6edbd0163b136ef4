# === NAVMAP v1 ===
# {
#   "module": "RequestKit.policy",
#   "purpose": "HTTP policy constants and defaults.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Defines the redirect status classes, default request headers, and the framing
and decoding constants shared by the normalizer, the transport loop, and the
response decoder.
"""

# ============================================================================
# Redirect Policy
# ============================================================================

#: Status codes treated as redirects when a ``Location`` header is present
REDIRECT_STATUS_CODES = frozenset({300, 301, 302, 303, 305, 307, 308})

#: Redirects followed regardless of the original request method
REDIRECT_ALL_STATUS_CODES = frozenset({300, 303, 307, 308})

#: Methods allowed to follow the remaining redirect codes without force_redirect
REDIRECT_SAFE_METHODS = frozenset({"GET", "HEAD"})

#: Maximum number of redirect hops followed by default
DEFAULT_REDIRECT_LIMIT = 10


# ============================================================================
# Request Defaults
# ============================================================================

#: Scheme used when the caller gives a bare host name
DEFAULT_PROTOCOL = "http"

#: Text charset used to decode response bodies
DEFAULT_ENCODING = "utf-8"

#: Advertised content codings (decoded by ``RequestKit.decode``)
DEFAULT_ACCEPT_ENCODING = "gzip,deflate"

#: User-Agent template; ``{version}`` is the installed package version
USER_AGENT_TEMPLATE = "requestkit/{version}"

#: Content types set for encoded bodies unless the caller chose one
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

#: Prefix of generated multipart boundaries
MULTIPART_BOUNDARY_PREFIX = "RequestKitBoundary"

#: Chunk size used when piping file-like request bodies
STREAM_CHUNK_SIZE = 64 * 1024


# ============================================================================
# Response Decoding
# ============================================================================

#: Content codings decompressed automatically
DECOMPRESSIBLE_ENCODINGS = frozenset({"gzip", "deflate"})

#: Body reported after a successful download
DOWNLOAD_SUCCESS_MESSAGE = "The data successfully written to file."


__all__ = [
    "REDIRECT_STATUS_CODES",
    "REDIRECT_ALL_STATUS_CODES",
    "REDIRECT_SAFE_METHODS",
    "DEFAULT_REDIRECT_LIMIT",
    "DEFAULT_PROTOCOL",
    "DEFAULT_ENCODING",
    "DEFAULT_ACCEPT_ENCODING",
    "USER_AGENT_TEMPLATE",
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "MULTIPART_BOUNDARY_PREFIX",
    "STREAM_CHUNK_SIZE",
    "DECOMPRESSIBLE_ENCODINGS",
    "DOWNLOAD_SUCCESS_MESSAGE",
]
