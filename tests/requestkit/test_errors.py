"""Tests for the exception taxonomy and the context every error carries."""

from __future__ import annotations

import pytest

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
    status_message,
)

CONTEXT = {"host": "127.0.0.1:3001", "hostname": "127.0.0.1", "method": "GET", "path": "/get/404"}


def test_input_errors_keep_builtin_bases():
    assert issubclass(ValidationError, ValueError)
    assert issubclass(OptionTypeError, TypeError)
    assert issubclass(ValidationError, RequestKitError)
    assert issubclass(OptionTypeError, RequestKitError)


@pytest.mark.parametrize(
    "error_cls", [HTTPError, ParseError, RedirectError, MaxRedirectsError, RequestError, FileError]
)
def test_context_errors_share_base(error_cls):
    assert issubclass(error_cls, RequestContextError)
    assert issubclass(error_cls, RuntimeError)


def test_http_error_message_and_context():
    error = HTTPError(404, body="Not Found", context=CONTEXT)

    assert str(error) == "Response code 404 (Not Found)"
    assert error.status_code == 404
    assert error.status_message == "Not Found"
    assert error.body == "Not Found"
    assert error.context == CONTEXT


def test_status_message_for_unknown_code():
    assert status_message(599) == "Unknown"


def test_parse_error_reports_stage():
    error = ParseError("Expecting value", stage=ParseStage.JSON_PARSE, body="Ok", context=CONTEXT)

    assert str(error) == "ParseError in JSON-parse: Expecting value"
    assert error.stage is ParseStage.JSON_PARSE
    assert error.body == "Ok"
    assert error.hostname == "127.0.0.1"


def test_redirect_errors():
    refused = RedirectError(302, location="http://x/y", context=CONTEXT)
    exhausted = MaxRedirectsError(302, location="http://x/y", redirect_limit=5, context=CONTEXT)

    assert str(refused) == "Unauthorized redirect"
    assert refused.location == "http://x/y"
    assert refused.status_message == "Found"
    assert str(exhausted) == "Max redirects error"
    assert exhausted.reason == "Redirected 5 times. Aborting."
    assert exhausted.redirect_limit == 5


def test_request_and_file_errors():
    request_error = RequestError("connection refused", code="ConnectError", context=CONTEXT)
    file_error = FileError("No such file or directory", destination="missing/out.bin", context=CONTEXT)

    assert request_error.code == "ConnectError"
    assert request_error.method == "GET"
    assert file_error.destination == "missing/out.bin"
    assert file_error.path == "/get/404"
