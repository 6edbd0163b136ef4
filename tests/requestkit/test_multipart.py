"""Tests for multipart/form-data body encoding."""

from __future__ import annotations

import io

import pytest

from RequestKit import post
from RequestKit.descriptor import BodyKind, RequestDescriptor
from RequestKit.errors import OptionTypeError
from RequestKit.multipart import encode_multipart, new_boundary
from RequestKit.normalize import normalize
from tests.fixtures.http_mocking import BASE_URL

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32 + b"\xff\xd9"


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "fixture.jpg"
    path.write_bytes(JPEG_BYTES)
    return path


def _descriptor() -> RequestDescriptor:
    return RequestDescriptor(hostname="127.0.0.1", port=3001, path="/post/file", method="POST")


def test_boundary_prefix_is_unique():
    first, second = new_boundary(), new_boundary()
    assert first.startswith("RequestKitBoundary")
    assert first != second


def test_plain_fields_become_parts():
    descriptor = encode_multipart(_descriptor(), {"num": 12345, "flag": True, "name": "photo"})
    payload = b"".join(descriptor.body.content)

    content_type = descriptor.headers["content-type"]
    assert content_type.startswith("multipart/form-data; boundary=RequestKitBoundary")
    assert descriptor.body.kind is BodyKind.STREAM
    assert descriptor.headers["content-length"] == str(len(payload))
    assert b'name="num"' in payload and b"12345" in payload
    assert b"true" in payload
    # parts follow the mapping order
    assert payload.index(b'name="num"') < payload.index(b'name="flag"') < payload.index(b'name="name"')


def test_text_mode_file_is_rejected():
    with pytest.raises(OptionTypeError, match="Invalid multipart body"):
        encode_multipart(_descriptor(), {"doc": io.StringIO("text")})


def test_unsupported_value_is_rejected():
    with pytest.raises(OptionTypeError, match="'when'"):
        encode_multipart(_descriptor(), {"when": object()})


def test_normalize_keeps_caller_headers_over_multipart(photo):
    with photo.open("rb") as handle:
        descriptor = normalize(
            f"{BASE_URL}/post/file",
            {"body": {"photo": handle}, "multipart": True, "headers": {"x-upload": "1"}},
        )

    assert descriptor.method == "POST"
    assert descriptor.headers["x-upload"] == "1"
    assert descriptor.headers["content-type"].startswith("multipart/form-data")
    assert "transfer-encoding" not in descriptor.headers


@pytest.mark.anyio
async def test_file_with_options(server, photo):
    with photo.open("rb") as handle:
        response = await post(
            f"{BASE_URL}/post/file",
            body={
                "photo": {
                    "value": handle,
                    "options": {"filename": "anonim.jpg", "contentType": "image/jpeg"},
                }
            },
            multipart=True,
        )

    assert response.body == '{"filename":"anonim.jpg","mime":"image/jpeg"}'


@pytest.mark.anyio
async def test_file_and_field_with_json_response(server, photo):
    with photo.open("rb") as handle:
        response = await post(
            f"{BASE_URL}/post/file",
            body={"num": 12345, "photo": handle},
            json=True,
            multipart=True,
        )

    assert response.body == {"filename": "fixture.jpg", "mime": "image/jpeg", "field": "12345"}


@pytest.mark.anyio
async def test_multipart_fields_echo(server):
    response = await post(f"{BASE_URL}/post/form", body={"true": "that"}, json=True, multipart=True)
    assert response.body == {"true": "that"}
