"""Tests for body/sink predicates, redirect classes and URL scheme coercion."""

from __future__ import annotations

import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from RequestKit.helpers import (
    is_download_target,
    is_redirect,
    is_redirect_all,
    is_stream,
    is_write_sink,
    prepend_http,
)


class TestIsStream:
    """Classification of request bodies that can be piped."""

    @pytest.mark.parametrize("value", ["text", b"bytes", bytearray(b"x"), {"a": 1}, [b"a"], (b"a",), 42, None])
    def test_plain_values_are_not_streams(self, value):
        assert is_stream(value) is False

    def test_readable_file_is_stream(self):
        assert is_stream(io.BytesIO(b"payload")) is True

    def test_generator_is_stream(self):
        assert is_stream(chunk for chunk in [b"a", b"b"]) is True

    def test_async_iterable_is_stream(self):
        async def chunks():
            yield b"a"

        assert is_stream(chunks()) is True


class TestWriteSink:
    def test_open_binary_buffer(self):
        assert is_write_sink(io.BytesIO()) is True

    def test_closed_buffer_is_rejected(self):
        sink = io.BytesIO()
        sink.close()
        assert is_write_sink(sink) is False

    def test_read_only_file_is_rejected(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"x")
        with path.open("rb") as handle:
            assert is_write_sink(handle) is False

    def test_object_with_write_only(self):
        class Sink:
            def write(self, data):
                return len(data)

        assert is_write_sink(Sink()) is True

    def test_text_streams_are_rejected(self, tmp_path):
        assert is_write_sink(io.StringIO()) is False
        with open(tmp_path / "out.txt", "w", encoding="utf-8") as handle:
            assert is_write_sink(handle) is False
        assert not is_download_target(io.StringIO())

    @pytest.mark.parametrize("value", [None, 1, "path.txt", b"path"])
    def test_non_sinks(self, value):
        assert is_write_sink(value) is False

    def test_download_targets(self, tmp_path):
        assert is_download_target("out.bin")
        assert is_download_target(tmp_path / "out.bin")
        assert is_download_target(io.BytesIO())
        assert not is_download_target(1)
        assert not is_download_target(None)


@pytest.mark.parametrize(
    "status,redirect,redirect_all",
    [
        (300, True, True),
        (301, True, False),
        (302, True, False),
        (303, True, True),
        (304, False, False),
        (305, True, False),
        (306, False, False),
        (307, True, True),
        (308, True, True),
        (200, False, False),
    ],
)
def test_redirect_classes(status, redirect, redirect_all):
    assert is_redirect(status) is redirect
    assert is_redirect_all(status) is redirect_all


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("example.com", "http://example.com"),
        ("  example.com/a?b=1  ", "http://example.com/a?b=1"),
        ("http://example.com", "http://example.com"),
        ("HTTPS://example.com", "https://example.com"),
        ("https://example.com/x", "https://example.com/x"),
        ("//example.com", "http://example.com"),
        ("httpx://example.com", "http://example.com"),
        ("127.0.0.1:3001/get/ok", "http://127.0.0.1:3001/get/ok"),
    ],
)
def test_prepend_http(raw, expected):
    assert prepend_http(raw) == expected


@given(host=st.from_regex(r"[a-z][a-z0-9-]{0,20}\.[a-z]{2,5}", fullmatch=True))
def test_prepend_http_is_idempotent(host):
    once = prepend_http(host)
    assert prepend_http(once) == once
    assert once == f"http://{host}"
