# === NAVMAP v1 ===
# {
#   "module": "tests.fixtures.http_mocking",
#   "purpose": "In-process HTTP routes for hermetic request tests",
#   "sections": [
#     {"id": "parse-body", "name": "parse_body", "anchor": "function-parse-body", "kind": "function"},
#     {"id": "parse-multipart", "name": "parse_multipart", "anchor": "function-parse-multipart", "kind": "function"},
#     {"id": "build-test-server", "name": "build_test_server", "anchor": "function-build-test-server", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
In-process HTTP routes for hermetic request tests.

The routes mimic a small echo application: ``/get/*`` exercises response
decoding and redirects, and ``/<method>/form`` echoes the parsed request body
back as JSON for every body-carrying method. All responses are deterministic.
"""

from __future__ import annotations

import gzip
import json
import zlib
from email import policy
from email.parser import BytesParser
from typing import Any, Dict
from urllib.parse import parse_qsl

import httpx

from RequestKit.testing import MockServer, ResponseSpec

HOST = "127.0.0.1:3001"
BASE_URL = f"http://{HOST}"

BODY_METHODS = ("post", "put", "patch", "delete")


def parse_multipart(request: httpx.Request) -> Dict[str, Any]:
    """Split a multipart request into plain fields and file descriptions."""
    header = f"Content-Type: {request.headers['content-type']}\r\n\r\n".encode("ascii")
    message = BytesParser(policy=policy.HTTP).parsebytes(header + request.content)
    fields: Dict[str, Any] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        payload = part.get_payload(decode=True) or b""
        filename = part.get_filename()
        if filename is None:
            fields[name] = payload.decode("utf-8")
        else:
            fields[name] = {
                "filename": filename,
                "mime": part.get_content_type(),
                "size": len(payload),
            }
    return fields


def parse_body(request: httpx.Request) -> Dict[str, Any]:
    """Decode the request body the way a form/JSON body parser would."""
    content_type = request.headers.get("content-type", "")
    if not request.content:
        return {}
    if content_type.startswith("application/json"):
        return json.loads(request.content)
    if content_type.startswith("application/x-www-form-urlencoded"):
        return dict(parse_qsl(request.content.decode("utf-8"), keep_blank_values=True))
    if content_type.startswith("multipart/form-data"):
        return {
            name: value
            for name, value in parse_multipart(request).items()
            if not isinstance(value, dict)
        }
    return {}


def _redirect(path: str, status: int = 302) -> ResponseSpec:
    return ResponseSpec(status=status, headers={"location": f"{BASE_URL}{path}"})


def _get_ok(request: httpx.Request) -> ResponseSpec:
    if request.url.params.get("with"):
        return ResponseSpec(body="Query ok", headers={"content-type": "text/html; charset=utf-8"})
    return ResponseSpec(body="Ok", headers={"content-type": "text/html; charset=utf-8"})


def _json(data: Any) -> ResponseSpec:
    body = json.dumps(data, separators=(",", ":"))
    return ResponseSpec(body=body, headers={"content-type": "application/json; charset=utf-8"})


def _echo(request: httpx.Request) -> ResponseSpec:
    return _json(parse_body(request))


def _file_upload(request: httpx.Request) -> ResponseSpec:
    fields = parse_multipart(request) if request.content else {}
    result: Dict[str, Any] = {}
    photo = fields.get("photo")
    if isinstance(photo, dict):
        result.update(filename=photo["filename"], mime=photo["mime"])
    if "num" in fields:
        result["field"] = fields["num"]
    return _json(result)


def build_test_server() -> MockServer:
    """Create the route table used across the request tests."""
    server = MockServer()

    server.add("/get/ok", _get_ok)
    server.add("/get/json", _json({"true": "that"}))
    server.add("/get/redirect", _redirect("/get/ok"))
    server.add("/get/relative", ResponseSpec(status=301, headers={"location": "ok"}))
    server.add("/get/infinity", _redirect("/get/infinity"))
    server.add("/get/empty", ResponseSpec())
    server.add("/get/404", ResponseSpec(status=404, body="Not Found"))
    server.add(
        "/get/gzip",
        ResponseSpec(body=gzip.compress(b"gzip: Ok"), headers={"content-encoding": "gzip"}),
    )
    server.add("/get/gzip/noheaders", ResponseSpec(body=gzip.compress(b"gzip: Ok")))
    server.add(
        "/get/deflate",
        ResponseSpec(body=zlib.compress(b"deflate: Ok"), headers={"content-encoding": "deflate"}),
    )
    server.add("/get/wrongzip", ResponseSpec(body=b"Ok", headers={"content-encoding": "gzip"}))
    server.add("/get/no-location", ResponseSpec(status=302, body="Moved"))

    for method in BODY_METHODS:
        server.add(f"/{method}/form", _echo, method=method)
        server.add(f"/{method}/json", _echo, method=method)
        server.add(f"/{method}/redirect", _redirect(f"/{method}/form"), method=method)
    server.add("/post/file", _file_upload, method="POST")
    return server
