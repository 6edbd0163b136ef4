# === NAVMAP v1 ===
# {
#   "module": "RequestKit.cli",
#   "purpose": "requestkit command line front-end",
#   "sections": [
#     {"id": "parse-headers", "name": "_parse_headers", "anchor": "function-parse-headers", "kind": "function"},
#     {"id": "build-options", "name": "_build_options", "anchor": "function-build-options", "kind": "function"},
#     {"id": "fetch", "name": "fetch", "anchor": "function-fetch", "kind": "function"},
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""requestkit command line front-end.

Performs one request and prints the response body to stdout. JSON bodies are
pretty-printed; with ``--include-headers`` the status line and headers are
printed first. Failures are reported on stderr with exit code 1.

Examples:
    requestkit httpbin.org/get --query "a=1"
    requestkit https://httpbin.org/post --json --data '{"hello": "world"}'
    requestkit example.org --download page.html
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

import typer

from . import api
from .errors import RequestKitError
from .logging_utils import setup_logging
from .settings import get_settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="requestkit",
    help="Perform one HTTP request and print the response body",
    add_completion=False,
)


# ============================================================================
# Helper Functions
# ============================================================================


def _parse_headers(values: List[str]) -> Dict[str, str]:
    """Parse repeated ``Name: value`` options into a header mapping."""
    headers: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Header must look like 'Name: value', got {raw!r}")
        headers[name.strip()] = value.strip()
    return headers


def _build_options(
    *,
    method: Optional[str],
    headers: List[str],
    query: Optional[str],
    data: Optional[str],
    as_json: bool,
    as_form: bool,
    include_headers: bool,
    force_redirect: bool,
    redirect_count: Optional[int],
    download: Optional[Path],
) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "headers": _parse_headers(headers),
        "json": as_json,
        "include_headers": include_headers,
        "force_redirect": force_redirect,
    }
    if method:
        options["method"] = method
    if query:
        options["query"] = query
    if redirect_count is not None:
        options["redirect_count"] = redirect_count
    if download is not None:
        options["download"] = download
    if data is not None:
        if as_json:
            try:
                options["body"] = json.loads(data)
            except ValueError as exc:
                raise typer.BadParameter(f"--data is not valid JSON: {exc}") from exc
        elif as_form:
            options["body"] = parse_qsl(data, keep_blank_values=True)
            options["form"] = True
        else:
            options["body"] = data
    return options


def _render_body(body: Any) -> str:
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, ensure_ascii=False)
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Request URL; bare host names use http://"),
    method: Optional[str] = typer.Option(None, "--method", "-X", help="HTTP method"),
    header: List[str] = typer.Option(
        [], "--header", "-H", help="Request header as 'Name: value' (repeatable)"
    ),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="URL-encoded query string"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body"),
    as_json: bool = typer.Option(
        False, "--json", help="Send --data as JSON and parse the response as JSON"
    ),
    as_form: bool = typer.Option(False, "--form", help="Send --data as a URL-encoded form"),
    include_headers: bool = typer.Option(
        False, "--include-headers", "-i", help="Print the status line and response headers"
    ),
    force_redirect: bool = typer.Option(
        False, "--force-redirect", help="Follow 301/302/305 redirects for any method"
    ),
    redirect_count: Optional[int] = typer.Option(
        None, "--redirect-count", min=0, help="Maximum number of redirects to follow"
    ),
    download: Optional[Path] = typer.Option(
        None, "--download", "-o", help="Write the response body to this file"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="JSON-lines log file"),
) -> None:
    """Perform one HTTP request and print the response body."""
    setup_logging(level=log_level or get_settings().log_level, log_file=log_file)
    options = _build_options(
        method=method,
        headers=header,
        query=query,
        data=data,
        as_json=as_json,
        as_form=as_form,
        include_headers=include_headers,
        force_redirect=force_redirect,
        redirect_count=redirect_count,
        download=download,
    )

    try:
        response = asyncio.run(api.request(url, options))
    except RequestKitError as exc:
        logger.debug("Request failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if include_headers and response.headers is not None:
        typer.echo(f"HTTP {response.status_code}")
        for name, value in response.headers.multi_items():
            typer.echo(f"{name}: {value}")
        typer.echo("")
    typer.echo(_render_body(response.body))


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
