# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for suite",
#   "sections": [
#     {"id": "anyio-backend", "name": "anyio_backend", "anchor": "function-anyio-backend", "kind": "function"},
#     {"id": "clean-settings", "name": "_clean_settings", "anchor": "function-clean-settings", "kind": "function"},
#     {"id": "restore-package-logger", "name": "_restore_package_logger", "anchor": "function-restore-package-logger", "kind": "function"},
#     {"id": "server", "name": "server", "anchor": "function-server", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Shared fixtures for the RequestKit suite: the anyio backend used by async
tests, isolation of ``REQUESTKIT_*`` settings, and the in-process route table
that stands in for a live HTTP server.

Usage:
    @pytest.mark.anyio
    async def test_something(server):
        response = await RequestKit.get(f"{BASE_URL}/get/ok")
"""

from __future__ import annotations

import logging
import os
from typing import Iterator

import pytest

from RequestKit.settings import reset_settings
from RequestKit.testing import MockServer, use_mock_transport
from tests.fixtures.http_mocking import build_test_server


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop environment overrides and cached settings around every test."""
    for name in list(os.environ):
        if name.upper().startswith("REQUESTKIT_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    """Undo ``setup_logging`` side effects so caplog keeps seeing records."""
    logger = logging.getLogger("RequestKit")
    level, propagate, handlers = logger.level, logger.propagate, list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def server() -> Iterator[MockServer]:
    """Route every RequestKit call made by the test to the echo routes."""
    mock = build_test_server()
    with use_mock_transport(mock.transport):
        yield mock
