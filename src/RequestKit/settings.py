# === NAVMAP v1 ===
# {
#   "module": "RequestKit.settings",
#   "purpose": "Environment-driven client settings",
#   "sections": [
#     {"id": "clientsettings", "name": "ClientSettings", "anchor": "class-clientsettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"},
#     {"id": "reset-settings", "name": "reset_settings", "anchor": "function-reset-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Environment-driven client settings.

Settings are read once from ``REQUESTKIT_*`` environment variables and cached
for the process. Per-request options always win over these defaults.

Example:
    >>> import os
    >>> os.environ["REQUESTKIT_REDIRECT_LIMIT"] = "3"
    >>> reset_settings()
    >>> get_settings().redirect_limit
    3
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__
from .policy import (
    DEFAULT_ACCEPT_ENCODING,
    DEFAULT_ENCODING,
    DEFAULT_REDIRECT_LIMIT,
    USER_AGENT_TEMPLATE,
)

__all__ = ["ClientSettings", "get_settings", "reset_settings"]

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ClientSettings(BaseSettings):
    """Process-wide defaults for outgoing requests."""

    user_agent: str = Field(
        default=USER_AGENT_TEMPLATE.format(version=__version__),
        description="Default User-Agent header",
    )
    accept_encoding: str = Field(
        default=DEFAULT_ACCEPT_ENCODING, description="Default Accept-Encoding header"
    )
    redirect_limit: int = Field(
        default=DEFAULT_REDIRECT_LIMIT, ge=0, le=100, description="Default redirect budget"
    )
    encoding: str = Field(default=DEFAULT_ENCODING, description="Default text charset")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")
    log_level: str = Field(default="INFO", description="Logging level for the CLI")

    model_config = SettingsConfigDict(
        env_prefix="REQUESTKIT_", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Ensure ``log_level`` names a standard logging level."""
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


_settings: Optional[ClientSettings] = None
_settings_lock = threading.Lock()


def get_settings() -> ClientSettings:
    """Return the cached :class:`ClientSettings`, loading them on first use."""
    global _settings

    if _settings is not None:
        return _settings
    with _settings_lock:
        if _settings is None:
            _settings = ClientSettings()
            logging.getLogger(__name__).debug(
                "Client settings loaded",
                extra={"redirect_limit": _settings.redirect_limit},
            )
        return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings

    with _settings_lock:
        _settings = None
