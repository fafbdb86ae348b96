#!/usr/bin/env python3
# src/openapi_mcp_server/config/settings.py
"""
Server settings collected from the environment at startup.

CLI flags are applied on top with ``ServerSettings.merged``; explicit values
win over the environment.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..constants import DEFAULT_HOST, DEFAULT_PORT, LOG_LEVELS
from .constants import (
    DEFAULT_LOG_LEVEL,
    ENV_AUTH_TOKEN,
    ENV_HOST,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_STDIO,
    ENV_MCP_TRANSPORT,
    ENV_OPENAPI_BASE_URL,
    ENV_OPENAPI_SPEC_PATH,
    ENV_PORT,
    ENV_USE_STDIO,
    TRANSPORT_HTTP,
    TRANSPORT_STDIO,
    TRANSPORTS,
    TRUTHY_VALUES,
)
from .headers import parse_headers_from_env

logger = logging.getLogger(__name__)


def detect_transport(environ: Mapping[str, str]) -> str:
    """Pick ``stdio`` or ``http`` from the environment; stdio unless told otherwise."""
    explicit = environ.get(ENV_MCP_TRANSPORT, "").strip().lower()
    if explicit in TRANSPORTS:
        return explicit
    if explicit:
        logger.warning(f"Ignoring unknown {ENV_MCP_TRANSPORT}={explicit!r}")

    for name in (ENV_MCP_STDIO, ENV_USE_STDIO):
        if environ.get(name, "").strip().lower() in TRUTHY_VALUES:
            return TRANSPORT_STDIO

    if environ.get(ENV_PORT):
        return TRANSPORT_HTTP
    return TRANSPORT_STDIO


def _parse_port(value: str | None) -> int:
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {ENV_PORT}={value!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT


def _parse_log_level(value: str | None) -> str:
    level = (value or DEFAULT_LOG_LEVEL).lower()
    if level not in LOG_LEVELS:
        logger.warning(f"Invalid {ENV_MCP_LOG_LEVEL}={value!r}, using {DEFAULT_LOG_LEVEL}")
        return DEFAULT_LOG_LEVEL
    return level


@dataclass
class ServerSettings:
    """Everything needed to start the server."""

    spec_path: str | None = None
    base_url: str | None = None
    transport: str = TRANSPORT_STDIO
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    auth_token: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        return cls(
            spec_path=env.get(ENV_OPENAPI_SPEC_PATH) or None,
            base_url=env.get(ENV_OPENAPI_BASE_URL) or None,
            transport=detect_transport(env),
            host=env.get(ENV_HOST) or DEFAULT_HOST,
            port=_parse_port(env.get(ENV_PORT)),
            auth_token=env.get(ENV_AUTH_TOKEN) or None,
            log_level=_parse_log_level(env.get(ENV_MCP_LOG_LEVEL)),
            headers=parse_headers_from_env(env),
        )

    def merged(self, **overrides: Any) -> "ServerSettings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
