#!/usr/bin/env python3
"""
Configuration constants: environment variable names and their defaults.
"""

# ---------------------------------------------------------------------------
# Upstream API headers
# ---------------------------------------------------------------------------
ENV_OPENAPI_MCP_HEADERS = "OPENAPI_MCP_HEADERS"
ENV_NOTION_TOKEN = "NOTION_TOKEN"

NOTION_VERSION_HEADER = "Notion-Version"
NOTION_API_VERSION = "2025-09-03"


# ---------------------------------------------------------------------------
# Document source
# ---------------------------------------------------------------------------
ENV_OPENAPI_SPEC_PATH = "OPENAPI_SPEC_PATH"
ENV_OPENAPI_BASE_URL = "OPENAPI_BASE_URL"


# ---------------------------------------------------------------------------
# Transport detection
# ---------------------------------------------------------------------------
ENV_MCP_TRANSPORT = "MCP_TRANSPORT"
ENV_MCP_STDIO = "MCP_STDIO"
ENV_USE_STDIO = "USE_STDIO"

TRANSPORT_STDIO = "stdio"
TRANSPORT_HTTP = "http"
TRANSPORTS = (TRANSPORT_STDIO, TRANSPORT_HTTP)

TRUTHY_VALUES = ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------
ENV_PORT = "PORT"
ENV_HOST = "HOST"
ENV_AUTH_TOKEN = "AUTH_TOKEN"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "warning"
