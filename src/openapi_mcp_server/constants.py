#!/usr/bin/env python3
"""
Top-level constants shared across the openapi_mcp_server package.
"""

import re
from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION_2025_06 = "2025-06-18"
MCP_DEFAULT_PROTOCOL_VERSION = MCP_PROTOCOL_VERSION_2025_06


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    LOGGING_SET_LEVEL = "logging/setLevel"
    NOTIFICATIONS_CANCELLED = "notifications/cancelled"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"


# ---------------------------------------------------------------------------
# Tool catalogue
# ---------------------------------------------------------------------------
MAX_TOOL_NAME_LENGTH = 64
TOOL_NAME_SUFFIX_WIDTH = 4
DEFAULT_TOOL_NAMESPACE = "API"
TOOL_NAMESPACE_SEPARATOR = "-"

# Host APIs whose tool descriptions get a catalogue-wide prefix
DESCRIPTION_PREFIXES = {
    "Notion API": "Notion | ",
}


# ---------------------------------------------------------------------------
# Tool annotations keys (MCP 2025-03-26)
# ---------------------------------------------------------------------------
KEY_ANNOTATIONS = "annotations"
KEY_TITLE = "title"
KEY_READ_ONLY_HINT = "readOnlyHint"
KEY_DESTRUCTIVE_HINT = "destructiveHint"


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_MULTIPART = "multipart/form-data"
CONTENT_TYPE_PNG = "image/png"
CONTENT_TYPE_JPEG = "image/jpeg"


# ---------------------------------------------------------------------------
# Common HTTP headers
# ---------------------------------------------------------------------------
HEADER_AUTHORIZATION = "Authorization"
HEADER_MCP_SESSION_ID = "Mcp-Session-Id"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


# ---------------------------------------------------------------------------
# Network defaults
# ---------------------------------------------------------------------------
DEFAULT_HOST = "127.0.0.1"
DEFAULT_ENCODING = "utf-8"
DEFAULT_PORT = 3000
DEFAULT_HTTP_TIMEOUT = 30.0


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "openapi-mcp-server"
SERVER_VERSION = "1.0.0"
PACKAGE_LOGGER = "openapi_mcp_server"


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
KEY_CURSOR = "cursor"
KEY_NEXT_CURSOR = "nextCursor"
DEFAULT_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Request validation limits
# ---------------------------------------------------------------------------
MAX_REQUEST_BODY_BYTES = 10 * 1024 * 1024  # 10 MB


# ---------------------------------------------------------------------------
# Tool name validation (MCP 2025-11-25)
# ---------------------------------------------------------------------------
TOOL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\.]{1,128}$")
