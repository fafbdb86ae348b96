#!/usr/bin/env python3
# src/openapi_mcp_server/endpoints/utils.py
"""
endpoints/utils.py - orjson response helpers shared by the HTTP endpoints
"""

from typing import Any

import orjson
from starlette.responses import Response

from ..constants import CONTENT_TYPE_JSON, JSONRPC_KEY, JSONRPC_VERSION, KEY_ERROR, KEY_ID

NO_CACHE_HEADERS = {"cache-control": "no-cache"}


def json_response(data: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> Response:
    """Serialize ``data`` with orjson."""
    return Response(
        orjson.dumps(data),
        status_code=status_code,
        media_type=CONTENT_TYPE_JSON,
        headers={**NO_CACHE_HEADERS, **(headers or {})},
    )


def jsonrpc_error_response(msg_id: Any, code: int, message: str, status_code: int = 400) -> Response:
    """JSON-RPC error envelope for failures detected before dispatch."""
    return json_response(
        {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: {"code": int(code), "message": message}},
        status_code=status_code,
    )
