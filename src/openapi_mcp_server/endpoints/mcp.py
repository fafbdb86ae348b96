#!/usr/bin/env python3
# src/openapi_mcp_server/endpoints/mcp.py
"""
endpoints/mcp.py - JSON-RPC over HTTP

``POST /mcp`` carries one JSON-RPC message per request; the session id issued
by ``initialize`` travels in the ``Mcp-Session-Id`` header. ``DELETE /mcp``
ends a session. When an auth token is configured every request must carry
``Authorization: Bearer <token>``.
"""

import hmac
import logging

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..constants import (
    HEADER_AUTHORIZATION,
    HEADER_MCP_SESSION_ID,
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ID,
    KEY_METHOD,
    MAX_REQUEST_BODY_BYTES,
    JsonRpcError,
)
from ..protocol import MCPProtocolHandler
from .utils import json_response, jsonrpc_error_response

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class MCPEndpoint:
    """Starlette endpoint bound to one protocol handler."""

    def __init__(self, protocol: MCPProtocolHandler, auth_token: str | None = None):
        self.protocol = protocol
        self.auth_token = auth_token

    def _authorized(self, request: Request) -> bool:
        if not self.auth_token:
            return True
        header = request.headers.get(HEADER_AUTHORIZATION, "")
        if not header.startswith(BEARER_PREFIX):
            return False
        return hmac.compare_digest(header[len(BEARER_PREFIX) :].strip(), self.auth_token)

    async def handle_request(self, request: Request) -> Response:
        if not self._authorized(request):
            logger.warning(f"Rejected unauthorized {request.method} /mcp from {request.client}")
            return json_response(
                {"error": "Unauthorized", "message": "Missing or invalid bearer token"},
                status_code=401,
                headers={"www-authenticate": "Bearer"},
            )

        if request.method == "DELETE":
            return self._handle_delete(request)
        return await self._handle_post(request)

    async def _handle_post(self, request: Request) -> Response:
        body = await request.body()
        if not body:
            return jsonrpc_error_response(None, JsonRpcError.PARSE_ERROR, "Parse error: Empty body")
        if len(body) > MAX_REQUEST_BODY_BYTES:
            return jsonrpc_error_response(
                None, JsonRpcError.INVALID_REQUEST, "Request body too large", status_code=413
            )

        try:
            message = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            return jsonrpc_error_response(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")

        if not isinstance(message, dict) or message.get(JSONRPC_KEY) != JSONRPC_VERSION or KEY_METHOD not in message:
            msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
            return jsonrpc_error_response(msg_id, JsonRpcError.INVALID_REQUEST, "Invalid Request")

        session_id = request.headers.get(HEADER_MCP_SESSION_ID)
        response, new_session_id = await self.protocol.handle_request(message, session_id)

        if response is None:
            return Response(status_code=202)

        headers = {HEADER_MCP_SESSION_ID: new_session_id} if new_session_id else None
        return json_response(response, headers=headers)

    def _handle_delete(self, request: Request) -> Response:
        session_id = request.headers.get(HEADER_MCP_SESSION_ID)
        if not session_id:
            return json_response({"error": f"Missing {HEADER_MCP_SESSION_ID} header"}, status_code=400)
        if not self.protocol.session_manager.terminate(session_id):
            return json_response({"error": "Session not found"}, status_code=404)
        logger.debug(f"Terminated session {session_id[:8]}...")
        return Response(status_code=204)
