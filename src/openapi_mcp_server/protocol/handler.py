#!/usr/bin/env python3
# src/openapi_mcp_server/protocol/handler.py
"""
Protocol Handler - JSON-RPC dispatch for the OpenAPI MCP server
"""

import asyncio
import base64
import binascii
import logging
from typing import Any

from ..constants import (
    DEFAULT_PAGE_SIZE,
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_CURSOR,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_NEXT_CURSOR,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    MCP_DEFAULT_PROTOCOL_VERSION,
    PACKAGE_LOGGER,
    JsonRpcError,
    McpMethod,
)
from ..errors import MethodNotFoundError
from ..proxy import MCPProxy
from ..types import ServerCapabilities, ServerInfo
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

# MCP levels without a Python counterpart map to the nearest one
MCP_LOG_LEVEL_MAPPING = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}


class MCPProtocolHandler:
    """Core MCP protocol handler backed by an ``MCPProxy``."""

    def __init__(
        self,
        server_info: ServerInfo,
        capabilities: ServerCapabilities,
        proxy: MCPProxy,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.server_info = server_info
        self.capabilities = capabilities
        self.proxy = proxy
        self.page_size = page_size
        self.session_manager = SessionManager()

        # In-flight tools/call tasks, for notifications/cancelled
        self._in_flight_requests: dict[Any, asyncio.Task[Any]] = {}
        self._cancelled_requests: set[Any] = set()

        logger.debug("MCP protocol handler initialized")

    async def handle_request(
        self, message: dict[str, Any], session_id: str | None = None
    ) -> tuple[dict[str, Any] | None, str | None]:
        """Handle one JSON-RPC message.

        Returns:
            ``(response, new_session_id)``; response is None for notifications.
        """
        msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
        try:
            method = message.get(KEY_METHOD)
            params = message.get(KEY_PARAMS) or {}

            logger.debug(f"Handling {method} (ID: {msg_id})")

            if session_id:
                self.session_manager.update_activity(session_id)

            if method == McpMethod.INITIALIZE:
                return await self._handle_initialize(params, msg_id)
            elif method == McpMethod.INITIALIZED:
                logger.debug("Initialized notification received")
                return None, None
            elif method == McpMethod.PING:
                return self._result(msg_id, {}), None
            elif method == McpMethod.TOOLS_LIST:
                return await self._handle_tools_list(params, msg_id)
            elif method == McpMethod.TOOLS_CALL:
                return await self._handle_tools_call(params, msg_id)
            elif method == McpMethod.LOGGING_SET_LEVEL:
                return await self._handle_logging_set_level(params, msg_id)
            elif method == McpMethod.NOTIFICATIONS_CANCELLED:
                self._handle_cancelled_notification(params)
                return None, None
            elif msg_id is None:
                logger.debug(f"Ignoring unknown notification {method}")
                return None, None
            else:
                return self._create_error_response(
                    msg_id, JsonRpcError.METHOD_NOT_FOUND, f"Method not found: {method}"
                ), None

        except asyncio.CancelledError:
            raise
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Invalid params in request: {e}")
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, f"Invalid parameters: {e}"), None
        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Internal server error"), None

    # ================================================================
    # Method handlers
    # ================================================================

    async def _handle_initialize(self, params: dict[str, Any], msg_id: Any) -> tuple[dict[str, Any], str]:
        client_info = params.get(KEY_CLIENT_INFO) or {}
        protocol_version = params.get(KEY_PROTOCOL_VERSION, MCP_DEFAULT_PROTOCOL_VERSION)

        session_id = self.session_manager.create_session(client_info, protocol_version)

        result = {
            KEY_PROTOCOL_VERSION: protocol_version,
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
            KEY_CAPABILITIES: self.capabilities.model_dump(exclude_none=True),
        }

        logger.debug(
            f"Initialized session {session_id[:8]}... for {client_info.get('name', 'unknown')} (v{protocol_version})"
        )
        return self._result(msg_id, result), session_id

    async def _handle_tools_list(self, params: dict[str, Any], msg_id: Any) -> tuple[dict[str, Any], None]:
        """Handle tools/list request with pagination support."""
        tools = self.proxy.list_tools()["tools"]
        result = self._paginate(tools, "tools", params, self.page_size)
        logger.debug(f"Returning {len(result['tools'])} tools")
        return self._result(msg_id, result), None

    async def _handle_tools_call(self, params: dict[str, Any], msg_id: Any) -> tuple[dict[str, Any], None]:
        tool_name: str = params.get("name", "")
        arguments = params.get("arguments") or {}

        if not isinstance(arguments, dict):
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, f"arguments must be an object, got {type(arguments).__name__}"
            ), None

        task = asyncio.ensure_future(self.proxy.call_tool(tool_name, arguments))
        if msg_id is not None:
            self._in_flight_requests[msg_id] = task
        try:
            result = await task
        except MethodNotFoundError as e:
            logger.debug(e.to_message())
            return self._create_error_response(msg_id, e.code, str(e), e.suggestion), None
        except asyncio.CancelledError:
            if msg_id not in self._cancelled_requests:
                raise
            self._cancelled_requests.discard(msg_id)
            logger.debug(f"Tool execution cancelled for {tool_name} (request {msg_id})")
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Request cancelled"), None
        except Exception as e:
            logger.error(f"Tool execution error for {tool_name}: {e}")
            return self._create_error_response(
                msg_id, JsonRpcError.INTERNAL_ERROR, f"Tool execution error: {type(e).__name__}: {e}"
            ), None
        finally:
            self._in_flight_requests.pop(msg_id, None)

        logger.debug(f"Executed tool {tool_name}")
        return self._result(msg_id, result), None

    async def _handle_logging_set_level(self, params: dict[str, Any], msg_id: Any) -> tuple[dict[str, Any], None]:
        level = str(params.get("level", "info"))
        level_lower = level.lower()
        if level_lower not in MCP_LOG_LEVEL_MAPPING:
            return self._create_error_response(
                msg_id,
                JsonRpcError.INVALID_PARAMS,
                f"Invalid logging level: {level}. Must be one of: {', '.join(MCP_LOG_LEVEL_MAPPING)}",
            ), None

        logging.getLogger(PACKAGE_LOGGER).setLevel(MCP_LOG_LEVEL_MAPPING[level_lower])
        logger.debug(f"Logging level set to {level.upper()}")
        return self._result(msg_id, {}), None

    def _handle_cancelled_notification(self, params: dict[str, Any]) -> None:
        request_id = params.get("requestId")
        if request_id is None:
            logger.debug("Received cancelled notification without requestId")
            return

        task = self._in_flight_requests.pop(request_id, None)
        if task is not None:
            self._cancelled_requests.add(request_id)
            task.cancel()
            reason = params.get("reason", "")
            logger.debug(f"Cancelled request {request_id}" + (f": {reason}" if reason else ""))
        else:
            logger.debug(f"Cancelled notification for unknown request {request_id}")

    # ================================================================
    # Helpers
    # ================================================================

    @staticmethod
    def _paginate(
        items: list[dict[str, Any]], key: str, params: dict[str, Any], page_size: int = DEFAULT_PAGE_SIZE
    ) -> dict[str, Any]:
        """Slice ``items`` at the offset encoded in ``params["cursor"]``.

        Invalid cursors restart from the beginning.
        """
        cursor = params.get(KEY_CURSOR)
        offset = 0
        if cursor is not None:
            try:
                offset = max(int(base64.b64decode(cursor).decode()), 0)
            except (ValueError, TypeError, binascii.Error):
                offset = 0

        result: dict[str, Any] = {key: items[offset : offset + page_size]}
        if offset + page_size < len(items):
            result[KEY_NEXT_CURSOR] = base64.b64encode(str(offset + page_size).encode()).decode()
        return result

    @staticmethod
    def _result(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

    @staticmethod
    def _create_error_response(
        msg_id: Any, code: int, message: str, suggestion: str | None = None
    ) -> dict[str, Any]:
        error: dict[str, Any] = {"code": int(code), "message": message}
        if suggestion:
            error["data"] = {"suggestion": suggestion}
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: error}

    async def shutdown(self) -> None:
        """Cancel in-flight calls and drop sessions."""
        for task in list(self._in_flight_requests.values()):
            task.cancel()
        self._in_flight_requests.clear()
        self.session_manager.sessions.clear()
        logger.debug("Protocol handler shut down")
