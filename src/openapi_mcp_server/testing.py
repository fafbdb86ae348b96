"""
Tool testing utilities for the OpenAPI MCP server.

Drives a server's protocol handler in-process, without a transport, so tests
can list and call tools against a mocked upstream API.
"""

import uuid
from typing import Any

from .constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_RESULT,
    MCP_DEFAULT_PROTOCOL_VERSION,
    McpMethod,
)


class ToolRunner:
    """Test harness for invoking tools without transport.

    Usage:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
        client = HttpClient(document, transport=transport)
        runner = ToolRunner(OpenAPIMCPServer(document, client=client))

        text = await runner.call_tool_text("API-getPet", {"petId": 1})
    """

    def __init__(self, server: Any):
        """Initialize ToolRunner.

        Args:
            server: An ``OpenAPIMCPServer`` (anything with a ``protocol`` attribute).
        """
        self.protocol = server.protocol
        self._session_id: str | None = None

    async def _ensure_session(self) -> str:
        if self._session_id is not None:
            return self._session_id

        init_msg = {
            JSONRPC_KEY: JSONRPC_VERSION,
            KEY_ID: "init-1",
            KEY_METHOD: McpMethod.INITIALIZE,
            KEY_PARAMS: {
                "protocolVersion": MCP_DEFAULT_PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "test-runner", "version": "0.0.0"},
            },
        }
        _, session_id = await self.protocol.handle_request(init_msg)
        self._session_id = session_id
        return str(session_id)

    async def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        session_id = await self._ensure_session()
        request = {
            JSONRPC_KEY: JSONRPC_VERSION,
            KEY_ID: f"test-{uuid.uuid4().hex[:8]}",
            KEY_METHOD: method,
            KEY_PARAMS: params,
        }
        response, _ = await self.protocol.handle_request(request, session_id)
        result: dict[str, Any] = response
        return result

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Call a tool and return the full JSON-RPC response."""
        return await self._request(McpMethod.TOOLS_CALL, {"name": name, "arguments": arguments or {}})

    async def call_tool_text(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Call a tool and return its text content.

        Raises:
            RuntimeError: If the call produced a JSON-RPC error.
        """
        response = await self.call_tool(name, arguments)

        if KEY_ERROR in response:
            raise RuntimeError(f"Tool error: {response[KEY_ERROR].get('message', response[KEY_ERROR])}")

        content = response[KEY_RESULT]["content"]
        return "\n".join(item["text"] for item in content if isinstance(item, dict) and "text" in item)

    async def list_tools(self) -> list[dict[str, Any]]:
        """List tools, following pagination cursors."""
        tools: list[dict[str, Any]] = []
        params: dict[str, Any] = {}
        while True:
            result = (await self._request(McpMethod.TOOLS_LIST, params)).get(KEY_RESULT, {})
            tools.extend(result.get("tools", []))
            cursor = result.get("nextCursor")
            if not cursor:
                return tools
            params = {"cursor": cursor}

    async def list_tool_names(self) -> list[str]:
        tools = await self.list_tools()
        return [t["name"] for t in tools]
