#!/usr/bin/env python3
# src/openapi_mcp_server/stdio_transport.py
"""
STDIO Transport - MCP protocol over standard input/output.

Newline-delimited JSON-RPC: one message per line on stdin, one response per
line on stdout. Each request is dispatched as its own task, so a slow API
call never blocks ``ping`` or ``notifications/cancelled``.
"""

import asyncio
import logging
import sys
from typing import Any, TextIO

import orjson

from .constants import DEFAULT_ENCODING, JSONRPC_KEY, JSONRPC_VERSION, KEY_ERROR, KEY_ID, JsonRpcError
from .protocol import MCPProtocolHandler

logger = logging.getLogger(__name__)


class StdioTransport:
    """Serve one MCP client over a stdin/stdout pair."""

    def __init__(
        self,
        protocol_handler: MCPProtocolHandler,
        reader: asyncio.StreamReader | None = None,
        writer: TextIO | None = None,
    ) -> None:
        self.protocol = protocol_handler
        self.reader = reader
        self.writer = writer
        self.running = False
        self.session_id: str | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._write_lock = asyncio.Lock()

    async def start(self) -> None:
        """Attach to the process stdio (unless streams were injected) and serve until EOF."""
        self.running = True

        if self.reader is None:
            loop = asyncio.get_running_loop()
            self.reader = asyncio.StreamReader()
            protocol = asyncio.StreamReaderProtocol(self.reader)
            await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        if self.writer is None:
            self.writer = sys.stdout

        await self._listen()

    async def _listen(self) -> None:
        """Read lines until EOF, then wait for in-flight requests."""
        assert self.reader is not None
        while self.running:
            try:
                line = await self.reader.readline()
            except asyncio.CancelledError:
                break
            except ValueError as e:
                # Line longer than the reader limit
                logger.debug(f"Error in stdio listener: {e}")
                await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
                continue
            if not line:
                break

            text = line.decode(DEFAULT_ENCODING).strip()
            if not text:
                continue

            task = asyncio.create_task(self._handle_message(text))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _handle_message(self, message: str) -> None:
        """Parse one JSON-RPC message and write the handler's response, if any."""
        try:
            request_data = orjson.loads(message)
        except orjson.JSONDecodeError as e:
            logger.debug(f"Invalid JSON in stdio message: {e}")
            await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
            return

        if not isinstance(request_data, dict):
            await self._send_error(None, JsonRpcError.INVALID_REQUEST, "Invalid Request: expected a JSON object")
            return

        response, new_session_id = await self.protocol.handle_request(request_data, self.session_id)
        if new_session_id:
            self.session_id = new_session_id
        if response is not None and request_data.get(KEY_ID) is not None:
            await self._send_response(response)

    async def _send_response(self, response: dict[str, Any]) -> None:
        async with self._write_lock:
            if self.writer is None:
                return
            try:
                self.writer.write(orjson.dumps(response).decode(DEFAULT_ENCODING) + "\n")
                self.writer.flush()
            except (OSError, ValueError) as e:
                logger.error(f"Critical error sending stdio response: {e}")

    async def _send_error(self, request_id: Any, code: int, message: str) -> None:
        await self._send_response(
            {
                JSONRPC_KEY: JSONRPC_VERSION,
                KEY_ID: request_id,
                KEY_ERROR: {"code": int(code), "message": message},
            }
        )

    async def stop(self) -> None:
        """Stop reading; in-flight requests are cancelled."""
        self.running = False
        for task in list(self._tasks):
            task.cancel()
        if self.reader is not None:
            self.reader.feed_eof()


async def run_stdio_server(protocol_handler: MCPProtocolHandler) -> None:
    """Serve ``protocol_handler`` over the process stdio until stdin closes."""
    transport = StdioTransport(protocol_handler)
    try:
        await transport.start()
    finally:
        await transport.stop()
        await protocol_handler.shutdown()
