#!/usr/bin/env python3
# src/openapi_mcp_server/server.py
"""
OpenAPIMCPServer - one OpenAPI document served as an MCP server

Wires the pieces together: the HTTP client that executes operations, the
proxy that holds the tool catalogue, the JSON-RPC protocol handler and the
stdio or HTTP transport.

    server = OpenAPIMCPServer.from_settings(ServerSettings.from_env())
    server.run()
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from .app import create_app
from .client import HttpClient
from .config import ServerSettings, parse_headers_from_env
from .config.constants import TRANSPORT_HTTP, TRANSPORT_STDIO
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TOOL_NAMESPACE, SERVER_NAME, SERVER_VERSION
from .errors import ConfigurationError
from .openapi import OpenAPIDocument, load_document
from .protocol import MCPProtocolHandler
from .proxy import MCPProxy
from .stdio_transport import run_stdio_server
from .types import ServerInfo, create_server_capabilities

logger = logging.getLogger(__name__)


class OpenAPIMCPServer:
    """MCP server exposing every operation of an OpenAPI document as a tool."""

    def __init__(
        self,
        document: OpenAPIDocument,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        namespace: str | None = DEFAULT_TOOL_NAMESPACE,
        name: str = SERVER_NAME,
        version: str = SERVER_VERSION,
        client: HttpClient | None = None,
    ):
        self.document = document
        self.client = client or HttpClient(
            document,
            base_url=base_url,
            headers=parse_headers_from_env() if headers is None else headers,
        )
        self.proxy = MCPProxy(document, self.client, namespace=namespace)

        info = document.get("info") or {}
        self.server_info = ServerInfo(name=name, version=version, title=info.get("title"))
        self.protocol = MCPProtocolHandler(self.server_info, create_server_capabilities(), self.proxy)

        logger.debug(f"{name} ready: {len(self.proxy.catalogue)} tools against {self.client.base_url}")

    @classmethod
    def from_settings(cls, settings: ServerSettings, **kwargs: Any) -> "OpenAPIMCPServer":
        """Load the document named by ``settings`` and build the server."""
        if not settings.spec_path:
            raise ConfigurationError(
                "No OpenAPI document configured",
                suggestion="Pass --spec or set OPENAPI_SPEC_PATH",
            )
        document = load_document(settings.spec_path)
        return cls(document, base_url=settings.base_url, headers=settings.headers, **kwargs)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "OpenAPIMCPServer":
        return cls(load_document(path), **kwargs)

    # ------------------------------------------------------------------
    # Transports
    # ------------------------------------------------------------------

    async def run_stdio_async(self) -> None:
        try:
            await run_stdio_server(self.protocol)
        finally:
            await self.aclose()

    def create_http_app(self, auth_token: str | None = None, debug: bool = False) -> Any:
        return create_app(self.protocol, auth_token=auth_token, debug=debug, on_shutdown=self.aclose)

    def run_http(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        auth_token: str | None = None,
        log_level: str = "warning",
    ) -> None:
        import uvicorn

        if auth_token is None:
            logger.warning("HTTP transport running without an auth token; any client can call the API")
        logger.info(f"Serving {len(self.proxy.catalogue)} tools on http://{host}:{port}/mcp")
        uvicorn.run(self.create_http_app(auth_token=auth_token), host=host, port=port, log_level=log_level)

    def run(
        self,
        transport: str = TRANSPORT_STDIO,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        auth_token: str | None = None,
        log_level: str = "warning",
    ) -> None:
        """Serve until the transport closes."""
        if transport == TRANSPORT_HTTP:
            self.run_http(host=host, port=port, auth_token=auth_token, log_level=log_level)
        elif transport == TRANSPORT_STDIO:
            try:
                asyncio.run(self.run_stdio_async())
            except KeyboardInterrupt:
                logger.info("Server shutting down")
        else:
            raise ConfigurationError(f"Unknown transport {transport!r}", suggestion="Use 'stdio' or 'http'")

    async def aclose(self) -> None:
        await self.client.aclose()
