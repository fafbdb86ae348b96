#!/usr/bin/env python3
# src/openapi_mcp_server/app.py
"""
app.py - Starlette application for the HTTP transport
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .constants import HEADER_MCP_SESSION_ID
from .endpoints import HealthEndpoint, MCPEndpoint
from .protocol import MCPProtocolHandler


def create_app(
    protocol: MCPProtocolHandler,
    auth_token: str | None = None,
    debug: bool = False,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> Starlette:
    """
    Create the Starlette application serving ``protocol``.

    Args:
        protocol: Protocol handler answering JSON-RPC messages.
        auth_token: Bearer token required on ``/mcp`` (no auth when None).
        debug: Starlette debug mode.
        on_shutdown: Awaited once when the application stops.
    """
    mcp_endpoint = MCPEndpoint(protocol, auth_token=auth_token)
    health_endpoint = HealthEndpoint(protocol)

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=[HEADER_MCP_SESSION_ID],
            max_age=3600,
        ),
    ]

    routes = [
        Route("/mcp", mcp_endpoint.handle_request, methods=["POST", "DELETE"]),
        Route("/health", health_endpoint.handle_request, methods=["GET"]),
    ]

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await protocol.shutdown()
            if on_shutdown is not None:
                await on_shutdown()

    return Starlette(debug=debug, routes=routes, middleware=middleware, lifespan=lifespan)
