#!/usr/bin/env python3
# src/openapi_mcp_server/endpoints/health.py
"""
endpoints/health.py - Liveness check for load balancers
"""

import time

from starlette.requests import Request
from starlette.responses import Response

from ..protocol import MCPProtocolHandler
from .utils import json_response


class HealthEndpoint:
    """``GET /health``: unauthenticated status, tool count and uptime."""

    def __init__(self, protocol: MCPProtocolHandler):
        self.protocol = protocol
        self.start_time = time.time()

    async def handle_request(self, request: Request) -> Response:
        now = time.time()
        return json_response(
            {
                "status": "healthy",
                "server": self.protocol.server_info.name,
                "version": self.protocol.server_info.version,
                "tools": len(self.protocol.proxy.catalogue),
                "sessions": len(self.protocol.session_manager.sessions),
                "uptime": round(now - self.start_time, 2),
                "timestamp": now,
            },
            headers={"cache-control": "no-cache, no-store, must-revalidate"},
        )
