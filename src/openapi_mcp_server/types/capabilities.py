#!/usr/bin/env python3
# src/openapi_mcp_server/types/capabilities.py
"""
Capabilities - Server capability creation
"""

from typing import Any

from .base import LoggingCapability, ServerCapabilities, ToolsCapability


def create_server_capabilities(
    tools: bool = True,
    logging: bool = True,
    experimental: dict[str, Any] | None = None,
) -> ServerCapabilities:
    """Create the capabilities advertised on initialize.

    The tool list is fixed at startup, so ``listChanged`` is never announced.
    """
    capabilities: dict[str, Any] = {}

    if tools:
        capabilities["tools"] = ToolsCapability(listChanged=False)
    if logging:
        capabilities["logging"] = LoggingCapability()
    if experimental:
        capabilities["experimental"] = experimental

    return ServerCapabilities(**capabilities)


__all__ = ["create_server_capabilities"]
