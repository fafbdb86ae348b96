#!/usr/bin/env python3
# src/openapi_mcp_server/types/__init__.py
"""
Types package - MCP wire types as pydantic models.
"""

from .base import (
    LoggingCapability,
    ServerCapabilities,
    ServerInfo,
    TextContent,
    ToolsCapability,
    content_to_dict,
    create_text_content,
)
from .capabilities import create_server_capabilities
from .content import format_text_result, to_json_text

__all__ = [
    "LoggingCapability",
    "ServerCapabilities",
    "ServerInfo",
    "TextContent",
    "ToolsCapability",
    "content_to_dict",
    "create_server_capabilities",
    "create_text_content",
    "format_text_result",
    "to_json_text",
]
