#!/usr/bin/env python3
# src/openapi_mcp_server/types/base.py
"""
Base - pydantic models for the MCP wire types this server emits

Only the subset needed by an OpenAPI-backed tool server: server identity,
capabilities and content items.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class MCPModel(BaseModel):
    """Base model; unknown fields are kept so newer clients round-trip."""

    model_config = ConfigDict(extra="allow")


class ServerInfo(MCPModel):
    name: str
    version: str
    title: str | None = None


class ToolsCapability(MCPModel):
    listChanged: bool = False


class LoggingCapability(MCPModel):
    pass


class ServerCapabilities(MCPModel):
    tools: ToolsCapability | None = None
    logging: LoggingCapability | None = None
    experimental: dict[str, Any] | None = None


class TextContent(MCPModel):
    type: Literal["text"] = "text"
    text: str


def create_text_content(text: str) -> TextContent:
    return TextContent(text=text)


def content_to_dict(content: TextContent) -> dict[str, Any]:
    return content.model_dump(exclude_none=True)
