#!/usr/bin/env python3
# src/openapi_mcp_server/__init__.py
"""
openapi-mcp-server - expose an OpenAPI REST API as MCP tools

Every operation of an OpenAPI 3.x document becomes one tool with a
self-contained input schema; calling the tool executes the HTTP request.

    from openapi_mcp_server import OpenAPIMCPServer

    server = OpenAPIMCPServer.from_file("openapi.json")
    server.run()  # stdio

Or from the command line:

    openapi-mcp-server stdio --spec openapi.json
"""

from .client import HttpClient, HttpClientError, HttpResponse
from .config import ServerSettings
from .constants import SERVER_VERSION
from .errors import ConfigurationError, MCPError, MethodNotFoundError
from .openapi import Catalogue, SchemaResolver, SchemaTranslator, ToolDefinition, ToolSynthesizer, load_document
from .proxy import MCPProxy
from .recovery import recover_arguments
from .server import OpenAPIMCPServer
from .testing import ToolRunner

__version__ = SERVER_VERSION
__all__ = [
    "Catalogue",
    "ConfigurationError",
    "HttpClient",
    "HttpClientError",
    "HttpResponse",
    "MCPError",
    "MCPProxy",
    "MethodNotFoundError",
    "OpenAPIMCPServer",
    "SchemaResolver",
    "SchemaTranslator",
    "ServerSettings",
    "ToolDefinition",
    "ToolRunner",
    "ToolSynthesizer",
    "load_document",
    "recover_arguments",
]
