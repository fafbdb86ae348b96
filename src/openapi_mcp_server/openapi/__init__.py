#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/__init__.py
"""
OpenAPI package.

Turns an OpenAPI 3.x document into an MCP tool catalogue: pointer
resolution, schema translation and tool synthesis.
"""

from .loader import load_document, parse_document
from .models import Catalogue, HttpMethod, OpenAPIDocument, OperationEntry, SchemaNode, ToolDefinition
from .resolver import SchemaResolver
from .synthesizer import ToolNamer, ToolSynthesizer, with_string_fallback
from .translator import SchemaTranslator

__all__ = [
    "Catalogue",
    "HttpMethod",
    "OpenAPIDocument",
    "OperationEntry",
    "SchemaNode",
    "SchemaResolver",
    "SchemaTranslator",
    "ToolDefinition",
    "ToolNamer",
    "ToolSynthesizer",
    "load_document",
    "parse_document",
    "with_string_fallback",
]
