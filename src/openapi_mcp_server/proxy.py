#!/usr/bin/env python3
# src/openapi_mcp_server/proxy.py
"""
Proxy - MCP tool calls to HTTP operations

Holds the tool catalogue built from the OpenAPI document and answers the two
tool requests: list-tools renders the catalogue with annotations, call-tool
looks the operation up, repairs stringified arguments, executes the request
and wraps the response (or the upstream error body) as a text content item.
"""

import logging
import re
from typing import Any

from .client import HttpClient, HttpClientError
from .constants import (
    DEFAULT_TOOL_NAMESPACE,
    KEY_ANNOTATIONS,
    KEY_DESTRUCTIVE_HINT,
    KEY_READ_ONLY_HINT,
    KEY_TITLE,
)
from .errors import MethodNotFoundError
from .openapi import Catalogue, OpenAPIDocument, ToolSynthesizer
from .recovery import recover_arguments
from .types import format_text_result

logger = logging.getLogger(__name__)


def operation_id_to_title(operation_id: str) -> str:
    """``createDatabase`` -> ``Create Database``, ``get_HTTPStatus`` -> ``Get HTTP Status``."""
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", operation_id)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return " ".join(word[:1].upper() + word[1:] for word in re.split(r"[\s_-]+", spaced))


def error_payload(error: HttpClientError) -> dict[str, Any]:
    """Structured body for a failed upstream call."""
    data = error.data
    if isinstance(data, dict):
        response = data.get("response")
        if isinstance(response, dict) and response.get("data") is not None:
            data = response["data"]
    if data is None:
        data = {}
    body = data if isinstance(data, dict) else {"data": data}
    return {"status": "error", **body}


class MCPProxy:
    """Expose one OpenAPI document as MCP tools."""

    def __init__(
        self,
        document: OpenAPIDocument,
        client: HttpClient,
        namespace: str | None = DEFAULT_TOOL_NAMESPACE,
    ):
        self.document = document
        self.client = client
        self.catalogue: Catalogue = ToolSynthesizer(document, namespace).build()
        logger.debug(f"Proxy ready with {len(self.catalogue)} tools")

    @property
    def tool_names(self) -> list[str]:
        return list(self.catalogue.lookup)

    def list_tools(self) -> dict[str, Any]:
        """Render every catalogue tool in MCP ``tools/list`` format."""
        tools = []
        for name, entry in self.catalogue.lookup.items():
            hint = KEY_READ_ONLY_HINT if entry.method.is_read_only else KEY_DESTRUCTIVE_HINT
            tools.append(
                {
                    "name": name,
                    "description": entry.tool.description,
                    "inputSchema": entry.tool.input_schema,
                    KEY_ANNOTATIONS: {
                        KEY_TITLE: operation_id_to_title(entry.tool.name),
                        hint: True,
                    },
                }
            )
        return {"tools": tools}

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute the operation behind ``name``.

        Raises:
            MethodNotFoundError: ``name`` is not in the catalogue.
        """
        entry = self.catalogue.get(name)
        if entry is None:
            raise MethodNotFoundError(name, self.tool_names)

        recovered = recover_arguments(arguments) if arguments else {}

        try:
            response = await self.client.execute_operation(entry, recovered)
        except HttpClientError as e:
            logger.error(f"Error in tool call {name}: {e}")
            return format_text_result(error_payload(e))

        return format_text_result(response.data)
