#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/models.py
"""
Models - Tool catalogue data types

Plain dataclasses describing the artifacts produced from an OpenAPI document:
tool definitions, operation lookup entries and the catalogue that holds both.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..constants import TOOL_NAMESPACE_SEPARATOR

OpenAPIDocument = dict[str, Any]
SchemaNode = dict[str, Any]


class HttpMethod(str, Enum):
    """HTTP verbs recognized as OpenAPI operations."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"

    @classmethod
    def parse(cls, value: str) -> "HttpMethod | None":
        """Return the member for ``value`` (case-insensitive), or None for other path item keys."""
        try:
            return cls(value.lower())
        except ValueError:
            return None

    @property
    def is_read_only(self) -> bool:
        return self is HttpMethod.GET


@dataclass
class ToolDefinition:
    """One tool exposed to the agent."""

    name: str
    description: str
    input_schema: SchemaNode
    return_schema: SchemaNode | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.return_schema is not None:
            result["returnSchema"] = self.return_schema
        return result


@dataclass(frozen=True)
class OperationEntry:
    """The operation a tool name maps back to at call time."""

    method: HttpMethod
    path: str
    operation: MappingProxyType  # read-only view of the operation object
    tool: ToolDefinition

    @property
    def operation_id(self) -> str:
        return str(self.operation.get("operationId", ""))

    def as_dict(self) -> dict[str, Any]:
        """Return the operation object augmented with ``method`` and ``path``."""
        return {**self.operation, "method": self.method.value, "path": self.path}


@dataclass
class Catalogue:
    """Tool definitions plus the name-to-operation lookup, built in one pass."""

    namespace: str | None
    tools: list[ToolDefinition] = field(default_factory=list)
    lookup: dict[str, OperationEntry] = field(default_factory=dict)

    def external_name(self, tool: ToolDefinition) -> str:
        """Name under which ``tool`` is listed and looked up."""
        if self.namespace:
            return f"{self.namespace}{TOOL_NAMESPACE_SEPARATOR}{tool.name}"
        return tool.name

    def get(self, name: str) -> OperationEntry | None:
        return self.lookup.get(name)

    def __len__(self) -> int:
        return len(self.tools)
