"""
Structured error types for the OpenAPI MCP server.

Translation-time errors (reference failures, unnamed operations) are always
recovered locally with a logged warning. Call-time errors either surface as a
rejected call (unknown tool) or are folded into a structured tool result
(HTTP execution failures, see ``client.http_client.HttpClientError``).
"""

from difflib import get_close_matches

from .constants import JsonRpcError


class MCPError(Exception):
    """Structured MCP error with fix suggestions."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        suggestion: str | None = None,
        docs_url: str | None = None,
    ):
        self.code = code
        self.suggestion = suggestion
        self.docs_url = docs_url
        super().__init__(message)

    def to_message(self) -> str:
        """Format the error with suggestion."""
        parts = [str(self)]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        if self.docs_url:
            parts.append(f"Docs: {self.docs_url}")
        return " | ".join(parts)


# ============================================================================
# Schema translation errors
# ============================================================================


class SchemaReferenceError(MCPError):
    """A ``$ref`` pointer could not be resolved."""

    def __init__(self, pointer: str, message: str):
        self.pointer = pointer
        super().__init__(message)


class UnsupportedReferenceError(SchemaReferenceError):
    """Pointer is not local to the document (does not start with ``#/``)."""

    def __init__(self, pointer: str):
        super().__init__(pointer, f"Unsupported reference {pointer}: only local '#/' pointers are resolved")


class CyclicReferenceError(SchemaReferenceError):
    """Pointer is already being resolved further up the call chain."""

    def __init__(self, pointer: str):
        super().__init__(pointer, f"Cyclic reference {pointer}")


class ReferenceNotFoundError(SchemaReferenceError):
    """A pointer segment does not exist in the document."""

    def __init__(self, pointer: str, segment: str):
        self.segment = segment
        super().__init__(pointer, f"Reference {pointer} not found (missing segment '{segment}')")


class OperationMissingIdentifierError(MCPError):
    """Operation has no ``operationId`` and cannot be turned into a tool."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"Operation without operationId at {method} {path}")


# ============================================================================
# Call-time errors
# ============================================================================


class MethodNotFoundError(MCPError):
    """Requested tool name is absent from the operation lookup."""

    def __init__(self, name: str, available_tools: list[str] | None = None):
        self.name = name
        suggestion = suggest_tool_name(name, available_tools or [])
        super().__init__(
            f"Method {name} not found",
            code=JsonRpcError.METHOD_NOT_FOUND,
            suggestion=f"Did you mean '{suggestion}'?" if suggestion else None,
        )


class ConfigurationError(MCPError):
    """Startup configuration is unusable (missing document, base URL, ...)."""


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching.

    Args:
        tool_name: The unknown tool name.
        available_tools: List of registered tool names.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None
