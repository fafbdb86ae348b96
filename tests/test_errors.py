"""Tests for structured error types."""

from openapi_mcp_server.constants import JsonRpcError
from openapi_mcp_server.errors import (
    ConfigurationError,
    CyclicReferenceError,
    MCPError,
    MethodNotFoundError,
    OperationMissingIdentifierError,
    ReferenceNotFoundError,
    SchemaReferenceError,
    UnsupportedReferenceError,
    suggest_tool_name,
)


class TestMCPError:
    """Tests for MCPError formatting."""

    def test_defaults(self):
        error = MCPError("boom")
        assert error.code == JsonRpcError.INTERNAL_ERROR
        assert error.to_message() == "boom"

    def test_suggestion_and_docs(self):
        error = ConfigurationError("bad", suggestion="fix it", docs_url="https://example.com/docs")
        assert error.to_message() == "bad | Suggestion: fix it | Docs: https://example.com/docs"


class TestReferenceErrors:
    """Tests for reference resolution errors."""

    def test_hierarchy(self):
        for error in (
            UnsupportedReferenceError("other.json#/x"),
            CyclicReferenceError("#/components/schemas/A"),
            ReferenceNotFoundError("#/components/schemas/B", "B"),
        ):
            assert isinstance(error, SchemaReferenceError)

    def test_not_found_message(self):
        error = ReferenceNotFoundError("#/components/schemas/B", "B")
        assert error.pointer == "#/components/schemas/B"
        assert error.segment == "B"
        assert "missing segment 'B'" in str(error)

    def test_missing_identifier(self):
        assert str(OperationMissingIdentifierError("get", "/x")) == "Operation without operationId at get /x"


class TestMethodNotFound:
    """Tests for MethodNotFoundError."""

    def test_message_and_code(self):
        error = MethodNotFoundError("ghost")
        assert str(error) == "Method ghost not found"
        assert error.code == JsonRpcError.METHOD_NOT_FOUND
        assert error.suggestion is None

    def test_suggestion(self):
        error = MethodNotFoundError("API-listPet", ["API-listPets", "API-createPet"])
        assert error.suggestion == "Did you mean 'API-listPets'?"

    def test_no_close_match(self):
        assert suggest_tool_name("zzz", ["API-listPets"]) is None
