#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/synthesizer.py
"""
Synthesizer - OpenAPI operations to MCP tools

Walks every path and HTTP method of an OpenAPI document and turns each
operation into a tool definition: a merged input schema (parameters plus
request body, with a string-fallback escape on complex values), a description
listing error responses, an optional return schema and a unique,
length-bounded name. The tool list and the name-to-operation lookup come out
of the same pass, so listed names and lookup keys can never drift apart.
"""

import copy
import logging
from collections.abc import Iterator
from types import MappingProxyType
from typing import Any

from ..constants import (
    CONTENT_TYPE_JPEG,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_MULTIPART,
    CONTENT_TYPE_PNG,
    DEFAULT_TOOL_NAMESPACE,
    DESCRIPTION_PREFIXES,
    MAX_TOOL_NAME_LENGTH,
    TOOL_NAME_PATTERN,
    TOOL_NAME_SUFFIX_WIDTH,
    TOOL_NAMESPACE_SEPARATOR,
)
from ..errors import ConfigurationError, OperationMissingIdentifierError
from .models import Catalogue, HttpMethod, OpenAPIDocument, OperationEntry, SchemaNode, ToolDefinition
from .resolver import SchemaResolver, is_reference
from .translator import COMPOSITION_KEYWORDS, SchemaTranslator, has_type

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = ("200", "201", "202", "204")
IMAGE_CONTENT_TYPES = (CONTENT_TYPE_PNG, CONTENT_TYPE_JPEG)


# ============================================================================
# Helpers
# ============================================================================


def with_string_fallback(schema: SchemaNode) -> SchemaNode:
    """Let a complex schema also accept a JSON-encoded string.

    Some MCP clients serialize nested values as JSON text before invoking a
    tool. The schema accepts both shapes; ``recovery.recover_arguments`` turns
    the text back into structure at call time.
    """
    is_complex = has_type(schema, "object") or "$ref" in schema or any(k in schema for k in COMPOSITION_KEYWORDS)
    if is_complex:
        return {"anyOf": [schema, {"type": "string"}]}

    if has_type(schema, "array") and schema.get("items"):
        return {
            **schema,
            "items": {
                "anyOf": [
                    schema["items"],
                    {"type": "string"},
                    {"type": "object", "additionalProperties": True},
                ]
            },
        }

    return schema


def json_media(content: dict[str, Any]) -> dict[str, Any] | None:
    """Pick the JSON media type object from a ``content`` map."""
    if CONTENT_TYPE_JSON in content:
        return content[CONTENT_TYPE_JSON]
    for media_type, media in content.items():
        base = media_type.split(";", 1)[0].strip()
        if base == CONTENT_TYPE_JSON or base.endswith("+json"):
            return media
    return None


def _response_for(responses: dict[Any, Any], code: str) -> Any:
    # YAML documents may key responses by int
    if code in responses:
        return responses[code]
    return responses.get(int(code))


class ToolNamer:
    """Assign unique, length-bounded tool names for one catalogue build.

    Names that fit and are unused pass through. Otherwise the name is
    truncated and ``-NNNN`` appended, where ``NNNN`` is a zero-padded counter
    that only ever grows during the build.
    """

    def __init__(self, max_length: int = MAX_TOOL_NAME_LENGTH):
        self.max_length = max_length
        self.counter = 0
        self.assigned: set[str] = set()

    def assign(self, raw_name: str) -> str:
        name = raw_name
        if len(name) > self.max_length or name in self.assigned:
            while True:
                self.counter += 1
                suffix = str(self.counter).zfill(TOOL_NAME_SUFFIX_WIDTH)
                name = f"{raw_name[: self.max_length - len(suffix) - 1]}-{suffix}"
                if name not in self.assigned:
                    break
            logger.debug(f"Renamed tool {raw_name!r} to {name!r}")
        self.assigned.add(name)
        return name


# ============================================================================
# Synthesizer
# ============================================================================


class ToolSynthesizer:
    """Build the MCP tool catalogue for one OpenAPI document."""

    def __init__(
        self,
        document: OpenAPIDocument,
        namespace: str | None = DEFAULT_TOOL_NAMESPACE,
        description_prefix: str | None = None,
    ):
        self.document = document
        self.namespace = namespace
        if self.max_name_length <= TOOL_NAME_SUFFIX_WIDTH + 1:
            raise ConfigurationError(
                f"Tool namespace {namespace!r} is too long: tool names are limited to {MAX_TOOL_NAME_LENGTH} characters",
                suggestion="Use a shorter namespace",
            )
        self.resolver = SchemaResolver(document)
        self.translator = SchemaTranslator(document, self.resolver)
        if description_prefix is None:
            title = (document.get("info") or {}).get("title")
            description_prefix = DESCRIPTION_PREFIXES.get(title, "") if isinstance(title, str) else ""
        self.description_prefix = description_prefix
        self._components: dict[str, SchemaNode] | None = None

    @property
    def components(self) -> dict[str, SchemaNode]:
        """Translated component schemas, computed once per synthesizer."""
        if self._components is None:
            self._components = self.translator.translate_components()
        return self._components

    @property
    def max_name_length(self) -> int:
        """Name budget left once the namespace prefix is added."""
        if self.namespace:
            return MAX_TOOL_NAME_LENGTH - len(self.namespace) - len(TOOL_NAMESPACE_SEPARATOR)
        return MAX_TOOL_NAME_LENGTH

    def iter_operations(self) -> Iterator[tuple[str, HttpMethod, dict[str, Any], dict[str, Any]]]:
        """Yield ``(path, method, path_item, operation)`` for every operation verb."""
        for path, path_item in (self.document.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            for key, operation in path_item.items():
                method = HttpMethod.parse(key)
                if method is None or not isinstance(operation, dict):
                    continue
                yield path, method, path_item, operation

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    def build(self) -> Catalogue:
        """Build tool definitions and the name-to-operation lookup in one pass."""
        catalogue = Catalogue(namespace=self.namespace)
        namer = ToolNamer(self.max_name_length)

        for path, method, path_item, operation in self.iter_operations():
            try:
                tool = self.convert_operation(operation, method, path, path_item)
            except OperationMissingIdentifierError as e:
                logger.warning(f"{e}; skipping")
                continue

            tool.name = namer.assign(tool.name)
            tool.description = self.prefix_description(tool.description)
            external_name = catalogue.external_name(tool)
            if not TOOL_NAME_PATTERN.fullmatch(external_name):
                logger.warning(f"Tool name {external_name!r} has characters some MCP clients reject")
            catalogue.tools.append(tool)
            catalogue.lookup[external_name] = OperationEntry(
                method=method,
                path=path,
                operation=MappingProxyType(dict(operation)),
                tool=tool,
            )

        logger.debug(f"Built {len(catalogue)} tools from {len(self.document.get('paths') or {})} paths")
        return catalogue

    def convert_operation(
        self,
        operation: dict[str, Any],
        method: HttpMethod,
        path: str,
        path_item: dict[str, Any] | None = None,
    ) -> ToolDefinition:
        """Convert one operation into an (unprefixed, unrenamed) tool definition."""
        operation_id = operation.get("operationId")
        if not operation_id:
            raise OperationMissingIdentifierError(method.value, path)

        input_schema = self._empty_input_schema()
        properties = input_schema["properties"]
        required = input_schema["required"]

        for param in self._merged_parameters(path_item, operation):
            properties[param["name"]] = with_string_fallback(self._parameter_schema(param))
            if param.get("required"):
                required.append(param["name"])

        self._merge_request_body(operation, properties, required)

        return ToolDefinition(
            name=str(operation_id),
            description=self.build_description(operation),
            input_schema=input_schema,
            return_schema=self.extract_return_schema(operation.get("responses")),
        )

    # ------------------------------------------------------------------
    # Input schema
    # ------------------------------------------------------------------

    def _empty_input_schema(self) -> SchemaNode:
        return {
            "$defs": copy.deepcopy(self.components),
            "type": "object",
            "properties": {},
            "required": [],
        }

    def _merged_parameters(self, path_item: dict[str, Any] | None, operation: dict[str, Any]) -> list[dict[str, Any]]:
        """Resolved parameters; operation-level entries override path-level ones by ``(in, name)``."""
        merged: dict[tuple[Any, str], dict[str, Any]] = {}
        for source in ((path_item or {}).get("parameters") or [], operation.get("parameters") or []):
            for raw in source:
                param = self.resolver.resolve_object(raw, "parameter")
                if not param or not param.get("name") or "schema" not in param:
                    continue
                merged[(param.get("in"), param["name"])] = param
        return list(merged.values())

    def _parameter_schema(self, param: dict[str, Any]) -> SchemaNode:
        schema = self.translator.translate(param["schema"], set())
        if param.get("description"):
            schema["description"] = param["description"]
        return schema

    def _merge_request_body(self, operation: dict[str, Any], properties: SchemaNode, required: list[str]) -> None:
        if not operation.get("requestBody"):
            return
        body = self.resolver.resolve_object(operation["requestBody"], "request body")
        content = (body or {}).get("content") or {}

        form = (content.get(CONTENT_TYPE_MULTIPART) or {}).get("schema")
        if form is not None:
            form_schema = self._translate_top_level(form)
            if has_type(form_schema, "object") and form_schema.get("properties"):
                for name, prop in form_schema["properties"].items():
                    properties[name] = with_string_fallback(prop)
                required.extend(form_schema.get("required") or [])
            return

        media = json_media(content)
        if media is None or media.get("schema") is None:
            return
        body_schema = self.translator.translate(media["schema"], set())
        if has_type(body_schema, "object") and body_schema.get("properties"):
            for name, prop in body_schema["properties"].items():
                properties[name] = with_string_fallback(prop)
            required.extend(body_schema.get("required") or [])
        else:
            properties["body"] = with_string_fallback(body_schema)
            required.append("body")

    def _translate_top_level(self, schema: Any) -> SchemaNode:
        """Translate ``schema``, dereferencing a top-level ``$ref`` one level deep.

        Nested references stay local ``$ref`` nodes into ``$defs``.
        """
        if not is_reference(schema):
            return self.translator.translate(schema, set())
        resolved = self.resolver.resolve_object(schema, "schema")
        if resolved is None:
            return self.translator.translate(schema, set())
        result = self.translator.translate(resolved, set())
        if schema.get("description"):
            result["description"] = schema["description"]
        return result

    # ------------------------------------------------------------------
    # Description and return schema
    # ------------------------------------------------------------------

    def build_description(self, operation: dict[str, Any]) -> str:
        """Summary (or description) followed by the operation's error responses."""
        description = operation.get("summary") or operation.get("description") or ""

        error_lines = []
        for code, response in (operation.get("responses") or {}).items():
            code = str(code)
            if code.startswith(("4", "5")):
                resolved = self.resolver.resolve_object(response, "response") or {}
                error_lines.append(f"{code}: {resolved.get('description') or ''}")

        if error_lines:
            description += "\nError Responses:\n" + "\n".join(error_lines)
        return str(description)

    def prefix_description(self, description: str) -> str:
        return f"{self.description_prefix}{description}" if self.description_prefix else description

    def extract_return_schema(self, responses: dict[Any, Any] | None) -> SchemaNode | None:
        """Schema of the first present 200/201/202/204 response, if any."""
        if not responses:
            return None

        success = None
        for code in SUCCESS_STATUS_CODES:
            success = _response_for(responses, code)
            if success is not None:
                break
        if success is None:
            return None

        response = self.resolver.resolve_object(success, "response")
        if not response or not response.get("content"):
            return None
        content = response["content"]
        response_description = response.get("description") or ""

        media = json_media(content)
        if media is not None and media.get("schema") is not None:
            schema = self._translate_top_level(media["schema"])
            schema["$defs"] = copy.deepcopy(self.components)
            if response_description and not schema.get("description"):
                schema["description"] = response_description
            return schema

        if any(image in content for image in IMAGE_CONTENT_TYPES):
            return {"type": "string", "format": "binary", "description": response_description}

        return {"type": "string", "description": response_description}

    # ------------------------------------------------------------------
    # Other tool formats
    # ------------------------------------------------------------------

    def convert_operation_to_json_schema(
        self, operation: dict[str, Any], path_item: dict[str, Any] | None = None
    ) -> SchemaNode:
        """Plain parameter schema: parameters plus JSON object body properties, no fallbacks."""
        schema = self._empty_input_schema()
        for param in self._merged_parameters(path_item, operation):
            schema["properties"][param["name"]] = self._parameter_schema(param)
            if param.get("required"):
                schema["required"].append(param["name"])

        if operation.get("requestBody"):
            body = self.resolver.resolve_object(operation["requestBody"], "request body")
            media = json_media((body or {}).get("content") or {})
            if media is not None and media.get("schema") is not None:
                body_schema = self.translator.translate(media["schema"], set())
                if has_type(body_schema, "object") and body_schema.get("properties"):
                    schema["properties"].update(body_schema["properties"])
                    schema["required"].extend(body_schema.get("required") or [])
        return schema

    def _iter_named_operations(self) -> Iterator[tuple[dict[str, Any], dict[str, Any]]]:
        for path, method, path_item, operation in self.iter_operations():
            if not operation.get("operationId"):
                logger.warning(f"{OperationMissingIdentifierError(method.value, path)}; skipping")
                continue
            yield path_item, operation

    def _plain_description(self, operation: dict[str, Any]) -> str:
        return self.prefix_description(operation.get("summary") or operation.get("description") or "")

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """Tools in OpenAI chat-completions ``function`` format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": operation["operationId"],
                    "description": self._plain_description(operation),
                    "parameters": self.convert_operation_to_json_schema(operation, path_item),
                },
            }
            for path_item, operation in self._iter_named_operations()
        ]

    def to_anthropic_tools(self) -> list[dict[str, Any]]:
        """Tools in Anthropic messages ``input_schema`` format."""
        return [
            {
                "name": operation["operationId"],
                "description": self._plain_description(operation),
                "input_schema": self.convert_operation_to_json_schema(operation, path_item),
            }
            for path_item, operation in self._iter_named_operations()
        ]
