#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/translator.py
"""
Translator - OpenAPI schema objects to tool input/output schemas

Converts OpenAPI schema nodes (including ``$ref`` indirection, cyclic type
graphs, ``oneOf``/``anyOf``/``allOf`` composition and binary upload fields)
into self-contained JSON-Schema-shaped dicts whose references all point into
a local ``$defs`` map.

Two reference modes exist:

* preserved (default): ``#/components/schemas/<name>`` becomes
  ``#/$defs/<name>`` and is left unexpanded, which is what lets cyclic types
  translate in linear time.
* inlined: the pointer is dereferenced and the target translated in place.
  Each pointer is translated once per translator; the pointer is marked as
  claimed before descending, so re-entering a schema that is still being
  translated yields a local ``$ref`` instead of recursing forever.

Reference failures never abort translation: a warning is logged and a
placeholder ``$ref`` schema is returned.
"""

import logging
from typing import Any

from ..errors import SchemaReferenceError
from .models import OpenAPIDocument, SchemaNode
from .resolver import SCHEMA_POINTER_PREFIX, SchemaResolver, is_reference, to_local_defs_pointer

logger = logging.getLogger(__name__)

BINARY_FORMAT = "binary"
FILE_PATH_FORMAT = "uri-reference"
FILE_PATH_HINT = "absolute paths to local files"

COMPOSITION_KEYWORDS = ("oneOf", "anyOf", "allOf")

def has_type(schema: SchemaNode, type_name: str) -> bool:
    """Check ``type`` for a plain string or an OpenAPI 3.1 type list."""
    declared = schema.get("type")
    if isinstance(declared, list):
        return type_name in declared
    return bool(declared == type_name)


class SchemaTranslator:
    """Translate OpenAPI schema nodes for one document."""

    def __init__(self, document: OpenAPIDocument, resolver: SchemaResolver | None = None):
        self.document = document
        self.resolver = resolver or SchemaResolver(document)
        self._cache: dict[tuple[str, bool], SchemaNode] = {}
        # Keys whose translation has started; finished ones are also in _cache
        self._claimed: set[tuple[str, bool]] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def translate(
        self,
        node: Any,
        in_progress: set[str] | None = None,
        resolve_refs_inline: bool = False,
    ) -> SchemaNode:
        """Translate one schema node (or Reference Object).

        Args:
            node: OpenAPI schema object or ``{"$ref": ...}``.
            in_progress: Pointers resolved so far in this top-level call.
            resolve_refs_inline: Dereference component schemas instead of
                emitting local ``$ref`` nodes.

        Returns:
            Tool schema fragment. Always a dict, never raises on bad references.
        """
        if in_progress is None:
            in_progress = set()
        if not isinstance(node, dict):
            return {}
        if is_reference(node):
            return self._translate_reference(node, in_progress, resolve_refs_inline)
        return self._translate_schema(node, in_progress, resolve_refs_inline)

    def translate_components(self) -> dict[str, SchemaNode]:
        """Translate every ``components.schemas`` entry into a ``$defs`` map."""
        schemas = (self.document.get("components") or {}).get("schemas") or {}
        return {name: self.translate(schema, set()) for name, schema in schemas.items()}

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _translate_reference(self, node: SchemaNode, in_progress: set[str], inline: bool) -> SchemaNode:
        pointer: str = node["$ref"]
        description = node.get("description")

        if not inline:
            if pointer.startswith(SCHEMA_POINTER_PREFIX):
                return self._local_ref(pointer, description)
            logger.warning(f"Attempting to resolve ref {pointer} not found in components collection.")

        key = (pointer, inline)
        if key in self._cache:
            return self._with_site_description(self._cache[key], description)
        if key in self._claimed:
            return self._local_ref(pointer, description)

        try:
            resolved = self.resolver.resolve(pointer, in_progress)
        except SchemaReferenceError as e:
            logger.warning(f"Failed to resolve ref {pointer}: {e}")
            return {"$ref": to_local_defs_pointer(pointer), "description": description or ""}

        self._claimed.add(key)
        converted = self.translate(resolved, in_progress, inline)
        self._cache[key] = converted
        return self._with_site_description(converted, description)

    @staticmethod
    def _local_ref(pointer: str, description: str | None) -> SchemaNode:
        result: SchemaNode = {"$ref": to_local_defs_pointer(pointer)}
        if description is not None:
            result["description"] = description
        return result

    @staticmethod
    def _with_site_description(schema: SchemaNode, description: str | None) -> SchemaNode:
        # Shallow copy: callers decorate the top level (descriptions, fallbacks)
        result = dict(schema)
        if description:
            result["description"] = description
        return result

    # ------------------------------------------------------------------
    # Inline schemas
    # ------------------------------------------------------------------

    def _translate_schema(self, schema: SchemaNode, in_progress: set[str], inline: bool) -> SchemaNode:
        result: SchemaNode = {}

        if "type" in schema:
            result["type"] = schema["type"]

        description = schema.get("description")
        if schema.get("format") == BINARY_FORMAT:
            # The calling side cannot send raw bytes, so uploads become file paths
            result["format"] = FILE_PATH_FORMAT
            result["description"] = f"{description} ({FILE_PATH_HINT})" if description else FILE_PATH_HINT
        else:
            if schema.get("format"):
                result["format"] = schema["format"]
            if description:
                result["description"] = description

        if schema.get("enum") is not None:
            result["enum"] = list(schema["enum"])
        if "const" in schema:
            result["const"] = schema["const"]
        if "default" in schema:
            result["default"] = schema["default"]

        if has_type(schema, "object"):
            self._translate_object(schema, result, in_progress, inline)

        if has_type(schema, "array") and "items" in schema:
            result["items"] = self.translate(schema["items"], in_progress, inline)

        for keyword in COMPOSITION_KEYWORDS:
            members = schema.get(keyword)
            if isinstance(members, list):
                result[keyword] = [self.translate(member, in_progress, inline) for member in members]

        return result

    def _translate_object(self, schema: SchemaNode, result: SchemaNode, in_progress: set[str], inline: bool) -> None:
        properties = schema.get("properties")
        if isinstance(properties, dict):
            result["properties"] = {
                name: self.translate(prop, in_progress, inline) for name, prop in properties.items()
            }
        if schema.get("required"):
            result["required"] = list(schema["required"])

        additional = schema.get("additionalProperties", True)
        if additional is True:
            result["additionalProperties"] = True
        elif isinstance(additional, dict):
            result["additionalProperties"] = self.translate(additional, in_progress, inline)
        else:
            result["additionalProperties"] = False
