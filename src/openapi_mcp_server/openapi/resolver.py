#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/resolver.py
"""
Resolver - local ``$ref`` pointer resolution

Resolves ``#/...`` JSON pointers against a single in-memory OpenAPI document.
Cycle detection is driven by the caller-supplied ``in_progress`` set, which
also acts as a memo of visited pointers for one top-level translation.
"""

import logging
from typing import Any

from ..errors import (
    CyclicReferenceError,
    ReferenceNotFoundError,
    SchemaReferenceError,
    UnsupportedReferenceError,
)
from .models import OpenAPIDocument

logger = logging.getLogger(__name__)

LOCAL_POINTER_PREFIX = "#/"
SCHEMA_POINTER_PREFIX = "#/components/schemas/"
DEFS_POINTER_PREFIX = "#/$defs/"


def is_reference(node: Any) -> bool:
    """True if ``node`` is a Reference Object."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def to_local_defs_pointer(pointer: str) -> str:
    """Rewrite ``#/components/schemas/<name>`` to ``#/$defs/<name>``; other pointers are returned unchanged."""
    if pointer.startswith(SCHEMA_POINTER_PREFIX):
        return DEFS_POINTER_PREFIX + pointer[len(SCHEMA_POINTER_PREFIX) :]
    return pointer


def _unescape(segment: str) -> str:
    # RFC 6901: ~1 before ~0
    return segment.replace("~1", "/").replace("~0", "~")


class SchemaResolver:
    """Resolve local pointers inside one OpenAPI document."""

    def __init__(self, document: OpenAPIDocument):
        self.document = document

    def resolve(self, pointer: str, in_progress: set[str]) -> Any:
        """Return the node ``pointer`` addresses.

        Raises:
            UnsupportedReferenceError: pointer is not a local ``#/`` pointer.
            CyclicReferenceError: pointer is already in ``in_progress``.
            ReferenceNotFoundError: a segment is missing from the document.
        """
        if not pointer.startswith(LOCAL_POINTER_PREFIX):
            raise UnsupportedReferenceError(pointer)
        if pointer in in_progress:
            raise CyclicReferenceError(pointer)

        current: Any = self.document
        for raw in pointer[len(LOCAL_POINTER_PREFIX) :].split("/"):
            segment = _unescape(raw)
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                raise ReferenceNotFoundError(pointer, segment)
            if current is None:
                raise ReferenceNotFoundError(pointer, segment)

        in_progress.add(pointer)
        return current

    def resolve_object(self, node: Any, kind: str) -> dict[str, Any] | None:
        """Dereference a parameter, request body or response node (inline mode).

        Non-reference nodes are returned as-is. Reference failures are logged and
        yield None so one broken component never aborts the catalogue build.
        """
        if not is_reference(node):
            return node if isinstance(node, dict) else None

        seen: set[str] = set()
        while is_reference(node):
            try:
                node = self.resolve(node["$ref"], seen)
            except SchemaReferenceError as e:
                logger.warning(f"Failed to resolve {kind}: {e}")
                return None
        return node if isinstance(node, dict) else None
