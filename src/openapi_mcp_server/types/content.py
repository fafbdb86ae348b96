#!/usr/bin/env python3
# src/openapi_mcp_server/types/content.py
"""
Content - Tool result content formatting with orjson
"""

from typing import Any

import orjson

from .base import content_to_dict, create_text_content


def to_json_text(data: Any) -> str:
    """Compact JSON text for a decoded API response."""
    return orjson.dumps(data, option=orjson.OPT_NON_STR_KEYS).decode()


def format_text_result(data: Any) -> dict[str, Any]:
    """Wrap ``data`` as a tool result with one JSON text content item."""
    return {"content": [content_to_dict(create_text_content(to_json_text(data)))]}


__all__ = ["format_text_result", "to_json_text"]
