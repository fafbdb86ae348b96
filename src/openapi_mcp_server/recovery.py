#!/usr/bin/env python3
# src/openapi_mcp_server/recovery.py
"""
Recovery - repair double-serialized tool arguments

Some MCP clients JSON-encode nested object arguments before sending them, so
a tool that expects ``{"parent": {"page_id": "x"}}`` receives
``{"parent": "{\\"page_id\\": \\"x\\"}"}``. Input schemas advertise a string
alternative for complex values (see ``openapi.synthesizer.with_string_fallback``);
this module turns such strings back into structure before execution.
"""

from typing import Any

import orjson


def _looks_like_json_container(text: str) -> bool:
    trimmed = text.strip()
    return (trimmed.startswith("{") and trimmed.endswith("}")) or (trimmed.startswith("[") and trimmed.endswith("]"))


def _recover_string(text: str) -> Any:
    """Parse ``text`` as a JSON object or array, or return it unchanged."""
    if not _looks_like_json_container(text):
        return text
    try:
        parsed = orjson.loads(text)
    except orjson.JSONDecodeError:
        return text
    if isinstance(parsed, dict):
        return recover_arguments(parsed)
    if isinstance(parsed, list):
        # Parsed arrays are kept as-is, their elements are not repaired further
        return parsed
    return text


def recover_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``arguments`` with stringified JSON containers parsed.

    * String values that look like a JSON object or array (after trimming) and
      parse as one are replaced; parsed objects are recovered recursively.
    * List values are mapped element-wise with the same rule for string
      elements; other elements are left untouched.
    * Everything else, including strings that fail to parse, passes through.

    Text is decoded with orjson, so integers wider than 64 bits come back as
    floats, and text holding out-of-range numbers (``1e400``) or lone
    surrogate escapes does not parse and is kept as the original string.

    Never raises.
    """
    result: dict[str, Any] = {}
    for key, value in arguments.items():
        if isinstance(value, str):
            result[key] = _recover_string(value)
        elif isinstance(value, list):
            result[key] = [_recover_string(item) if isinstance(item, str) else item for item in value]
        else:
            result[key] = value
    return result
