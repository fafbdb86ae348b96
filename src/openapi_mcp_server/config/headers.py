#!/usr/bin/env python3
# src/openapi_mcp_server/config/headers.py
"""
Upstream request headers from the environment.

``OPENAPI_MCP_HEADERS`` (a JSON object) wins when it parses to a non-empty
object. Otherwise ``NOTION_TOKEN`` yields a bearer ``Authorization`` header
paired with the pinned ``Notion-Version``. Otherwise no headers are sent.
"""

import logging
import os
from collections.abc import Mapping

import orjson

from ..constants import HEADER_AUTHORIZATION
from .constants import ENV_NOTION_TOKEN, ENV_OPENAPI_MCP_HEADERS, NOTION_API_VERSION, NOTION_VERSION_HEADER

logger = logging.getLogger(__name__)


def parse_headers_from_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the headers to send with every upstream request."""
    env = os.environ if environ is None else environ

    headers_json = env.get(ENV_OPENAPI_MCP_HEADERS)
    if headers_json:
        try:
            headers = orjson.loads(headers_json)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Failed to parse {ENV_OPENAPI_MCP_HEADERS} environment variable: {e}")
        else:
            if not isinstance(headers, dict):
                logger.warning(
                    f"{ENV_OPENAPI_MCP_HEADERS} environment variable must be a JSON object, got {type(headers).__name__}"
                )
            elif headers:
                return {str(k): str(v) for k, v in headers.items()}

    notion_token = env.get(ENV_NOTION_TOKEN)
    if notion_token:
        return {
            HEADER_AUTHORIZATION: f"Bearer {notion_token}",
            NOTION_VERSION_HEADER: NOTION_API_VERSION,
        }

    return {}
