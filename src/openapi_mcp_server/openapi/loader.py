#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/loader.py
"""
Loader - read an OpenAPI document from a file, URL or string.

JSON is tried first (orjson); anything that does not parse as JSON is read
as YAML.
"""

import logging
from pathlib import Path

import httpx
import orjson
import yaml

from ..constants import DEFAULT_HTTP_TIMEOUT
from ..errors import ConfigurationError
from .models import OpenAPIDocument

logger = logging.getLogger(__name__)


def _is_literal(text: str) -> bool:
    # File paths and URLs are single-line; documents are objects or multi-line YAML
    return "\n" in text or text.lstrip().startswith("{")


def parse_document(text: str | bytes) -> OpenAPIDocument:
    """Parse JSON or YAML text into a document dict."""
    try:
        document = orjson.loads(text)
    except orjson.JSONDecodeError:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"OpenAPI document is neither JSON nor YAML: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"OpenAPI document must be a mapping, got {type(document).__name__}")
    if "paths" not in document:
        logger.warning("OpenAPI document declares no paths; the tool catalogue will be empty")
    return document


def load_document(source: str | Path, timeout: float = DEFAULT_HTTP_TIMEOUT) -> OpenAPIDocument:
    """Load a document from an ``http(s)`` URL, a file path or literal text."""
    source_text = str(source)

    if source_text.startswith(("http://", "https://")):
        logger.info(f"Fetching OpenAPI document from {source_text}")
        try:
            response = httpx.get(source_text, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ConfigurationError(f"Failed to fetch OpenAPI document from {source_text}: {e}") from e
        return parse_document(response.content)

    if not isinstance(source, Path) and _is_literal(source_text):
        return parse_document(source_text)

    path = Path(source_text).expanduser()
    if not path.is_file():
        raise ConfigurationError(
            f"OpenAPI document not found: {source_text}",
            suggestion="Pass --spec with a file path or URL, or set OPENAPI_SPEC_PATH",
        )
    logger.debug(f"Reading OpenAPI document from {path}")
    return parse_document(path.read_bytes())
