#!/usr/bin/env python3
# src/openapi_mcp_server/client/__init__.py
"""HTTP execution of OpenAPI operations."""

from .http_client import HttpClient, HttpClientError, HttpResponse, get_content_type, pick_base_url

__all__ = ["HttpClient", "HttpClientError", "HttpResponse", "get_content_type", "pick_base_url"]
