#!/usr/bin/env python3
# src/openapi_mcp_server/config/__init__.py
"""
Configuration package - environment-driven server settings.
"""

from .headers import parse_headers_from_env
from .settings import ServerSettings, detect_transport

__all__ = ["ServerSettings", "detect_transport", "parse_headers_from_env"]
