#!/usr/bin/env python3
# src/openapi_mcp_server/__main__.py
"""Allow ``python -m openapi_mcp_server``."""

from .cli import main

if __name__ == "__main__":
    main()
