#!/usr/bin/env python3
# src/openapi_mcp_server/cli/__init__.py
"""
CLI entry point for the OpenAPI MCP server.

Loads an OpenAPI document and serves its operations as MCP tools over stdio
or HTTP.
"""

import argparse
import logging
import sys

from ..config import ServerSettings
from ..config.constants import TRANSPORT_HTTP
from ..constants import LOG_LEVELS, PACKAGE_LOGGER
from ..errors import ConfigurationError
from ..server import OpenAPIMCPServer

logger = logging.getLogger(__name__)


def setup_logging(level: str = "warning", debug: bool = False) -> None:
    """Log to stderr so stdio mode keeps stdout for protocol traffic."""
    numeric_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--spec", default=None, help="Path or URL of the OpenAPI document (env: OPENAPI_SPEC_PATH)")
    parser.add_argument("--base-url", default=None, help="Override servers[0].url (env: OPENAPI_BASE_URL)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=list(LOG_LEVELS),
        help="Logging level (default: warning, env: MCP_LOG_LEVEL)",
    )


def _add_http_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default=None, help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: 3000, env: PORT)")
    parser.add_argument("--auth-token", default=None, help="Bearer token required by /mcp (env: AUTH_TOKEN)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-mcp-server",
        description="Expose the operations of an OpenAPI document as MCP tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve a local document over stdio (for MCP clients)
  openapi-mcp-server stdio --spec ./openapi.json

  # Serve over HTTP with a bearer token
  openapi-mcp-server http --spec https://example.com/openapi.yaml --port 3000 --auth-token s3cret

  # Let the environment decide
  OPENAPI_SPEC_PATH=./openapi.json MCP_TRANSPORT=http openapi-mcp-server auto

Environment Variables:
  OPENAPI_SPEC_PATH    Path or URL of the OpenAPI document
  OPENAPI_BASE_URL     Base URL override
  OPENAPI_MCP_HEADERS  JSON object of headers sent with every API request
  NOTION_TOKEN         Bearer token (adds Notion-Version) when no headers are set
  MCP_TRANSPORT        Force transport mode (stdio|http)
  MCP_STDIO            Set to 1 to force stdio mode
  USE_STDIO            Alternative to MCP_STDIO
  PORT                 HTTP port (default: 3000)
  AUTH_TOKEN           Bearer token protecting the HTTP transport
  MCP_LOG_LEVEL        Logging level (debug|info|warning|error|critical)
        """,
    )

    subparsers = parser.add_subparsers(dest="mode", help="Transport mode", required=True)

    stdio_parser = subparsers.add_parser("stdio", help="Run in stdio mode for MCP clients")
    _add_common_arguments(stdio_parser)

    http_parser = subparsers.add_parser("http", help="Run in HTTP mode")
    _add_common_arguments(http_parser)
    _add_http_arguments(http_parser)

    auto_parser = subparsers.add_parser("auto", help="Detect transport mode from the environment")
    _add_common_arguments(auto_parser)
    _add_http_arguments(auto_parser)

    return parser


def resolve_settings(args: argparse.Namespace, base: ServerSettings | None = None) -> ServerSettings:
    """Environment settings with command-line flags applied on top."""
    settings = base if base is not None else ServerSettings.from_env()
    transport = settings.transport if args.mode == "auto" else args.mode
    return settings.merged(
        spec_path=args.spec,
        base_url=args.base_url,
        transport=transport,
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        auth_token=getattr(args, "auth_token", None),
        log_level="debug" if args.debug else args.log_level,
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)
    setup_logging(level=settings.log_level, debug=args.debug)

    try:
        server = OpenAPIMCPServer.from_settings(settings)
    except ConfigurationError as e:
        logger.error(e.to_message())
        sys.exit(1)

    logger.info(f"Starting {server.server_info.name} in {settings.transport.upper()} mode...")
    server.run(
        transport=settings.transport,
        host=settings.host,
        port=settings.port,
        auth_token=settings.auth_token if settings.transport == TRANSPORT_HTTP else None,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
