#!/usr/bin/env python3
"""
Entry point for the FigJam MCP server.

Runs over stdio by default, or serves the MCP HTTP app with uvicorn.
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from figjam_mcp.config import HTTP_HOST, HTTP_PORT, LOG_LEVEL
from figjam_mcp.server import create_server, main


def cli() -> None:
    """Parse arguments and start the server."""
    parser = argparse.ArgumentParser(description="FigJam MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport to serve on (default: stdio)",
    )
    parser.add_argument("--host", default=HTTP_HOST, help=f"HTTP host (default: {HTTP_HOST})")
    parser.add_argument("--port", type=int, default=HTTP_PORT, help=f"HTTP port (default: {HTTP_PORT})")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default=LOG_LEVEL.lower(),
        help="Log level for the HTTP server",
    )
    args = parser.parse_args()

    if args.transport == "stdio":
        asyncio.run(main())
        return

    try:
        server = create_server()
        app = server.http_app()
        logging.info(f"Starting FigJam MCP server on http://{args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    except KeyboardInterrupt:
        logging.info("Server interrupted")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
