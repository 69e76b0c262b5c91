#!/usr/bin/env python3
"""
Entry point for the CHUK Notation MCP Server.

Parses the command line, points the preset loader at the project preset
directory, then runs the server over stdio or http.
"""

import argparse
import asyncio
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PRESETS_DIR_ENV = "CHUK_NOTATION_PRESETS_DIR"


def build_parser() -> argparse.ArgumentParser:
    """Command line options for the server."""
    parser = argparse.ArgumentParser(description="CHUK Notation MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--presets-dir",
        default=None,
        help="Project preset directory (default: ./presets)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main() -> None:
    """Run the server with the requested transport."""
    args = build_parser().parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.presets_dir:
        os.environ[PRESETS_DIR_ENV] = args.presets_dir

    # async_server reads the preset directory when it is imported
    from chuk_mcp_notation.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Notation MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Notation MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
