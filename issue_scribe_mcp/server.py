#!/usr/bin/env python3
"""
MCP server exposing GitHub issue, pull request, comment, label and branch tools.

Runs over stdio by default; ``--transport sse`` serves the same MCP server over
Server-Sent Events with Starlette and uvicorn.
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

import structlog
import uvicorn
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Mount, Route

from .config import Config, ConfigurationError, load_config
from .github.client import GitHubClient
from .logging_config import configure_logging
from .tools.registry import ToolRegistry

logger = structlog.get_logger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8756


def create_server(registry: ToolRegistry, config: Config) -> Server:
    """Create the low-level MCP server and register its two handlers.

    Args:
        registry: Tool registry serving both requests
        config: Loaded configuration (server identity)
    """
    server = Server(config.mcp.server_name, version=config.mcp.version)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return registry.list_tools()

    # Arguments are validated by each tool's own model so that every
    # validation failure produces the same error envelope.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        return await registry.dispatch(name, arguments)

    return server


async def run_stdio(server: Server) -> None:
    """Serve MCP requests over standard input/output until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Server running on stdio", server=server.name)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_starlette_app(mcp_server: Server, *, debug: bool = False) -> Starlette:
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(
            request.scope, request.receive, request._send
        ) as streams:
            await mcp_server.run(
                streams[0], streams[1], mcp_server.create_initialization_options()
            )
        # Return empty response to avoid NoneType error
        return Response()

    return Starlette(
        debug=debug,
        routes=[
            Route("/sse", endpoint=handle_sse),
            Mount("/messages/", app=sse.handle_post_message),
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="issue-scribe-mcp",
        description="MCP server for GitHub issues, pull requests, labels and branches"
    )
    parser.add_argument("--transport", choices=["stdio", "sse"], default="stdio",
                        help="Transport to serve on (default: stdio)")
    parser.add_argument("--host", default=DEFAULT_HOST,
                        help=f"Host to bind for the sse transport (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                        help=f"Port to bind for the sse transport (default: {DEFAULT_PORT})")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging()

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error("Cannot start server", error=str(e))
        sys.exit(1)

    configure_logging(config.mcp.log_level)
    client = GitHubClient(config.github)
    try:
        registry = ToolRegistry(client, config.mcp)
        mcp_server = create_server(registry, config)

        if args.transport == "sse":
            logger.info("Server running on SSE", host=args.host, port=args.port,
                        sse=f"http://{args.host}:{args.port}/sse",
                        messages=f"http://{args.host}:{args.port}/messages/")
            uvicorn.run(create_starlette_app(mcp_server), host=args.host, port=args.port)
        else:
            asyncio.run(run_stdio(mcp_server))
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except Exception as e:
        logger.exception("Fatal error in server", error=str(e))
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
