"""
Command-line entry point.

Usage:
    pubky-mcp                 # stdio transport (local clients like Cursor)
    pubky-mcp stdio
    pubky-mcp http --port 3000
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from mcp.server.stdio import stdio_server

from .config import DATA_ROOT, configure_logging, get_host, get_port
from .dispatcher import ProtocolDispatcher
from .factory import create_dispatcher, create_resolver, verify_bundled_resources
from .transport import StdioTransport

logger = logging.getLogger(__name__)


def _startup() -> ProtocolDispatcher:
    logger.info("Pubky MCP Server starting...")
    logger.info(f"Data path: {DATA_ROOT}")
    resolver = create_resolver()
    verify_bundled_resources(resolver)
    dispatcher = create_dispatcher(resolver)
    logger.info(f"Serving {len(dispatcher.methods)} capability methods: resources, tools, prompts")
    return dispatcher


async def _serve_stdio(dispatcher: ProtocolDispatcher) -> StdioTransport:
    transport = StdioTransport(dispatcher)
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, transport.close)
            installed.append(sig)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    logger.info("Pubky MCP Server running on stdio")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await transport.serve(read_stream, write_stream)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
    return transport


def run_stdio() -> None:
    """Start the stdio transport."""
    dispatcher = _startup()
    asyncio.run(_serve_stdio(dispatcher))


def run_http(host: str, port: int) -> None:
    """Start the HTTP transport with uvicorn."""
    import uvicorn

    from .server import create_app

    app = create_app(_startup())
    logger.info(f"MCP endpoint: http://{host}:{port}/mcp")
    logger.info(f"Health endpoint: http://{host}:{port}/health")
    uvicorn.run(app, host=host, port=port, log_config=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pubky-mcp", description="Pubky MCP server")
    subparsers = parser.add_subparsers(dest="transport")
    subparsers.add_parser("stdio", help="Serve a single client over stdin/stdout (default)")
    http = subparsers.add_parser("http", help="Serve stateless MCP over HTTP")
    http.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
    http.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 3000)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        if args.transport == "http":
            run_http(args.host or get_host(), args.port or get_port())
        else:
            run_stdio()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
