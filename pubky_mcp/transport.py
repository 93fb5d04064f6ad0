"""
MCP Transport Adapters

Bind the dispatcher's mcp server to a communication channel:
- StdioTransport: one long-lived duplex channel, closable from a signal
  handler before the process exits
- StatelessHttpTransport: ASGI endpoint over the SDK's streamable HTTP
  session manager in stateless mode, one short-lived server transport per
  HTTP request, so request ids from unrelated clients never share an id space
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi.responses import JSONResponse
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

from .dispatcher import ProtocolDispatcher
from .errors import McpError, TransportFault

logger = logging.getLogger(__name__)


def jsonrpc_error_response(error: McpError, status_code: int) -> JSONResponse:
    """A JSON-RPC error envelope for failures outside any request (no id to echo)."""
    return JSONResponse(
        status_code=status_code,
        content={"jsonrpc": "2.0", "id": None, "error": error.to_error()},
    )


# ============================================================================
# Stdio (single-client duplex)
# ============================================================================

class StdioTransport:
    """Serve one client over a read/write stream pair until EOF or close()."""

    name = "stdio"

    def __init__(self, dispatcher: ProtocolDispatcher):
        self._dispatcher = dispatcher
        self._task: Optional[asyncio.Future] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            logger.info("Closing stdio transport")
        self._closed = True
        if self._task is not None:
            self._task.cancel()

    async def serve(self, read_stream: Any, write_stream: Any) -> None:
        """
        Run the mcp server over the given streams.

        Returns when the client closes its end of the channel or when close()
        is called, e.g. from a SIGTERM handler.
        """
        if self._closed:
            return
        server = self._dispatcher.server
        self._task = asyncio.ensure_future(
            server.run(read_stream, write_stream, server.create_initialization_options())
        )
        try:
            await self._task
        except asyncio.CancelledError:
            # Cancelled by close(); anything else is the caller being cancelled
            if not self._closed:
                raise
        finally:
            self._closed = True
        logger.info("stdio channel closed")


# ============================================================================
# Stateless HTTP (one server transport per request)
# ============================================================================

class StatelessHttpTransport:
    """
    ASGI endpoint for the /mcp route.

    run() must be entered in the application's lifespan; the session manager
    task group has to be running before the first request arrives.
    """

    name = "http"

    def __init__(self, dispatcher: ProtocolDispatcher):
        self._manager = StreamableHTTPSessionManager(
            app=dispatcher.server,
            stateless=True,
            json_response=True,
        )
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        async with self._manager.run():
            self._running = True
            logger.info("Streamable HTTP transport started (stateless)")
            try:
                yield
            finally:
                self._running = False

    async def __call__(self, scope, receive, send) -> None:
        body = await _read_body(receive)
        if _has_null_id(body):
            response = jsonrpc_error_response(TransportFault("Invalid request: id must not be null"), 400)
            await response(scope, receive, send)
            return
        try:
            await self._manager.handle_request(scope, _replay(body, receive), send)
        except RuntimeError as e:
            # Session manager not started (lifespan not entered)
            logger.error(f"MCP request rejected: {e}")
            response = jsonrpc_error_response(McpError("MCP transport not running"), 503)
            await response(scope, receive, send)


async def _read_body(receive) -> bytes:
    chunks = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _replay(body: bytes, receive):
    """An ASGI receive callable that yields the already-consumed body once."""
    sent = False

    async def replay():
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _has_null_id(body: bytes) -> bool:
    # The SDK would accept {"id": null, "method": ...} as a notification
    try:
        message = json.loads(body)
    except ValueError:
        return False
    return isinstance(message, dict) and "id" in message and message["id"] is None
