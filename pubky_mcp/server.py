"""
MCP Server - FastAPI Application

Implements the HTTP surface of the Pubky MCP server:
- /mcp: MCP streamable HTTP endpoint (stateless, JSON responses)
- /api/*: REST mirror of resources, tools and prompts
- /health: static status

Both surfaces go through the same dispatcher. JSON-RPC errors are the
canonical shape; the REST mirror projects them onto HTTP status codes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import SERVER_NAME, __version__
from .dispatcher import ProtocolDispatcher
from .errors import InternalError, McpError, TransportFault
from .factory import create_dispatcher
from .models import (
    JsonRpcError,
    MCPError,
    PromptGetResponse,
    PromptListResponse,
    ResourceListResponse,
    ResourceReadResponse,
    ToolCallResponse,
    ToolListResponse,
)
from .transport import StatelessHttpTransport, jsonrpc_error_response

logger = logging.getLogger(__name__)


def _rest_error(error: McpError) -> JSONResponse:
    return JSONResponse(
        status_code=error.http_status,
        content=MCPError(error=JsonRpcError(**error.to_error())).model_dump(exclude_none=True),
    )


def create_app(dispatcher: Optional[ProtocolDispatcher] = None) -> FastAPI:
    """
    Create the FastAPI application around one shared dispatcher.

    Args:
        dispatcher: Dispatcher to serve; defaults to one over the bundled content

    Returns:
        Configured FastAPI app
    """
    dispatcher = dispatcher or create_dispatcher()
    transport = StatelessHttpTransport(dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with transport.run():
            yield

    app = FastAPI(
        title="Pubky MCP Server",
        description="Model Context Protocol server for the Pubky ecosystem: docs, specs, examples and dev tools",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher
    app.state.transport = transport

    # MCP clients connect from anywhere
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Content-Type", "mcp-session-id", "mcp-protocol-version"],
        expose_headers=["Mcp-Session-Id"],
    )

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.exception_handler(McpError)
    async def mcp_error_handler(request: Request, exc: McpError):
        """Project protocol errors onto HTTP status codes."""
        return _rest_error(exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions without leaking details."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _rest_error(InternalError())

    # ========================================================================
    # Health Check
    # ========================================================================

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": SERVER_NAME,
            "version": __version__
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Pubky MCP Server",
            "version": __version__,
            "protocol": "Model Context Protocol",
            "description": "Pubky Core, Pkarr, Pkdns and Nexus documentation, specs, examples and dev tools",
            "endpoints": {
                "health": "/health",
                "mcp": "POST /mcp",
                "resources": {
                    "list": "GET /api/resources",
                    "get": "GET /api/resources/{uri}"
                },
                "tools": {
                    "list": "GET /api/tools",
                    "execute": "POST /api/tools/{name} (body: { arguments: {...} })"
                },
                "prompts": {
                    "list": "GET /api/prompts",
                    "get": "POST /api/prompts/{name} (body: { arguments: {...} })"
                },
                "docs": "/docs"
            }
        }

    # ========================================================================
    # JSON-RPC Tunnel
    # ========================================================================

    @app.api_route("/mcp", methods=["GET", "DELETE"], tags=["MCP"], include_in_schema=False)
    async def mcp_no_session():
        """Stateless mode: no server-initiated streams, no sessions to delete."""
        return jsonrpc_error_response(TransportFault("Method not allowed: stateless server"), 405)

    # POST /mcp goes straight to the SDK transport: a fresh server transport
    # per request, released when the request ends
    app.add_route("/mcp", transport, methods=["POST"], include_in_schema=False)

    # ========================================================================
    # Resource Endpoints
    # ========================================================================

    @app.get(
        "/api/resources",
        response_model=ResourceListResponse,
        tags=["Resources"],
        summary="List available resources"
    )
    async def list_resources_endpoint():
        """List all available resources."""
        return await dispatcher.dispatch("resources/list")

    @app.get(
        "/api/resources/{uri:path}",
        response_model=ResourceReadResponse,
        tags=["Resources"],
        summary="Read a resource"
    )
    async def read_resource_endpoint(uri: str):
        """
        Read a resource by URI.

        - **uri**: Resource URI, URL-encoded (e.g., "doc%3A%2F%2Fcore%2Freadme")
        """
        return await dispatcher.dispatch("resources/read", {"uri": uri})

    # ========================================================================
    # Tool Endpoints
    # ========================================================================

    @app.get(
        "/api/tools",
        response_model=ToolListResponse,
        tags=["Tools"],
        summary="List available tools"
    )
    async def list_tools_endpoint():
        """List all available tools with their input schemas."""
        return await dispatcher.dispatch("tools/list")

    @app.post(
        "/api/tools/{name}",
        response_model=ToolCallResponse,
        tags=["Tools"],
        summary="Call a tool"
    )
    async def call_tool_endpoint(name: str, body: Optional[Dict[str, Any]] = Body(None)):
        """
        Execute a tool call.

        - **arguments**: Tool arguments as JSON object

        Failures are reported in the content with isError set, never as an
        HTTP error.
        """
        arguments = (body or {}).get("arguments") or {}
        return await dispatcher.dispatch("tools/call", {"name": name, "arguments": arguments})

    # ========================================================================
    # Prompt Endpoints
    # ========================================================================

    @app.get(
        "/api/prompts",
        response_model=PromptListResponse,
        tags=["Prompts"],
        summary="List available prompts"
    )
    async def list_prompts_endpoint():
        """List all available prompts with their arguments."""
        return await dispatcher.dispatch("prompts/list")

    @app.post(
        "/api/prompts/{name}",
        response_model=PromptGetResponse,
        tags=["Prompts"],
        summary="Get a prompt"
    )
    async def get_prompt_endpoint(name: str, body: Optional[Dict[str, Any]] = Body(None)):
        """
        Render a prompt.

        - **arguments**: Prompt arguments for substitution
        """
        arguments = (body or {}).get("arguments") or {}
        return await dispatcher.dispatch("prompts/get", {"name": name, "arguments": arguments})

    return app
