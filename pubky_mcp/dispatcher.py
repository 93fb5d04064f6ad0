"""
MCP Protocol Dispatcher

Routes the six capability methods to their registries. The same methods are
registered on an ``mcp`` low-level Server, whose session layer handles the
JSON-RPC framing, initialize/ping and notifications for every transport.

Failure policy per method:
- resources/list, tools/list, prompts/list: never fail, degrade to an empty list
- resources/read, prompts/get: raise with a descriptive message
- tools/call: never raise, failures are returned as error content
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.shared.exceptions import McpError as ProtocolError
from pydantic import AnyUrl

from . import SERVER_NAME, __version__
from .errors import InternalError, McpError, MethodNotFoundError, ToolExecutionError, ValidationError
from .handlers import PromptRegistry, ResourceRegistry, ToolRegistry

logger = logging.getLogger(__name__)

Params = Mapping[str, Any]
MethodHandler = Callable[[Params], Awaitable[Dict[str, Any]]]


class DispatcherState(str, Enum):
    UNINITIALIZED = "uninitialized"
    SERVING = "serving"


def _wrap(prefix: str, exc: Exception) -> McpError:
    """Re-raise an error with a caller-facing prefix, keeping its error class."""
    if isinstance(exc, McpError):
        return type(exc)(f"{prefix}: {exc.message}")
    return McpError(f"{prefix}: {exc}")


class ProtocolDispatcher:
    """
    Dispatch MCP requests to the resource, tool and prompt registries.

    The dispatcher moves from UNINITIALIZED to SERVING once, at the end of
    construction, and never goes back.
    """

    def __init__(
        self,
        resources: ResourceRegistry,
        tools: ToolRegistry,
        prompts: PromptRegistry,
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
    ):
        self._state = DispatcherState.UNINITIALIZED
        self._resources = resources
        self._tools = tools
        self._prompts = prompts
        self._server_info = {"name": server_name, "version": server_version}
        self._methods: Dict[str, MethodHandler] = {
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
        }
        self._server = self._build_server()
        self._state = DispatcherState.SERVING

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def methods(self) -> Tuple[str, ...]:
        return tuple(self._methods)

    @property
    def server_info(self) -> Dict[str, str]:
        return dict(self._server_info)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def dispatch(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one capability method.

        Raises:
            MethodNotFoundError: If method is not one of the six capability methods
            McpError: From resources/read and prompts/get
        """
        handler = self._methods.get(method)
        if handler is None:
            raise MethodNotFoundError(f"Method not found: {method}")
        return await handler(params or {})

    @property
    def server(self) -> Server:
        """The ``mcp`` server every transport runs; built once with the dispatcher."""
        return self._server

    async def _protocol_call(self, method: str, params: Params) -> Dict[str, Any]:
        """Run a capability method, raising failures as JSON-RPC errors for the SDK session."""
        try:
            return await self.dispatch(method, params)
        except McpError as e:
            raise ProtocolError(types.ErrorData(**e.to_error())) from e
        except Exception as e:
            logger.error(f"Unhandled error for '{method}': {e}", exc_info=True)
            raise ProtocolError(types.ErrorData(**InternalError().to_error())) from e

    def _build_server(self) -> Server:
        server = Server(self._server_info["name"], version=self._server_info["version"])

        @server.list_resources()
        async def list_resources() -> List[types.Resource]:
            result = await self._protocol_call("resources/list", {})
            return [types.Resource(**resource) for resource in result["resources"]]

        @server.read_resource()
        async def read_resource(uri: AnyUrl) -> List[ReadResourceContents]:
            result = await self._protocol_call("resources/read", {"uri": str(uri)})
            return [
                ReadResourceContents(content=contents["text"], mime_type=contents.get("mimeType"))
                for contents in result["contents"]
            ]

        @server.list_tools()
        async def list_tools() -> List[types.Tool]:
            result = await self._protocol_call("tools/list", {})
            return [types.Tool(**tool) for tool in result["tools"]]

        # Arguments are validated by the ToolRegistry, not the SDK
        @server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
            result = await self._protocol_call("tools/call", {"name": name, "arguments": arguments})
            if result["isError"]:
                # The SDK turns a raised exception into isError content with its message
                raise ToolExecutionError(result["content"][0]["text"])
            return [types.TextContent(**block) for block in result["content"]]

        @server.list_prompts()
        async def list_prompts() -> List[types.Prompt]:
            result = await self._protocol_call("prompts/list", {})
            return [types.Prompt(**prompt) for prompt in result["prompts"]]

        @server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
            result = await self._protocol_call("prompts/get", {"name": name, "arguments": arguments})
            return types.GetPromptResult(**result)

        return server

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _list_resources(self, params: Params) -> Dict[str, Any]:
        try:
            resources = self._resources.list()
        except Exception as e:
            logger.error(f"Error listing resources: {e}", exc_info=True)
            resources = []
        return {"resources": [r.model_dump(exclude_none=True) for r in resources]}

    async def _read_resource(self, params: Params) -> Dict[str, Any]:
        uri = params.get("uri")
        try:
            if not isinstance(uri, str) or not uri:
                raise ValidationError("Missing required parameter: uri")
            contents = await self._resources.get(uri)
        except Exception as e:
            logger.error(f"Error reading resource '{uri}': {e}")
            raise _wrap("Failed to read resource", e) from e
        return {"contents": [contents.model_dump(exclude_none=True)]}

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _list_tools(self, params: Params) -> Dict[str, Any]:
        try:
            tools = self._tools.list()
        except Exception as e:
            logger.error(f"Error listing tools: {e}", exc_info=True)
            tools = []
        return {"tools": [t.model_dump() for t in tools]}

    async def _call_tool(self, params: Params) -> Dict[str, Any]:
        name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        try:
            if not isinstance(name, str) or not name:
                raise ValidationError("Missing required parameter: name")
            response = await self._tools.call(name, arguments)
        except Exception as e:
            logger.error(f"Error executing tool '{name}': {e}", exc_info=True)
            message = e.message if isinstance(e, McpError) else str(e)
            return {"content": [{"type": "text", "text": f"Error: {message}"}], "isError": True}
        return response.model_dump()

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    async def _list_prompts(self, params: Params) -> Dict[str, Any]:
        try:
            prompts = self._prompts.list()
        except Exception as e:
            logger.error(f"Error listing prompts: {e}", exc_info=True)
            prompts = []
        return {"prompts": [p.model_dump(exclude_none=True) for p in prompts]}

    async def _get_prompt(self, params: Params) -> Dict[str, Any]:
        name = params.get("name")
        arguments = params.get("arguments")
        try:
            if not isinstance(name, str) or not name:
                raise ValidationError("Missing required parameter: name")
            if arguments is not None and not isinstance(arguments, Mapping):
                raise ValidationError("Prompt arguments must be an object")
            prompt = self._prompts.get(name, arguments or {})
        except Exception as e:
            logger.error(f"Error getting prompt '{name}': {e}")
            raise _wrap("Failed to get prompt", e) from e
        return prompt.model_dump(exclude_none=True)
