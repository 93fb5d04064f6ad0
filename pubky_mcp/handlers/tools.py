"""
MCP Tool Endpoint Handlers

Handles tool listing and execution for MCP protocol.
Exposes developer tools: search_docs, read_doc, list_content_roots,
validate_public_key, format_pubky_uri, generate_code_example
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Union

from jsonschema import Draft202012Validator

from .. import toolkit
from ..content import ContentResolver
from ..errors import McpError, ToolExecutionError, ValidationError
from ..models import TextContent, ToolCallResponse, ToolDefinition

logger = logging.getLogger(__name__)

ToolResult = Union[str, List[TextContent]]
ToolHandler = Callable[[Dict[str, Any], ContentResolver], Any]


@dataclass(frozen=True)
class ToolEntry:
    """Tool descriptor plus its handler. The handler is never exposed by list()."""
    name: str
    description: str
    inputSchema: Dict[str, Any]
    handler: ToolHandler

    def definition(self) -> ToolDefinition:
        return ToolDefinition(name=self.name, description=self.description, inputSchema=self.inputSchema)


ROOT_NAMES = ["core", "pkarr", "pkdns", "nexus"]

# Tool catalog
DEFAULT_TOOLS: List[ToolEntry] = [
    ToolEntry(
        name="search_docs",
        description="Search the bundled Pubky documentation for lines containing a query",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Text to search for (case-insensitive)"
                },
                "root": {
                    "type": "string",
                    "enum": ROOT_NAMES,
                    "description": "Restrict the search to one project"
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of matching lines",
                    "default": 10,
                    "minimum": 1,
                    "maximum": 50
                }
            },
            "required": ["query"],
            "additionalProperties": False
        },
        handler=toolkit.search_docs,
    ),
    ToolEntry(
        name="read_doc",
        description="Read a file from one of the bundled Pubky projects",
        inputSchema={
            "type": "object",
            "properties": {
                "root": {
                    "type": "string",
                    "enum": ROOT_NAMES,
                    "description": "Project to read from"
                },
                "path": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Path relative to the project root (e.g., 'README.md')"
                }
            },
            "required": ["root", "path"],
            "additionalProperties": False
        },
        handler=toolkit.read_doc,
    ),
    ToolEntry(
        name="list_content_roots",
        description="Show which bundled Pubky projects are available on this server",
        inputSchema={"type": "object", "properties": {}, "additionalProperties": False},
        handler=toolkit.list_content_roots,
    ),
    ToolEntry(
        name="validate_public_key",
        description="Check that a string is a valid z-base-32 Pubky public key",
        inputSchema={
            "type": "object",
            "properties": {
                "public_key": {
                    "type": "string",
                    "description": "Public key, optionally prefixed with 'pk:' or 'pubky://'"
                }
            },
            "required": ["public_key"],
            "additionalProperties": False
        },
        handler=toolkit.validate_public_key,
    ),
    ToolEntry(
        name="format_pubky_uri",
        description="Build a pubky:// URI for an application path on a user's homeserver",
        inputSchema={
            "type": "object",
            "properties": {
                "public_key": {"type": "string", "description": "Owner's public key"},
                "app": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Application namespace (e.g., 'pubky.app')"
                },
                "path": {"type": "string", "description": "Path inside the application namespace"}
            },
            "required": ["public_key", "app"],
            "additionalProperties": False
        },
        handler=toolkit.format_pubky_uri,
    ),
    ToolEntry(
        name="generate_code_example",
        description="Generate a client code example for a homeserver operation",
        inputSchema={
            "type": "object",
            "properties": {
                "language": {
                    "type": "string",
                    "enum": toolkit.LANGUAGES,
                    "description": "Client language"
                },
                "operation": {
                    "type": "string",
                    "enum": toolkit.OPERATIONS,
                    "description": "Homeserver operation"
                },
                "homeserver": {"type": "string", "description": "Homeserver public key"},
                "url": {"type": "string", "description": "pubky:// URL used by storage operations"}
            },
            "required": ["language", "operation"],
            "additionalProperties": False
        },
        handler=toolkit.generate_code_example,
    ),
]


def _error_response(message: str) -> ToolCallResponse:
    return ToolCallResponse(content=[TextContent(text=f"Error: {message}")], isError=True)


def _to_content(result: ToolResult) -> List[TextContent]:
    if isinstance(result, str):
        return [TextContent(text=result)]
    return list(result)


class ToolRegistry:
    """Static tool catalog with schema-validated invocation."""

    def __init__(self, resolver: ContentResolver, tools: Iterable[ToolEntry] = DEFAULT_TOOLS):
        self._resolver = resolver
        self._tools: Dict[str, ToolEntry] = {}
        self._validators: Dict[str, Draft202012Validator] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            Draft202012Validator.check_schema(tool.inputSchema)
            self._tools[tool.name] = tool
            self._validators[tool.name] = Draft202012Validator(tool.inputSchema)

    def list(self) -> List[ToolDefinition]:
        """List all available tools (descriptors only)."""
        return [tool.definition() for tool in self._tools.values()]

    def _validate(self, name: str, arguments: Dict[str, Any]) -> None:
        errors = sorted(self._validators[name].iter_errors(arguments), key=lambda e: e.json_path)
        if errors:
            details = "; ".join(f"{error.json_path}: {error.message}" for error in errors)
            raise ValidationError(f"Invalid arguments for tool '{name}': {details}")

    async def call(self, name: str, arguments: Dict[str, Any]) -> ToolCallResponse:
        """
        Execute a tool call.

        Never raises: unknown tools, invalid arguments and handler failures
        all come back as an error content block with isError set.

        Args:
            name: Tool name to call
            arguments: Tool arguments as a JSON object

        Returns:
            ToolCallResponse with tool output
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return _error_response(f"Unknown tool '{name}'. Available tools: {list(self._tools)}")

        try:
            self._validate(name, arguments)
            if inspect.iscoroutinefunction(tool.handler):
                result = await tool.handler(arguments, self._resolver)
            else:
                result = await asyncio.to_thread(tool.handler, arguments, self._resolver)
            return ToolCallResponse(content=_to_content(result), isError=False)

        except McpError as e:
            logger.warning(f"Tool '{name}' failed: {e.message}")
            return _error_response(e.message)
        except Exception as e:
            logger.error(f"Error executing tool '{name}': {e}", exc_info=True)
            return _error_response(ToolExecutionError(f"Tool '{name}' failed: {e}").message)
