"""
MCP Error Taxonomy

Every error carries both its JSON-RPC code and the HTTP status used by the
REST mirror, so the two surfaces report the same failure the same way.
"""

from typing import Any, Dict, Optional

# JSON-RPC 2.0 reserved codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# MCP resource-not-found code
RESOURCE_NOT_FOUND = -32002


class McpError(Exception):
    """Base class for errors surfaced through the protocol."""

    jsonrpc_code: int = INTERNAL_ERROR
    http_status: int = 500

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_error(self) -> Dict[str, Any]:
        """Render as a JSON-RPC error object."""
        error: Dict[str, Any] = {"code": self.jsonrpc_code, "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


class NotFoundError(McpError):
    """Unknown resource uri, prompt name or missing backing file."""

    jsonrpc_code = RESOURCE_NOT_FOUND
    http_status = 404


class ValidationError(McpError):
    """Tool or prompt arguments failed validation."""

    jsonrpc_code = INVALID_PARAMS
    http_status = 400


class ContentAccessError(ValidationError):
    """A relative path resolved outside its content root."""


class ToolExecutionError(McpError):
    """A tool handler failed internally."""

    jsonrpc_code = INTERNAL_ERROR
    http_status = 500


class TransportFault(McpError):
    """Malformed request envelope."""

    jsonrpc_code = INVALID_REQUEST
    http_status = 400


class MethodNotFoundError(McpError):
    """Request method is not part of the protocol surface."""

    jsonrpc_code = METHOD_NOT_FOUND
    http_status = 404


class InternalError(McpError):
    """Unrecoverable dispatcher fault. Message only, never a traceback."""

    jsonrpc_code = INTERNAL_ERROR
    http_status = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class StartupWarning(UserWarning):
    """One or more content roots were unreadable at launch."""
