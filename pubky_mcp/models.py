"""
MCP Protocol Request/Response Models

This module defines Pydantic models for MCP protocol requests and responses
following the Model Context Protocol specification. They shape the REST
mirror; the JSON-RPC framing itself is handled by the mcp SDK.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal


# ============================================================================
# Tool Models
# ============================================================================

class ToolDefinition(BaseModel):
    """MCP tool definition schema."""
    name: str = Field(..., description="Tool name/identifier")
    description: str = Field(..., description="Tool description")
    inputSchema: Dict[str, Any] = Field(..., description="JSON schema for tool inputs")


class ToolListResponse(BaseModel):
    """Response for listing available tools."""
    tools: List[ToolDefinition] = Field(..., description="List of available tools")


class TextContent(BaseModel):
    """Text content block."""
    type: Literal["text"] = "text"
    text: str = Field(..., description="Text payload")


class ToolCallResponse(BaseModel):
    """Response from tool call."""
    content: List[TextContent] = Field(..., description="Tool output content")
    isError: bool = Field(default=False, description="Whether the result is an error")


# ============================================================================
# Resource Models
# ============================================================================

class ResourceDefinition(BaseModel):
    """MCP resource definition schema."""
    uri: str = Field(..., description="Resource URI")
    name: str = Field(..., description="Resource name")
    description: Optional[str] = Field(None, description="Resource description")
    mimeType: Optional[str] = Field(None, description="MIME type of the resource")


class ResourceListResponse(BaseModel):
    """Response for listing available resources."""
    resources: List[ResourceDefinition] = Field(..., description="List of available resources")


class ResourceContents(BaseModel):
    """Contents of a single resource."""
    uri: str = Field(..., description="Resource URI")
    mimeType: Optional[str] = Field(None, description="MIME type of the resource")
    text: str = Field(..., description="Resource text")


class ResourceReadResponse(BaseModel):
    """Response from reading a resource."""
    contents: List[ResourceContents] = Field(..., description="Resource contents")


# ============================================================================
# Prompt Models
# ============================================================================

class PromptArgument(BaseModel):
    """Prompt argument definition."""
    name: str = Field(..., description="Argument name")
    description: Optional[str] = Field(None, description="Argument description")
    required: bool = Field(default=True, description="Whether argument is required")


class PromptDefinition(BaseModel):
    """MCP prompt definition schema."""
    name: str = Field(..., description="Prompt name/identifier")
    description: Optional[str] = Field(None, description="Prompt description")
    arguments: List[PromptArgument] = Field(default_factory=list, description="Prompt arguments")


class PromptListResponse(BaseModel):
    """Response for listing available prompts."""
    prompts: List[PromptDefinition] = Field(..., description="List of available prompts")


class PromptMessage(BaseModel):
    """A single rendered prompt message."""
    role: Literal["user", "assistant"] = Field(..., description="Message role")
    content: TextContent = Field(..., description="Message content")


class PromptGetResponse(BaseModel):
    """Response from getting a prompt."""
    description: Optional[str] = Field(None, description="Prompt description")
    messages: List[PromptMessage] = Field(..., description="Prompt messages")


# ============================================================================
# Error Models
# ============================================================================

class JsonRpcError(BaseModel):
    """JSON-RPC error object."""
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional error data")


class MCPError(BaseModel):
    """REST mirror error body."""
    error: JsonRpcError = Field(..., description="Canonical error object")
