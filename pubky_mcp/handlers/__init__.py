"""
MCP Capability Registries

This package contains the registries behind the MCP protocol methods:
- resources: Resource listing and reading
- tools: Tool listing and execution
- prompts: Prompt listing and rendering
"""

from .prompts import PromptRegistry
from .resources import ResourceRegistry
from .tools import ToolRegistry

__all__ = ["PromptRegistry", "ResourceRegistry", "ToolRegistry"]
