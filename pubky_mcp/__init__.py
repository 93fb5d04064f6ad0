"""
Pubky Model Context Protocol (MCP) Server

This package implements an MCP server that exposes:
- Resources: Bundled documentation, specs and code examples for Pubky Core, Pkarr, Pkdns and Nexus
- Tools: Developer tools (doc search, key validation, URI formatting, code examples)
- Prompts: Reusable prompt templates for building on Pubky

The same dispatcher is served over a local stdio channel and a stateless
HTTP channel (JSON-RPC tunnel plus a REST mirror).
"""

__version__ = "1.0.0"

SERVER_NAME = "pubky-mcp-server"
