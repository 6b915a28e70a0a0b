"""MCP protocol layer."""

from .server import MCPServer

__all__ = ["MCPServer"]
