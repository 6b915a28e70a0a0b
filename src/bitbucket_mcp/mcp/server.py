"""MCP server wiring the tool registry to the stdio transport."""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .. import __version__
from ..observability.logging import clear_log_context, set_log_context
from ..tools import ToolContext, ToolRegistry, tool_registry
from ..tools.exceptions import UnknownToolError

logger = logging.getLogger(__name__)

SERVER_NAME = "bitbucket-mcp"


class MCPServer:
    """Single-workspace Bitbucket MCP server."""

    def __init__(self, context: ToolContext, registry: Optional[ToolRegistry] = None):
        self.context = context
        self.registry = registry or tool_registry
        self.server = Server(SERVER_NAME, version=__version__)
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            """List available tools."""
            tools = self.registry.list_tools()
            logger.debug("Returning %d tools", len(tools))
            return tools

        # Arguments are validated by the registry so that bad input comes
        # back as tool text rather than a protocol error.
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> List[types.TextContent]:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """Run one tool call. Raises UnknownToolError for unregistered names."""
        set_log_context(
            workspace=self.context.workspace,
            tool_name=name,
            request_id=uuid.uuid4().hex[:12],
        )
        logger.info("Tool call: %s", name)

        start = time.perf_counter()
        try:
            result = await self.registry.invoke(name, arguments, self.context)
            logger.info(
                "Tool call finished: %s (status=%s, duration=%.3fs)",
                name,
                "error" if result.is_error else "success",
                time.perf_counter() - start,
            )
            return result.to_content()
        except UnknownToolError:
            logger.warning("Unknown tool requested: %s", name)
            raise
        finally:
            clear_log_context()

    async def run_stdio(self):
        """Serve MCP over stdin/stdout until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
