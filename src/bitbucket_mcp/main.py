"""Entry point: run the Bitbucket MCP server over stdio."""

import asyncio
import logging
import sys

from .config import ConfigurationError, Settings, get_settings
from .mcp.server import MCPServer
from .observability.logging import configure_logging
from .tools import BitbucketClient, ToolContext, tool_registry

logger = logging.getLogger(__name__)


async def serve(settings: Settings) -> None:
    """Build the tool context and serve until stdin closes."""
    async with BitbucketClient(settings) as client:
        server = MCPServer(ToolContext(client=client, settings=settings))
        logger.info(
            "Bitbucket MCP server running on stdio (workspace=%s, tools=%d)",
            settings.bitbucket_workspace,
            len(tool_registry.list_tool_names()),
        )
        await server.run_stdio()


def main() -> None:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    configure_logging(
        environment=settings.environment,
        log_level=settings.get_log_level(),
    )

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Bitbucket MCP server stopped")


if __name__ == "__main__":
    main()
