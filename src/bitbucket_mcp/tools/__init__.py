"""Bitbucket tools exposed over MCP."""

from .base import ToolArguments, ToolContext, ToolResult
from .http_client import BitbucketClient
from .registry import ToolDefinition, ToolRegistry, register_tool, tool_registry

# Import all tool modules to trigger registration
from . import repositories  # noqa: F401
from . import commits  # noqa: F401
from . import branch_restrictions  # noqa: F401
from . import branching_model  # noqa: F401
from . import projects  # noqa: F401
from . import pull_requests  # noqa: F401
from . import workspaces  # noqa: F401

__all__ = [
    "BitbucketClient",
    "ToolArguments",
    "ToolContext",
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "register_tool",
    "tool_registry",
]
