"""Logging for the Bitbucket MCP server."""

from .logging import clear_log_context, configure_logging, log_context, set_log_context

__all__ = ["clear_log_context", "configure_logging", "log_context", "set_log_context"]
