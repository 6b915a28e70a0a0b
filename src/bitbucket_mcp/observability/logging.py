"""Logging setup for the Bitbucket MCP server.

Every record emitted while a tool call is running carries the call's
workspace, tool name and request id, taken from contextvars so concurrent
calls on the one event loop do not mix. Output always goes to stderr:
stdout carries the MCP stdio protocol.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Dict, Optional

_workspace: ContextVar[Optional[str]] = ContextVar("workspace", default=None)
_tool_name: ContextVar[Optional[str]] = ContextVar("tool_name", default=None)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# (field name, short label for the human-readable suffix, variable)
_CONTEXT_FIELDS = (
    ("workspace", "ws", _workspace),
    ("tool_name", "tool", _tool_name),
    ("request_id", "req", _request_id),
)

NOISY_LOGGERS = ("httpx", "httpcore", "mcp")


def set_log_context(
    workspace: Optional[str] = None,
    tool_name: Optional[str] = None,
    request_id: Optional[str] = None,
):
    """Tag log records from the current async context with a tool call."""
    if workspace is not None:
        _workspace.set(workspace)
    if tool_name is not None:
        _tool_name.set(tool_name)
    if request_id is not None:
        _request_id.set(request_id)


def clear_log_context():
    for _, _, var in _CONTEXT_FIELDS:
        var.set(None)


def log_context() -> Dict[str, str]:
    """The tool-call fields currently set, keyed by field name."""
    return {name: var.get() for name, _, var in _CONTEXT_FIELDS if var.get()}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, tool-call fields included when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **log_context(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanReadableFormatter(logging.Formatter):
    """`[time] LEVEL logger: message [ws=..., tool=..., req=...]`."""

    def format(self, record: logging.LogRecord) -> str:
        msg = (
            f"[{self.formatTime(record, self.datefmt)}] {record.levelname:8s} "
            f"{record.name}: {record.getMessage()}"
        )

        labels = [
            f"{label}={var.get()}" for _, label, var in _CONTEXT_FIELDS if var.get()
        ]
        if labels:
            msg += f" [{', '.join(labels)}]"

        if record.exc_info and record.exc_info[1]:
            msg += "\n" + self.formatException(record.exc_info)
        return msg


def configure_logging(environment: str = "development", log_level: str = "INFO"):
    """Install a single stderr handler on the root logger.

    Args:
        environment: "production" for JSON output, anything else for human-readable.
        log_level: Logging level name; unknown names fall back to INFO.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)

    # httpx logs every request at INFO; keep the tool-level lines readable
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
