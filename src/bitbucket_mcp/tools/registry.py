"""Tool registry: the single place tools are listed and dispatched."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from mcp import types
from pydantic import ValidationError

from .base import ToolArguments, ToolContext, ToolResult
from .exceptions import ToolValidationError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[ToolContext, Any], Awaitable[str]]

# pydantic error types that mean "the caller did not supply this"
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


@dataclass(frozen=True)
class ToolDefinition:
    """A named tool: its argument model, its handler and the phrase used in error text."""

    name: str
    description: str
    arguments: Type[ToolArguments]
    action: str
    handler: ToolHandler

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema for the arguments, without pydantic's generated titles."""
        schema = self.arguments.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


class ToolRegistry:
    """Registry mapping tool names to their definitions."""

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._descriptors: Optional[List[types.Tool]] = None

    def register(self, definition: ToolDefinition):
        """Register a tool. Names must be unique."""
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")

        self._tools[definition.name] = definition
        self._descriptors = None

        logger.debug("Registered tool: %s", definition.name)

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool definition by name."""
        return self._tools.get(name)

    def list_tool_names(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def list_tools(self) -> List[types.Tool]:
        """MCP descriptors for every registered tool, built once."""
        if self._descriptors is None:
            self._descriptors = [tool.to_mcp_tool() for tool in self._tools.values()]
        return self._descriptors

    async def invoke(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]],
        context: ToolContext,
    ) -> ToolResult:
        """Validate arguments and run a tool.

        Raises UnknownToolError for unregistered names. Every other failure
        (bad arguments, API errors, malformed responses) comes back as a
        failed ToolResult.
        """
        definition = self._tools.get(name)
        if definition is None:
            raise UnknownToolError(name)

        try:
            args = _validate_arguments(definition.arguments, arguments or {})
            text = await definition.handler(context, args)
        except ToolValidationError as e:
            logger.warning("Invalid arguments for %s: %s", name, e)
            return ToolResult.failure(definition.action, str(e))
        except Exception as e:
            logger.error("Error %s: %s", definition.action, e, exc_info=True)
            return ToolResult.failure(definition.action, str(e) or type(e).__name__)

        return ToolResult.success(text)


def _validate_arguments(model: Type[ToolArguments], arguments: Dict[str, Any]) -> ToolArguments:
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        raise _to_tool_validation_error(exc) from exc


def _to_tool_validation_error(exc: ValidationError) -> ToolValidationError:
    """Describe the first argument problem, naming the offending field."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"

    if error["type"] in _MISSING_ERROR_TYPES or error.get("input", "") is None:
        return ToolValidationError(f"Missing required argument: {field}", field=field)
    return ToolValidationError(f"Invalid argument '{field}': {error['msg']}", field=field)


# Global tool registry instance
tool_registry = ToolRegistry()


def register_tool(
    name: str,
    description: str,
    arguments: Type[ToolArguments],
    action: str,
):
    """Decorator to register a tool handler."""
    def decorator(handler: ToolHandler) -> ToolHandler:
        tool_registry.register(ToolDefinition(
            name=name,
            description=description,
            arguments=arguments,
            action=action,
            handler=handler,
        ))
        return handler
    return decorator
