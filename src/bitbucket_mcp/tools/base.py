"""Shared types for tool handlers."""

from dataclasses import dataclass
from typing import Any, List

from mcp import types
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import Settings
from .http_client import BitbucketClient

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


@dataclass(frozen=True)
class ToolContext:
    """Everything a handler may touch: the shared client and the settings."""

    client: BitbucketClient
    settings: Settings

    @property
    def workspace(self) -> str:
        return self.settings.bitbucket_workspace


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call. Failures are text, never exceptions."""

    text: str
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(text=text)

    @classmethod
    def failure(cls, action: str, message: str) -> "ToolResult":
        return cls(text=f"Error {action}: {message}", is_error=True)

    def to_content(self) -> List[types.TextContent]:
        return [types.TextContent(type="text", text=self.text)]


class ToolArguments(BaseModel):
    """Base model for tool arguments.

    Unknown arguments are ignored unless a subclass opts into
    `extra="allow"`. Numeric ids are accepted where strings are expected.
    """

    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    @field_validator("limit", mode="before", check_fields=False)
    @classmethod
    def clamp_limit(cls, v: Any) -> int:
        if v is None:
            return DEFAULT_LIMIT
        try:
            value = int(v)
        except (TypeError, ValueError):
            raise ValueError("limit must be a number")
        if value < 1:
            return DEFAULT_LIMIT
        return min(value, MAX_LIMIT)


def limit_field(things: str) -> Any:
    """`limit` argument: default 50, clamped to 1..100."""
    return Field(
        default=DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        description=f"Maximum number of {things} to return (default: {DEFAULT_LIMIT}, max: {MAX_LIMIT})",
    )


def repository_name_field() -> Any:
    return Field(min_length=1, description="Name of the repository (repo slug)")


def project_key_field() -> Any:
    return Field(min_length=1, description="The key of the project.")
