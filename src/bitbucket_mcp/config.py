"""Configuration management for the Bitbucket MCP server."""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_core import PydanticCustomError
from pydantic_settings import BaseSettings, SettingsConfigDict

REQUIRED_FIELDS = ("bitbucket_username", "bitbucket_app_password", "bitbucket_workspace")

# pydantic error types that mean "the variable is not set"
MISSING_ERROR_TYPES = {"missing", "string_too_short", "empty_value"}


class ConfigurationError(Exception):
    """Required settings are missing or empty, or a setting has a malformed value."""

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        invalid: Optional[List[str]] = None,
    ):
        self.missing = missing or []
        self.invalid = invalid or []
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "bitbucket-mcp"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Bitbucket credentials
    bitbucket_username: str = Field(description="Bitbucket account username")
    bitbucket_app_password: SecretStr = Field(description="Bitbucket app password")
    bitbucket_workspace: str = Field(description="Workspace slug every tool operates in")

    @field_validator(*REQUIRED_FIELDS, mode="before")
    @classmethod
    def validate_required(cls, v):
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if v is None or not str(v).strip():
            raise PydanticCustomError("empty_value", "must not be empty")
        return str(v).strip()

    def get_log_level(self) -> str:
        """Effective log level; DEBUG wins over LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level.upper()


def load_settings() -> Settings:
    """Build settings from the environment.

    Every unset or blank required variable is named in one ConfigurationError;
    malformed values are listed separately with the reason they were rejected.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise _to_configuration_error(exc) from exc


def _to_configuration_error(exc: ValidationError) -> ConfigurationError:
    missing = set()
    invalid = {}
    for error in exc.errors():
        if not error.get("loc"):
            continue
        name = str(error["loc"][0]).upper()
        if error["type"] in MISSING_ERROR_TYPES:
            missing.add(name)
        else:
            invalid.setdefault(name, error["msg"])

    problems = []
    if missing:
        problems.append(f"Missing required environment variable(s): {', '.join(sorted(missing))}")
    if invalid:
        problems.append("Invalid environment variable value(s): " + ", ".join(
            f"{name} ({invalid[name]})" for name in sorted(invalid)
        ))
    return ConfigurationError(
        "; ".join(problems) or str(exc),
        missing=sorted(missing),
        invalid=sorted(invalid),
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return load_settings()
