"""Test configuration and fixtures."""

import os
from unittest.mock import AsyncMock

import pytest

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("BITBUCKET_USERNAME", "test-user")
os.environ.setdefault("BITBUCKET_APP_PASSWORD", "test-app-password")
os.environ.setdefault("BITBUCKET_WORKSPACE", "test-workspace")

from bitbucket_mcp.config import Settings
from bitbucket_mcp.tools import BitbucketClient, ToolContext


@pytest.fixture
def settings():
    """Settings built from explicit values, independent of the environment."""
    return Settings(
        bitbucket_username="test-user",
        bitbucket_app_password="test-app-password",
        bitbucket_workspace="acme",
    )


@pytest.fixture
def mock_client():
    """BitbucketClient stand-in; set side_effect/return_value per test."""
    client = AsyncMock(spec=BitbucketClient)
    client.get.return_value = {"values": []}
    return client


@pytest.fixture
def context(settings, mock_client):
    return ToolContext(client=mock_client, settings=settings)
