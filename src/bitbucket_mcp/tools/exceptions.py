"""Tool and Bitbucket API exception types.

Raised by the HTTP client and the argument validation layer, and caught by
the tool registry, which renders them as tool result text. Only
UnknownToolError is allowed to reach the MCP transport.
"""

from typing import Optional


class BitbucketMCPError(Exception):
    """Base exception for everything raised inside the tool layer."""


class BitbucketError(BitbucketMCPError):
    """Base exception for failed Bitbucket API calls."""


class BitbucketAuthError(BitbucketError):
    """Authentication or authorization failure (401/403)."""

    pass


class BitbucketAPIError(BitbucketError):
    """API returned an error response (4xx/5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: str = "",
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class BitbucketNotFoundError(BitbucketAPIError):
    """Resource not found (404)."""

    def __init__(self, message: str, response_body: str = ""):
        super().__init__(message, status_code=404, response_body=response_body)


class BitbucketTimeoutError(BitbucketError):
    """Request timed out."""

    pass


class BitbucketConnectionError(BitbucketError):
    """The request failed without a usable response (DNS, refused connection,
    redirect loop, undecodable content)."""

    pass


class ToolValidationError(BitbucketMCPError):
    """Invalid or missing tool argument."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class UnknownToolError(BitbucketMCPError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")
