"""Authenticated HTTP client for the Bitbucket Cloud REST API.

One httpx.AsyncClient per process, configured once with the API base URL,
basic auth and a fixed timeout. Calls are not retried: a failed or timed-out
request surfaces directly to the calling tool as a BitbucketError.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from .exceptions import (
    BitbucketAPIError,
    BitbucketAuthError,
    BitbucketConnectionError,
    BitbucketNotFoundError,
    BitbucketTimeoutError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.bitbucket.org/2.0"
DEFAULT_TIMEOUT = 30.0

AUTH_FAILURE_CODES = {401, 403}


class BitbucketClient:
    """Thin JSON wrapper around httpx.AsyncClient."""

    def __init__(
        self,
        settings: Settings,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=httpx.BasicAuth(
                settings.bitbucket_username,
                settings.bitbucket_app_password.get_secret_value(),
            ),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "BitbucketClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        None-valued query parameters are dropped. Returns None for empty
        bodies.

        Raises:
            BitbucketAuthError: On 401/403.
            BitbucketNotFoundError: On 404.
            BitbucketAPIError: On any other error status or an undecodable body.
            BitbucketTimeoutError: When the request exceeds the timeout.
            BitbucketConnectionError: On any other request failure (transport,
                redirect loop, undecodable content).
        """
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        logger.debug("%s %s params=%s", method, path, params)

        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _translate_status_error(exc.response) from exc
        except httpx.TimeoutException as exc:
            raise BitbucketTimeoutError(
                f"Request timed out after {self.timeout:g}s: {method} {path}"
            ) from exc
        except httpx.RequestError as exc:
            raise BitbucketConnectionError(
                f"Request failed: {type(exc).__name__}: {exc}"
            ) from exc

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise BitbucketAPIError(
                f"Invalid JSON in response to {method} {path}",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from exc


def _translate_status_error(response: httpx.Response) -> Exception:
    """Map an error response onto the BitbucketError family."""
    status = response.status_code
    detail = _error_detail(response)
    suffix = f" - {detail}" if detail else ""

    if status in AUTH_FAILURE_CODES:
        return BitbucketAuthError(f"Authentication failed: HTTP {status}{suffix}")
    if status == 404:
        return BitbucketNotFoundError(
            f"Not found: HTTP 404{suffix}",
            response_body=response.text[:500],
        )
    return BitbucketAPIError(
        f"API error: HTTP {status}{suffix}",
        status_code=status,
        response_body=response.text[:500],
    )


def _error_detail(response: httpx.Response) -> str:
    """Extract Bitbucket's `{"error": {"message": ...}}` text, if any."""
    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or "")
    return ""
