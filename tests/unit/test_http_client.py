"""Tests for BitbucketClient request building and error mapping.

Verifies:
- Requests go to the API base URL with basic auth.
- None-valued query parameters are dropped.
- 401/403 raise BitbucketAuthError, 404 BitbucketNotFoundError, other
  error statuses BitbucketAPIError, each carrying Bitbucket's error message.
- Timeouts and every other httpx request failure raise their own
  BitbucketError types.
"""

import base64
import json

import httpx
import pytest

from bitbucket_mcp.tools.exceptions import (
    BitbucketAPIError,
    BitbucketAuthError,
    BitbucketConnectionError,
    BitbucketError,
    BitbucketNotFoundError,
    BitbucketTimeoutError,
)
from bitbucket_mcp.tools.http_client import BASE_URL, BitbucketClient


def _client(settings, handler):
    return BitbucketClient(settings, transport=httpx.MockTransport(handler))


class TestRequests:
    """Test how requests are built."""

    @pytest.mark.asyncio
    async def test_get_uses_base_url_and_basic_auth(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"values": []})

        async with _client(settings, handler) as client:
            data = await client.get("/repositories/acme", params={"pagelen": 5, "state": None})

        assert data == {"values": []}
        request = seen[0]
        assert request.method == "GET"
        assert str(request.url).startswith(f"{BASE_URL}/repositories/acme")
        assert request.url.params["pagelen"] == "5"
        assert "state" not in request.url.params
        expected = base64.b64encode(b"test-user:test-app-password").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_and_put_send_json(self, settings):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"id": 1})

        async with _client(settings, handler) as client:
            await client.post("/repositories/acme/api/pullrequests", json={"title": "t"})
            await client.put("/repositories/acme/api/pullrequests/1", json={"title": "u"})

        assert seen[0] == ("POST", "/2.0/repositories/acme/api/pullrequests", {"title": "t"})
        assert seen[1][0] == "PUT"
        assert seen[1][1] == "/2.0/repositories/acme/api/pullrequests/1"

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, settings):
        async with _client(settings, lambda request: httpx.Response(204)) as client:
            assert await client.put("/x", json={}) is None

    @pytest.mark.asyncio
    async def test_invalid_json_raises_api_error(self, settings):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketAPIError, match="Invalid JSON in response to GET /x"):
                await client.get("/x")


class TestErrorMapping:
    """Test status and transport error translation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_failures(self, settings, status):
        def handler(request):
            return httpx.Response(status, json={"error": {"message": "Bad credentials"}})

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketAuthError) as exc_info:
                await client.get("/user")

        assert str(exc_info.value) == f"Authentication failed: HTTP {status} - Bad credentials"

    @pytest.mark.asyncio
    async def test_not_found(self, settings):
        def handler(request):
            return httpx.Response(404, json={"error": {"message": "Repository acme/ghost not found"}})

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketNotFoundError) as exc_info:
                await client.get("/repositories/acme/ghost")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Not found: HTTP 404 - Repository acme/ghost not found"

    @pytest.mark.asyncio
    async def test_server_error_without_detail(self, settings):
        async with _client(settings, lambda request: httpx.Response(502, text="Bad gateway")) as client:
            with pytest.raises(BitbucketAPIError) as exc_info:
                await client.get("/x")

        assert str(exc_info.value) == "API error: HTTP 502"
        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == "Bad gateway"

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketTimeoutError, match="timed out after 30s: GET /slow"):
                await client.get("/slow")

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketConnectionError, match="ConnectError"):
                await client.get("/x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error_type", [httpx.DecodingError, httpx.TooManyRedirects], ids=["decoding", "redirects"]
    )
    async def test_other_request_errors_are_translated(self, settings, error_type):
        def handler(request):
            raise error_type("stream broke", request=request)

        async with _client(settings, handler) as client:
            with pytest.raises(BitbucketConnectionError, match=f"Request failed: {error_type.__name__}"):
                await client.get("/x")

    def test_all_client_errors_share_a_base(self):
        for exc_type in (
            BitbucketAuthError,
            BitbucketAPIError,
            BitbucketNotFoundError,
            BitbucketTimeoutError,
            BitbucketConnectionError,
        ):
            assert issubclass(exc_type, BitbucketError)
