"""Tests for repository tools."""

from unittest.mock import call

import httpx
import pytest

from bitbucket_mcp.tools import BitbucketClient, ToolContext, tool_registry
from bitbucket_mcp.tools.exceptions import BitbucketAPIError
from tests.payloads import commit_payload, repository_payload


def _route(responses):
    """side_effect returning canned payloads by path; exceptions are raised."""

    async def get(path, params=None):
        response = responses[path]
        if isinstance(response, Exception):
            raise response
        return response

    return get


class TestListRepositories:
    """Test list_repositories."""

    @pytest.mark.asyncio
    async def test_lists_without_commit_info(self, context, mock_client):
        mock_client.get.return_value = {
            "values": [repository_payload("api"), repository_payload("web", description=None)],
        }

        result = await tool_registry.invoke("list_repositories", {}, context)

        assert not result.is_error
        mock_client.get.assert_awaited_once_with(
            "/repositories/acme", params={"pagelen": 50, "sort": "-updated_on"}
        )
        text = result.text
        assert text.startswith('Found 2 repositories in workspace "acme"\n\n**api**')
        assert "(with commit information)" not in text
        assert "- Full Name: acme/api" in text
        assert "- Size: 2.00 KB" in text
        assert "- Private: Yes" in text
        assert "- Created: 2023-01-05" in text
        assert "- Updated: 2024-03-01" in text
        assert "- URL: https://bitbucket.org/acme/api" in text
        assert "**web**\n- Full Name: acme/web\n- Description: No description" in text
        assert "Commit Count" not in text

    @pytest.mark.asyncio
    async def test_language_and_dates_fall_back(self, context, mock_client):
        mock_client.get.return_value = {
            "values": [repository_payload("bare", language="", created_on=None, is_private=False)],
        }

        result = await tool_registry.invoke("list_repositories", {}, context)

        assert "- Language: Not specified" in result.text
        assert "- Created: Unknown" in result.text
        assert "- Private: No" in result.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "limit, pagelen",
        [(500, 100), (100, 100), (10, 10), (1, 1), (0, 50), (-3, 50), (None, 50)],
    )
    async def test_limit_is_clamped(self, context, mock_client, limit, pagelen):
        await tool_registry.invoke("list_repositories", {"limit": limit}, context)

        assert mock_client.get.await_args.kwargs["params"]["pagelen"] == pagelen

    @pytest.mark.asyncio
    async def test_empty_workspace(self, context, mock_client):
        result = await tool_registry.invoke("list_repositories", {}, context)

        assert result.text.startswith('Found 0 repositories in workspace "acme"')

    @pytest.mark.asyncio
    async def test_commit_info_fetches_two_pages_per_repository(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme": {
                "values": [repository_payload("api"), repository_payload("web")],
            },
            "/repositories/acme/api/commits": {
                "values": [commit_payload("aaa111", "Initial import")],
                "size": 12,
            },
            "/repositories/acme/web/commits": {
                "values": [commit_payload("bbb222", "Tweak styles", display_name=None)],
                "size": 3,
            },
        })

        result = await tool_registry.invoke(
            "list_repositories", {"include_commit_info": True}, context
        )

        assert mock_client.get.await_count == 1 + 2 * 2
        mock_client.get.assert_has_awaits(
            [
                call("/repositories/acme/api/commits", params={"pagelen": 1}),
                call("/repositories/acme/web/commits", params={"pagelen": 1}),
            ],
            any_order=True,
        )
        text = result.text
        assert text.startswith(
            'Found 2 repositories in workspace "acme" (with commit information)'
        )
        api_block, web_block = text.split("\n\n")[1:]
        assert api_block.startswith("**api**")
        assert "- Commit Count: 12" in api_block
        assert "- Latest Commit: 2024-03-01" in api_block
        assert "- Latest Commit Hash: aaa111" in api_block
        assert "- Latest Commit Author: Jane Doe" in api_block
        assert "- Latest Commit Message: Initial import" in api_block
        assert "- Commit Count: 3" in web_block
        assert "- Latest Commit Author: Jane Doe <jane@example.com>" in web_block

    @pytest.mark.asyncio
    async def test_failing_repository_degrades_in_place(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme": {
                "values": [
                    repository_payload("api"),
                    repository_payload("broken"),
                    repository_payload("web"),
                ],
            },
            "/repositories/acme/api/commits": {"values": [commit_payload(message="One")], "size": 2},
            "/repositories/acme/broken/commits": BitbucketAPIError(
                "API error: HTTP 500", status_code=500
            ),
            "/repositories/acme/web/commits": {"values": [commit_payload(message="Two")], "size": 5},
        })

        result = await tool_registry.invoke(
            "list_repositories", {"include_commit_info": True}, context
        )

        assert not result.is_error
        blocks = result.text.split("\n\n")[1:]
        assert [block.splitlines()[0] for block in blocks] == ["**api**", "**broken**", "**web**"]
        broken = blocks[1]
        assert "- Commit Count: 0" in broken
        assert "- Latest Commit: No commits" in broken
        assert "- Latest Commit Hash: N/A" in broken
        assert "- Latest Commit Author: N/A" in broken
        assert "- Latest Commit Message: N/A" in broken
        assert "- Commit Count: 5" in blocks[2]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        [
            lambda request: httpx.DecodingError("bad gzip", request=request),
            lambda request: httpx.TooManyRedirects("redirect loop", request=request),
        ],
        ids=["decoding", "redirects"],
    )
    async def test_request_failure_degrades_only_that_repository(self, settings, failure):
        def handler(request):
            if request.url.path == "/2.0/repositories/acme":
                return httpx.Response(200, json={
                    "values": [repository_payload("api"), repository_payload("broken")],
                })
            if request.url.path == "/2.0/repositories/acme/broken/commits":
                raise failure(request)
            return httpx.Response(200, json={"values": [commit_payload(message="One")], "size": 4})

        async with BitbucketClient(settings, transport=httpx.MockTransport(handler)) as client:
            result = await tool_registry.invoke(
                "list_repositories",
                {"include_commit_info": True},
                ToolContext(client=client, settings=settings),
            )

        assert not result.is_error
        api_block, broken_block = result.text.split("\n\n")[1:]
        assert api_block.startswith("**api**")
        assert "- Commit Count: 4" in api_block
        assert broken_block.startswith("**broken**")
        assert "- Commit Count: 0" in broken_block
        assert "- Latest Commit Hash: N/A" in broken_block

    @pytest.mark.asyncio
    async def test_malformed_commit_page_degrades_that_repository(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme": {"values": [repository_payload("api")]},
            "/repositories/acme/api/commits": {"values": "not-a-list"},
        })

        result = await tool_registry.invoke(
            "list_repositories", {"include_commit_info": True}, context
        )

        assert not result.is_error
        assert "- Commit Count: 0" in result.text

    @pytest.mark.asyncio
    async def test_commit_info_uses_slug(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme": {
                "values": [repository_payload("My Service", slug="my-service")],
            },
            "/repositories/acme/my-service/commits": {"values": [], "size": 0},
        })

        result = await tool_registry.invoke(
            "list_repositories", {"include_commit_info": True}, context
        )

        assert "- Commit Count: 0" in result.text
        assert "- Latest Commit Hash: N/A" in result.text

    @pytest.mark.asyncio
    async def test_listing_failure_is_error_text(self, context, mock_client):
        mock_client.get.side_effect = BitbucketAPIError("API error: HTTP 500", status_code=500)

        result = await tool_registry.invoke("list_repositories", {}, context)

        assert result.is_error
        assert result.text == "Error fetching repositories: API error: HTTP 500"


class TestGetRepositoryDetails:
    """Test get_repository_details."""

    @pytest.mark.asyncio
    async def test_details_with_latest_commit(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme/api": repository_payload("api"),
            "/repositories/acme/api/commits": {"values": [commit_payload()], "size": 42},
        })

        result = await tool_registry.invoke(
            "get_repository_details", {"repository_name": "api"}, context
        )

        text = result.text
        assert text.startswith("**Repository Details: api**\n\n**Basic Information:**")
        assert "- Created: 2023-01-05 10:11:12 UTC" in text
        assert "- Last Updated: 2024-03-01 08:00:00 UTC" in text
        assert "**Commit Information:**" in text
        assert "- Total Commits: 42" in text
        assert "- Latest Commit Date: 2024-03-01 08:00:00 UTC" in text
        assert "- Latest Commit Hash: abc123" in text
        assert "- Latest Commit Author: Jane Doe" in text
        assert "- Latest Commit Message: Fix bug\n\nLonger body" in text

    @pytest.mark.asyncio
    async def test_details_without_commits(self, context, mock_client):
        mock_client.get.side_effect = _route({
            "/repositories/acme/empty": repository_payload("empty"),
            "/repositories/acme/empty/commits": {"values": []},
        })

        result = await tool_registry.invoke(
            "get_repository_details", {"repository_name": "empty"}, context
        )

        assert "- Total Commits: 0" in result.text
        assert "- Latest Commit Date: No commits" in result.text
        assert "- Latest Commit Hash: N/A" in result.text
        assert "- Latest Commit Author: N/A" in result.text

    @pytest.mark.asyncio
    async def test_missing_repository(self, context, mock_client):
        mock_client.get.side_effect = BitbucketAPIError("Not found: HTTP 404", status_code=404)

        result = await tool_registry.invoke(
            "get_repository_details", {"repository_name": "ghost"}, context
        )

        assert result.text == "Error fetching repository details: Not found: HTTP 404"


class TestGetRepositoryCommits:
    """Test get_repository_commits."""

    @pytest.mark.asyncio
    async def test_lists_commits_with_first_line_messages(self, context, mock_client):
        mock_client.get.return_value = {
            "values": [commit_payload("aaa"), commit_payload("bbb", "Second\nmore")],
            "size": 120,
        }

        result = await tool_registry.invoke(
            "get_repository_commits", {"repository_name": "api", "limit": 2}, context
        )

        mock_client.get.assert_awaited_once_with(
            "/repositories/acme/api/commits", params={"pagelen": 2}
        )
        text = result.text
        assert text.startswith(
            'Found 2 recent commits (out of 120 total) in repository "api"\n\n**Commit 1**'
        )
        assert "- Hash: aaa\n- Date: 2024-03-01 08:00:00 UTC\n- Author: Jane Doe\n- Message: Fix bug" in text
        assert "**Commit 2**\n- Hash: bbb" in text
        assert "- Message: Second" in text
        assert "more" not in text

    @pytest.mark.asyncio
    async def test_total_falls_back_to_page_length(self, context, mock_client):
        mock_client.get.return_value = {"values": [commit_payload()]}

        result = await tool_registry.invoke(
            "get_repository_commits", {"repository_name": "api"}, context
        )

        assert "Found 1 recent commits (out of 1 total)" in result.text
        assert mock_client.get.await_args.kwargs["params"] == {"pagelen": 50}
