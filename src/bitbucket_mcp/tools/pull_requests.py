"""Pull request tools.

create/update require only the fields they name; any other argument is
passed through to the Bitbucket request body untouched.
"""

import logging
from typing import Any, Dict, Literal, Optional

from pydantic import ConfigDict, Field

from ..models import Page, PullRequest
from .base import ToolArguments, ToolContext, repository_name_field
from .formatting import list_response
from .registry import register_tool

logger = logging.getLogger(__name__)

PullRequestState = Literal["OPEN", "MERGED", "DECLINED"]


class ListPullRequestsArguments(ToolArguments):
    repository_name: str = repository_name_field()
    state: Optional[PullRequestState] = Field(
        default=None, description="The state of the pull request."
    )


class GetPullRequestArguments(ToolArguments):
    repository_name: str = repository_name_field()
    pull_request_id: str = Field(min_length=1, description="The ID of the pull request.")


class CreatePullRequestArguments(ToolArguments):
    model_config = ConfigDict(extra="allow")

    repository_name: str = repository_name_field()
    title: str = Field(min_length=1, description="The title of the pull request.")
    source_branch: str = Field(min_length=1, description="The source branch of the pull request.")
    destination_branch: Optional[str] = Field(
        default=None, description="The destination branch of the pull request."
    )
    description: Optional[str] = Field(
        default=None, description="The description of the pull request."
    )


class UpdatePullRequestArguments(ToolArguments):
    model_config = ConfigDict(extra="allow")

    repository_name: str = repository_name_field()
    pull_request_id: str = Field(min_length=1, description="The ID of the pull request.")
    title: Optional[str] = Field(default=None, description="The new title of the pull request.")
    description: Optional[str] = Field(
        default=None, description="The new description of the pull request."
    )


def _pull_requests_path(ctx: ToolContext, repository: str) -> str:
    return f"/repositories/{ctx.workspace}/{repository}/pullrequests"


def _format_pull_request(pr: PullRequest, heading: str = "", include_description: bool = False) -> str:
    lines = [
        f"**{heading}PR #{pr.id}: {pr.title}**",
        f"- State: {pr.state}",
        f"- Author: {pr.author.display_name}",
        f"- Source: {pr.source.branch.name}",
        f"- Destination: {pr.destination.branch.name}",
    ]
    if include_description:
        lines.append(f"- Description: {pr.description or ''}")
    lines.append(f"- URL: {pr.links.html.href}")
    return "\n".join(lines)


@register_tool(
    name="list_pull_requests",
    description="List all pull requests in a repository.",
    arguments=ListPullRequestsArguments,
    action="fetching pull requests",
)
async def list_pull_requests(ctx: ToolContext, args: ListPullRequestsArguments) -> str:
    logger.info("Fetching pull requests for repository: %s", args.repository_name)

    data = await ctx.client.get(
        _pull_requests_path(ctx, args.repository_name),
        params={"state": args.state},
    )
    pull_requests = Page[PullRequest].model_validate(data).values

    summary = f'Found {len(pull_requests)} pull requests in repository "{args.repository_name}"'
    if args.state:
        summary += f" with state {args.state}"

    return list_response(summary, (_format_pull_request(pr) for pr in pull_requests))


@register_tool(
    name="get_pull_request",
    description="Get a single pull request by its ID.",
    arguments=GetPullRequestArguments,
    action="fetching pull request",
)
async def get_pull_request(ctx: ToolContext, args: GetPullRequestArguments) -> str:
    logger.info(
        "Fetching pull request %s for repository: %s",
        args.pull_request_id, args.repository_name,
    )

    data = await ctx.client.get(
        f"{_pull_requests_path(ctx, args.repository_name)}/{args.pull_request_id}"
    )
    return _format_pull_request(PullRequest.model_validate(data), include_description=True)


@register_tool(
    name="create_pull_request",
    description="Create a new pull request.",
    arguments=CreatePullRequestArguments,
    action="creating pull request",
)
async def create_pull_request(ctx: ToolContext, args: CreatePullRequestArguments) -> str:
    logger.info("Creating pull request in repository: %s", args.repository_name)

    body: Dict[str, Any] = dict(args.model_extra or {})
    body["title"] = args.title
    body["source"] = {"branch": {"name": args.source_branch}}
    # Without a destination Bitbucket targets the repository's main branch
    if args.destination_branch:
        body["destination"] = {"branch": {"name": args.destination_branch}}
    if args.description is not None:
        body["description"] = args.description

    data = await ctx.client.post(_pull_requests_path(ctx, args.repository_name), json=body)
    return _format_pull_request(PullRequest.model_validate(data), heading="Successfully created ")


@register_tool(
    name="update_pull_request",
    description="Update an existing pull request.",
    arguments=UpdatePullRequestArguments,
    action="updating pull request",
)
async def update_pull_request(ctx: ToolContext, args: UpdatePullRequestArguments) -> str:
    logger.info(
        "Updating pull request %s in repository: %s",
        args.pull_request_id, args.repository_name,
    )

    body: Dict[str, Any] = dict(args.model_extra or {})
    if args.title is not None:
        body["title"] = args.title
    if args.description is not None:
        body["description"] = args.description

    data = await ctx.client.put(
        f"{_pull_requests_path(ctx, args.repository_name)}/{args.pull_request_id}",
        json=body,
    )
    return _format_pull_request(PullRequest.model_validate(data), heading="Successfully updated ")
