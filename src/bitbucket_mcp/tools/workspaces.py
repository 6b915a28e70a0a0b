"""Workspace listing."""

import logging

from ..models import Page, Workspace
from .base import ToolArguments, ToolContext
from .formatting import list_response, yes_no
from .registry import register_tool

logger = logging.getLogger(__name__)


class ListWorkspacesArguments(ToolArguments):
    pass


@register_tool(
    name="list_workspaces",
    description="List all workspaces accessible by the current user.",
    arguments=ListWorkspacesArguments,
    action="fetching workspaces",
)
async def list_workspaces(ctx: ToolContext, args: ListWorkspacesArguments) -> str:
    logger.info("Fetching workspaces")

    workspaces = Page[Workspace].model_validate(await ctx.client.get("/workspaces")).values

    return list_response(
        f"Found {len(workspaces)} workspaces.",
        (
            f"**{workspace.name}**\n"
            f"- Slug: {workspace.slug}\n"
            f"- Private: {yes_no(workspace.is_private)}"
            for workspace in workspaces
        ),
    )
