"""Branch restriction tools."""

import logging

from pydantic import Field

from ..models import BranchRestriction, Page
from .base import ToolArguments, ToolContext, repository_name_field
from .formatting import join_names, list_response
from .registry import register_tool

logger = logging.getLogger(__name__)


class ListBranchRestrictionsArguments(ToolArguments):
    repository_name: str = repository_name_field()


class GetBranchRestrictionArguments(ToolArguments):
    repository_name: str = repository_name_field()
    restriction_id: str = Field(min_length=1, description="The ID of the branch restriction.")


def _restrictions_path(ctx: ToolContext, repository: str) -> str:
    return f"/repositories/{ctx.workspace}/{repository}/branch-restrictions"


@register_tool(
    name="list_branch_restrictions",
    description="List all branch restrictions for a repository.",
    arguments=ListBranchRestrictionsArguments,
    action="fetching branch restrictions",
)
async def list_branch_restrictions(ctx: ToolContext, args: ListBranchRestrictionsArguments) -> str:
    logger.info("Fetching branch restrictions for repository: %s", args.repository_name)

    data = await ctx.client.get(_restrictions_path(ctx, args.repository_name))
    restrictions = Page[BranchRestriction].model_validate(data).values

    return list_response(
        f'Found {len(restrictions)} branch restrictions in repository "{args.repository_name}"',
        (
            f"**Restriction {restriction.id}**\n"
            f"- Kind: {restriction.kind}\n"
            f"- Pattern: {restriction.pattern}"
            for restriction in restrictions
        ),
    )


@register_tool(
    name="get_branch_restriction",
    description="Get a single branch restriction by its ID.",
    arguments=GetBranchRestrictionArguments,
    action="fetching branch restriction",
)
async def get_branch_restriction(ctx: ToolContext, args: GetBranchRestrictionArguments) -> str:
    logger.info(
        "Fetching branch restriction %s for repository: %s",
        args.restriction_id, args.repository_name,
    )

    data = await ctx.client.get(
        f"{_restrictions_path(ctx, args.repository_name)}/{args.restriction_id}"
    )
    restriction = BranchRestriction.model_validate(data)

    return "\n".join([
        f"**Restriction Details: {restriction.id}**",
        f"- Kind: {restriction.kind}",
        f"- Pattern: {restriction.pattern}",
        f"- Users: {join_names(user.display_name for user in restriction.users or [])}",
        f"- Groups: {join_names(group.name for group in restriction.groups or [])}",
    ])
