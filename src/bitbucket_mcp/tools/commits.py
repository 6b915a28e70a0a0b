"""Single-commit lookup."""

import logging

from pydantic import Field

from ..models import DetailedCommit
from .base import ToolArguments, ToolContext, repository_name_field
from .formatting import format_datetime
from .registry import register_tool

logger = logging.getLogger(__name__)


class GetCommitArguments(ToolArguments):
    repository_name: str = repository_name_field()
    commit_hash: str = Field(min_length=1, description="The hash of the commit.")


@register_tool(
    name="get_commit",
    description="Get a single commit by its hash.",
    arguments=GetCommitArguments,
    action="fetching commit",
)
async def get_commit(ctx: ToolContext, args: GetCommitArguments) -> str:
    logger.info("Fetching commit %s for repository: %s", args.commit_hash, args.repository_name)

    data = await ctx.client.get(
        f"/repositories/{ctx.workspace}/{args.repository_name}/commit/{args.commit_hash}"
    )
    commit = DetailedCommit.model_validate(data)

    # No committer block means the author committed
    committer = commit.committer or commit.author
    return "\n".join([
        f"**Commit Details: {commit.hash}**",
        f"- Author: {commit.author.name}",
        f"- Committer: {committer.name}",
        f"- Date: {format_datetime(commit.date)}",
        f"- Message: {commit.message}",
        f"- Parents: {', '.join(parent.hash for parent in commit.parents)}",
    ])
