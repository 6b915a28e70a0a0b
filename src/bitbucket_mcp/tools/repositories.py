"""Repository tools: listing, details and commit history."""

import asyncio
import logging

from pydantic import Field

from ..models import Commit, Page, Repository, RepositoryWithCommitInfo
from .base import ToolArguments, ToolContext, limit_field, repository_name_field
from .formatting import (
    format_date,
    format_datetime,
    format_size,
    list_response,
    or_default,
    yes_no,
)
from .registry import register_tool

logger = logging.getLogger(__name__)


class ListRepositoriesArguments(ToolArguments):
    include_commit_info: bool = Field(
        default=False,
        description="Whether to include commit count and latest commit information for each repository",
    )
    limit: int = limit_field("repositories")


class RepositoryArguments(ToolArguments):
    repository_name: str = repository_name_field()


class RepositoryCommitsArguments(ToolArguments):
    repository_name: str = repository_name_field()
    limit: int = limit_field("commits")


def _repository_path(ctx: ToolContext, repository: str) -> str:
    return f"/repositories/{ctx.workspace}/{repository}"


# ── list_repositories ────────────────────────────────────────────────

@register_tool(
    name="list_repositories",
    description="List all repositories in the configured Bitbucket workspace",
    arguments=ListRepositoriesArguments,
    action="fetching repositories",
)
async def list_repositories(ctx: ToolContext, args: ListRepositoriesArguments) -> str:
    logger.info("Fetching repositories for workspace: %s", ctx.workspace)

    data = await ctx.client.get(
        f"/repositories/{ctx.workspace}",
        params={"pagelen": args.limit, "sort": "-updated_on"},
    )
    repositories = Page[RepositoryWithCommitInfo].model_validate(data).values

    if args.include_commit_info:
        logger.info("Fetching commit information for %d repositories", len(repositories))
        # gather preserves input order
        repositories = list(await asyncio.gather(
            *(_with_commit_info(ctx, repo) for repo in repositories)
        ))

    summary = f'Found {len(repositories)} repositories in workspace "{ctx.workspace}"'
    if args.include_commit_info:
        summary += " (with commit information)"

    return list_response(
        summary,
        (_format_repository(repo, args.include_commit_info) for repo in repositories),
    )


async def _with_commit_info(ctx: ToolContext, repo: RepositoryWithCommitInfo) -> RepositoryWithCommitInfo:
    """Attach latest-commit fields and the commit count to one repository.

    Failures degrade the record (count 0, no commit fields) instead of
    failing the whole listing.
    """
    commits_path = f"{_repository_path(ctx, repo.path_slug)}/commits"
    try:
        latest_page = Page[Commit].model_validate(
            await ctx.client.get(commits_path, params={"pagelen": 1})
        )
        # Same request again, read only for the total size
        count_page = Page[Commit].model_validate(
            await ctx.client.get(commits_path, params={"pagelen": 1})
        )
    except Exception as e:
        logger.warning("Error fetching commit info for %s: %s", repo.name, e)
        return repo.model_copy(update={"commit_count": 0})

    latest = latest_page.values[0] if latest_page.values else None
    return repo.model_copy(update={
        "commit_count": count_page.size or 0,
        "latest_commit_date": latest.date if latest else None,
        "latest_commit_hash": latest.hash if latest else None,
        "latest_commit_message": latest.message if latest else None,
        "latest_commit_author": latest.author.name if latest else None,
    })


def _format_repository(repo: RepositoryWithCommitInfo, include_commit_info: bool) -> str:
    lines = [
        f"**{repo.name}**",
        f"- Full Name: {repo.full_name}",
        f"- Description: {or_default(repo.description, 'No description')}",
        f"- Language: {or_default(repo.language, 'Not specified')}",
        f"- Size: {format_size(repo.size)}",
        f"- Private: {yes_no(repo.is_private)}",
        f"- Created: {format_date(repo.created_on)}",
        f"- Updated: {format_date(repo.updated_on)}",
        f"- URL: {repo.links.html.href}",
    ]
    if include_commit_info:
        lines.extend([
            f"- Commit Count: {repo.commit_count or 0}",
            f"- Latest Commit: {format_date(repo.latest_commit_date, missing='No commits')}",
            f"- Latest Commit Hash: {or_default(repo.latest_commit_hash, 'N/A')}",
            f"- Latest Commit Author: {or_default(repo.latest_commit_author, 'N/A')}",
            f"- Latest Commit Message: {or_default(repo.latest_commit_message, 'N/A')}",
        ])
    return "\n".join(lines)


# ── get_repository_details ───────────────────────────────────────────

@register_tool(
    name="get_repository_details",
    description="Get detailed information about a specific repository including latest commit info",
    arguments=RepositoryArguments,
    action="fetching repository details",
)
async def get_repository_details(ctx: ToolContext, args: RepositoryArguments) -> str:
    logger.info("Fetching details for repository: %s", args.repository_name)

    path = _repository_path(ctx, args.repository_name)
    repo_data, commits_data = await asyncio.gather(
        ctx.client.get(path),
        ctx.client.get(f"{path}/commits", params={"pagelen": 1}),
    )

    repo = Repository.model_validate(repo_data)
    commits = Page[Commit].model_validate(commits_data)
    latest = commits.values[0] if commits.values else None

    return "\n".join([
        f"**Repository Details: {repo.name}**",
        "",
        "**Basic Information:**",
        f"- Full Name: {repo.full_name}",
        f"- Description: {or_default(repo.description, 'No description')}",
        f"- Language: {or_default(repo.language, 'Not specified')}",
        f"- Size: {format_size(repo.size)}",
        f"- Private: {yes_no(repo.is_private)}",
        f"- Created: {format_datetime(repo.created_on)}",
        f"- Last Updated: {format_datetime(repo.updated_on)}",
        f"- URL: {repo.links.html.href}",
        "",
        "**Commit Information:**",
        f"- Total Commits: {commits.size or 0}",
        f"- Latest Commit Date: {format_datetime(latest.date if latest else None, missing='No commits')}",
        f"- Latest Commit Hash: {or_default(latest.hash if latest else None, 'N/A')}",
        f"- Latest Commit Author: {or_default(latest.author.name if latest else None, 'N/A')}",
        f"- Latest Commit Message: {or_default(latest.message if latest else None, 'N/A')}",
    ])


# ── get_repository_commits ───────────────────────────────────────────

@register_tool(
    name="get_repository_commits",
    description="Get commit information for a specific repository",
    arguments=RepositoryCommitsArguments,
    action="fetching repository commits",
)
async def get_repository_commits(ctx: ToolContext, args: RepositoryCommitsArguments) -> str:
    logger.info("Fetching commits for repository: %s", args.repository_name)

    data = await ctx.client.get(
        f"{_repository_path(ctx, args.repository_name)}/commits",
        params={"pagelen": args.limit},
    )
    page = Page[Commit].model_validate(data)
    commits = page.values
    total = page.size or len(commits)

    summary = (
        f"Found {len(commits)} recent commits (out of {total} total) "
        f'in repository "{args.repository_name}"'
    )
    return list_response(
        summary,
        (
            "\n".join([
                f"**Commit {index}**",
                f"- Hash: {commit.hash}",
                f"- Date: {format_datetime(commit.date)}",
                f"- Author: {commit.author.name}",
                f"- Message: {commit.summary}",
            ])
            for index, commit in enumerate(commits, start=1)
        ),
    )
