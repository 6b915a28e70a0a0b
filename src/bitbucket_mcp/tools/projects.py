"""Project tools."""

import logging

from ..models import Page, Project, User
from .base import ToolArguments, ToolContext, project_key_field
from .formatting import format_date, list_response, or_default, yes_no
from .registry import register_tool

logger = logging.getLogger(__name__)


class ProjectArguments(ToolArguments):
    project_key: str = project_key_field()


def _project_path(ctx: ToolContext, project_key: str) -> str:
    return f"/workspaces/{ctx.workspace}/projects/{project_key}"


@register_tool(
    name="get_project",
    description="Get a single project by its key.",
    arguments=ProjectArguments,
    action="fetching project",
)
async def get_project(ctx: ToolContext, args: ProjectArguments) -> str:
    logger.info("Fetching project: %s", args.project_key)

    project = Project.model_validate(await ctx.client.get(_project_path(ctx, args.project_key)))

    return "\n".join([
        f"**Project Details: {project.name}**",
        f"- Key: {project.key}",
        f"- Description: {or_default(project.description, 'No description')}",
        f"- Private: {yes_no(project.is_private)}",
        f"- Created: {format_date(project.created_on)}",
        f"- Updated: {format_date(project.updated_on)}",
        f"- URL: {project.links.html.href}",
    ])


@register_tool(
    name="list_default_reviewers",
    description="List default reviewers for a project.",
    arguments=ProjectArguments,
    action="fetching default reviewers",
)
async def list_default_reviewers(ctx: ToolContext, args: ProjectArguments) -> str:
    logger.info("Fetching default reviewers for project: %s", args.project_key)

    data = await ctx.client.get(f"{_project_path(ctx, args.project_key)}/default-reviewers")
    page = Page[dict].model_validate(data)
    # Entries are either users or {"user": {...}, "reviewer_type": ...} wrappers
    reviewers = [User.model_validate(item.get("user") or item) for item in page.values]

    return list_response(
        f'Found {len(reviewers)} default reviewers in project "{args.project_key}"',
        (f"- {reviewer.display_name} ({reviewer.nickname})" for reviewer in reviewers),
        separator="\n",
    )
