"""Branching model settings updates, repository- and project-scoped.

The settings object is forwarded to Bitbucket as given. Its schema below only
documents the shape for callers; nothing here checks it for consistency.
"""

import json
import logging
from typing import Any, Dict

from pydantic import Field

from .base import ToolArguments, ToolContext, project_key_field, repository_name_field
from .registry import register_tool

logger = logging.getLogger(__name__)

BRANCH_TYPE_KINDS = ["release", "hotfix", "feature", "bugfix"]

BRANCHING_MODEL_SETTINGS_PROPERTIES: Dict[str, Any] = {
    "development": {
        "type": "object",
        "properties": {
            "use_mainbranch": {"type": "boolean"},
            "name": {"type": "string"},
        },
    },
    "production": {
        "type": "object",
        "properties": {
            "enabled": {"type": "boolean"},
            "use_mainbranch": {"type": "boolean"},
            "name": {"type": "string"},
        },
    },
    "branch_types": {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "kind": {"type": "string", "enum": BRANCH_TYPE_KINDS},
                "enabled": {"type": "boolean"},
                "prefix": {"type": "string"},
            },
            "required": ["kind"],
        },
    },
}


def settings_field() -> Any:
    return Field(
        description=(
            "The branching model settings to update. Only passed properties will be "
            "updated. See Bitbucket API for details."
        ),
        json_schema_extra={"properties": BRANCHING_MODEL_SETTINGS_PROPERTIES},
    )


class RepositoryBranchingModelArguments(ToolArguments):
    repository_name: str = repository_name_field()
    settings: Dict[str, Any] = settings_field()


class ProjectBranchingModelArguments(ToolArguments):
    project_key: str = project_key_field()
    settings: Dict[str, Any] = settings_field()


def _updated(scope: str, name: str, response: Any) -> str:
    return (
        f'Successfully updated branching model settings for {scope} "{name}".\n\n'
        f"{json.dumps(response, indent=2)}"
    )


@register_tool(
    name="update_repository_branching_model_settings",
    description="Update the branching model configuration for a repository.",
    arguments=RepositoryBranchingModelArguments,
    action="updating repository branching model settings",
)
async def update_repository_branching_model_settings(
    ctx: ToolContext, args: RepositoryBranchingModelArguments
) -> str:
    logger.info("Updating branching model for repository: %s", args.repository_name)

    response = await ctx.client.put(
        f"/repositories/{ctx.workspace}/{args.repository_name}/branching-model/settings",
        json=args.settings,
    )
    return _updated("repository", args.repository_name, response)


@register_tool(
    name="update_project_branching_model_settings",
    description="Update the branching model configuration for a project.",
    arguments=ProjectBranchingModelArguments,
    action="updating project branching model settings",
)
async def update_project_branching_model_settings(
    ctx: ToolContext, args: ProjectBranchingModelArguments
) -> str:
    logger.info("Updating branching model for project: %s", args.project_key)

    response = await ctx.client.put(
        f"/workspaces/{ctx.workspace}/projects/{args.project_key}/branching-model/settings",
        json=args.settings,
    )
    return _updated("project", args.project_key, response)
