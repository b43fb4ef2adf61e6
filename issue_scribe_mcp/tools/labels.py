"""Repository label tools."""

from typing import Annotated, Any, Dict, Optional

import structlog
from pydantic import Field

from .base import GitHubTool, NonEmptyStr, PerPage, RepositoryArguments
from .errors import argument_or_unknown, repository_of
from .projection import project_label

logger = structlog.get_logger(__name__)

HexColor = Annotated[str, Field(pattern=r"^[0-9A-Fa-f]{6}$")]


class CreateLabelArguments(RepositoryArguments):
    name: NonEmptyStr = Field(description="Label name")
    color: HexColor = Field(description="Hex color code without '#' (e.g., 'FF0000' for red)")
    description: Optional[str] = Field(None, description="Label description (optional)")


class UpdateLabelArguments(RepositoryArguments):
    name: NonEmptyStr = Field(description="Current label name to update")
    new_name: Optional[NonEmptyStr] = Field(None, description="New label name (optional)")
    color: Optional[HexColor] = Field(None, description="New hex color code without '#' (optional)")
    description: Optional[str] = Field(None, description="New description (optional)")


class DeleteLabelArguments(RepositoryArguments):
    name: NonEmptyStr = Field(description="Label name to delete")


class ListLabelsArguments(RepositoryArguments):
    per_page: Optional[PerPage] = Field(None, description="Results per page, 1-100 (optional, default: 30)")


class CreateLabelTool(GitHubTool):
    """MCP tool creating a repository label."""

    name = "github_create_label"
    description = "Create a new label in the repository"
    arguments_model = CreateLabelArguments

    async def run(self, args: CreateLabelArguments) -> Dict[str, Any]:
        label = await self.client.create_label(args.owner, args.repo, args.name, args.color,
                                               description=args.description)
        logger.info("Label created", repo=f"{args.owner}/{args.repo}", label=args.name)
        return {
            "success": True,
            "label": project_label(label),
            "message": f'Label "{args.name}" created successfully',
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to create label "{argument_or_unknown(arguments, "name")}" in {repository_of(arguments)}'


class UpdateLabelTool(GitHubTool):
    """MCP tool renaming, recoloring or redescribing a label."""

    name = "github_update_label"
    description = "Update an existing label (name, color, or description)"
    arguments_model = UpdateLabelArguments

    async def run(self, args: UpdateLabelArguments) -> Dict[str, Any]:
        label = await self.client.update_label(
            args.owner, args.repo, args.name,
            new_name=args.new_name, color=args.color, description=args.description
        )
        return {
            "success": True,
            "label": project_label(label),
            "message": f'Label "{args.name}" updated successfully',
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to update label "{argument_or_unknown(arguments, "name")}" in {repository_of(arguments)}'


class DeleteLabelTool(GitHubTool):
    """MCP tool deleting a label."""

    name = "github_delete_label"
    description = "Delete a label from the repository"
    arguments_model = DeleteLabelArguments

    async def run(self, args: DeleteLabelArguments) -> Dict[str, Any]:
        await self.client.delete_label(args.owner, args.repo, args.name)
        logger.info("Label deleted", repo=f"{args.owner}/{args.repo}", label=args.name)
        return {
            "success": True,
            "message": f'Label "{args.name}" deleted successfully from {args.owner}/{args.repo}',
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to delete label "{argument_or_unknown(arguments, "name")}" from {repository_of(arguments)}'


class ListLabelsTool(GitHubTool):
    """MCP tool listing repository labels."""

    name = "github_list_labels"
    description = "List all labels in the repository"
    arguments_model = ListLabelsArguments

    async def run(self, args: ListLabelsArguments) -> Dict[str, Any]:
        labels = await self.client.list_labels(args.owner, args.repo, per_page=self.page_size(args.per_page))
        return {
            "success": True,
            "count": len(labels),
            "labels": [project_label(label) for label in labels],
        }

    def failure_detail(self, arguments: Any) -> str:
        return f"Failed to list labels for {repository_of(arguments)}"
