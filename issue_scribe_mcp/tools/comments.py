"""Comment and reaction tools for issues and pull requests."""

from typing import Any, Dict, Literal, Optional

import structlog
from pydantic import Field, model_validator

from .base import GitHubTool, Identifier, NonEmptyStr, RepositoryArguments
from .errors import UNKNOWN, argument_or_unknown, repository_of
from .projection import login_of, project_reaction

logger = structlog.get_logger(__name__)

# Tool-facing reaction names and their GitHub API content values
REACTION_MAP = {
    "thumbs_up": "+1",
    "thumbs_down": "-1",
    "laugh": "laugh",
    "confused": "confused",
    "heart": "heart",
    "hooray": "hooray",
    "rocket": "rocket",
    "eyes": "eyes",
}

ReactionName = Literal["thumbs_up", "thumbs_down", "laugh", "confused", "heart", "hooray", "rocket", "eyes"]


class AddCommentArguments(RepositoryArguments):
    issue_number: Identifier = Field(description="Issue or PR number")
    body: NonEmptyStr = Field(description="Comment body text")


class UpdateCommentArguments(RepositoryArguments):
    comment_id: Identifier = Field(description="Comment ID to update")
    body: NonEmptyStr = Field(description="New comment body text")


class DeleteCommentArguments(RepositoryArguments):
    comment_id: Identifier = Field(description="Comment ID to delete")


class AddReactionArguments(RepositoryArguments):
    comment_id: Optional[Identifier] = Field(
        None, description="Comment ID to react to (optional if issue_number is provided; takes precedence)")
    issue_number: Optional[Identifier] = Field(
        None, description="Issue/PR number to react to (optional if comment_id is provided)")
    reaction: ReactionName = Field(
        description="Reaction type: thumbs_up 👍, thumbs_down 👎, laugh 😄, confused 😕, "
                    "heart ❤️, hooray 🎉, rocket 🚀, eyes 👀")

    @model_validator(mode="after")
    def require_target(self) -> "AddReactionArguments":
        if self.comment_id is None and self.issue_number is None:
            raise ValueError("Either comment_id or issue_number must be provided")
        return self


def reaction_target(comment_id: Any, issue_number: Any) -> str:
    """Describe what a reaction is attached to; a comment wins over an issue."""
    if comment_id is not None and comment_id != UNKNOWN:
        return f"comment #{comment_id}"
    if issue_number is not None and issue_number != UNKNOWN:
        return f"issue/PR #{issue_number}"
    return UNKNOWN


class AddCommentTool(GitHubTool):
    """MCP tool adding a comment to an issue or pull request."""

    name = "github_add_comment"
    description = "Add a comment to a GitHub Issue or Pull Request"
    arguments_model = AddCommentArguments

    async def run(self, args: AddCommentArguments) -> Dict[str, Any]:
        comment = await self.client.create_issue_comment(args.owner, args.repo, args.issue_number, args.body)
        logger.info("Comment added", repo=f"{args.owner}/{args.repo}", number=args.issue_number,
                    comment_id=comment.get("id"))
        return {
            "success": True,
            "comment": {
                "id": comment.get("id"),
                "body": comment.get("body"),
                "user": login_of(comment.get("user")),
                "html_url": comment.get("html_url"),
                "created_at": comment.get("created_at"),
            },
            "message": f"Comment added successfully to issue/PR #{args.issue_number}",
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to add comment to issue/PR #{argument_or_unknown(arguments, 'issue_number')} "
                f"in {repository_of(arguments)}")


class UpdateCommentTool(GitHubTool):
    """MCP tool replacing the text of an existing comment."""

    name = "github_update_comment"
    description = "Update an existing comment on a GitHub Issue or Pull Request"
    arguments_model = UpdateCommentArguments

    async def run(self, args: UpdateCommentArguments) -> Dict[str, Any]:
        comment = await self.client.update_issue_comment(args.owner, args.repo, args.comment_id, args.body)
        return {
            "success": True,
            "comment": {
                "id": comment.get("id"),
                "body": comment.get("body"),
                "user": login_of(comment.get("user")),
                "html_url": comment.get("html_url"),
                "updated_at": comment.get("updated_at"),
            },
            "message": f"Comment #{args.comment_id} updated successfully",
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to update comment #{argument_or_unknown(arguments, 'comment_id')} "
                f"in {repository_of(arguments)}")


class DeleteCommentTool(GitHubTool):
    """MCP tool deleting a comment."""

    name = "github_delete_comment"
    description = "Delete a comment from a GitHub Issue or Pull Request"
    arguments_model = DeleteCommentArguments

    async def run(self, args: DeleteCommentArguments) -> Dict[str, Any]:
        await self.client.delete_issue_comment(args.owner, args.repo, args.comment_id)
        logger.info("Comment deleted", repo=f"{args.owner}/{args.repo}", comment_id=args.comment_id)
        return {
            "success": True,
            "message": f"Comment #{args.comment_id} deleted successfully",
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to delete comment #{argument_or_unknown(arguments, 'comment_id')} "
                f"in {repository_of(arguments)}")


class AddReactionTool(GitHubTool):
    """MCP tool adding an emoji reaction to a comment or directly to an issue/PR.

    When both ``comment_id`` and ``issue_number`` are given the reaction goes
    to the comment.
    """

    name = "github_add_reaction"
    description = ("Add a reaction (emoji) to a comment or an issue/PR directly. "
                   "Provide either comment_id OR issue_number; comment_id wins if both are given.")
    arguments_model = AddReactionArguments

    async def run(self, args: AddReactionArguments) -> Dict[str, Any]:
        content = REACTION_MAP[args.reaction]
        if args.comment_id is not None:
            reaction = await self.client.create_comment_reaction(args.owner, args.repo, args.comment_id, content)
        else:
            reaction = await self.client.create_issue_reaction(args.owner, args.repo, args.issue_number, content)
        target = reaction_target(args.comment_id, args.issue_number)
        return {
            "success": True,
            "reaction": project_reaction(reaction),
            "message": f'Reaction "{args.reaction}" added successfully to {target}',
        }

    def failure_detail(self, arguments: Any) -> str:
        target = reaction_target(argument_or_unknown(arguments, "comment_id"),
                                 argument_or_unknown(arguments, "issue_number"))
        return (f'Failed to add reaction "{argument_or_unknown(arguments, "reaction")}" '
                f"to {target} in {repository_of(arguments)}")
