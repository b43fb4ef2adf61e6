"""Branch tools: listing, creation, deletion and comparison."""

from typing import Any, Dict, Optional

import structlog
from pydantic import Field

from ..github.client import GitHubOperationError
from .base import GitHubTool, NonEmptyStr, PerPage, RepositoryArguments
from .errors import argument_or_unknown, repository_of
from .projection import project_branch, project_comparison

logger = structlog.get_logger(__name__)


class ListBranchesArguments(RepositoryArguments):
    protected: Optional[bool] = Field(None, description="Filter by protected status (optional)")
    per_page: Optional[PerPage] = Field(None, description="Results per page, 1-100 (optional, default: 30)")


class CreateBranchArguments(RepositoryArguments):
    branch: NonEmptyStr = Field(description="New branch name")
    ref: NonEmptyStr = Field(description="Source branch name or commit SHA (e.g., 'main' or 'abc123')")


class DeleteBranchArguments(RepositoryArguments):
    branch: NonEmptyStr = Field(description="Branch name to delete")


class CompareBranchesArguments(RepositoryArguments):
    base: NonEmptyStr = Field(description="Base branch name")
    head: NonEmptyStr = Field(description="Head branch name to compare")


class ListBranchesTool(GitHubTool):
    """MCP tool listing repository branches."""

    name = "github_list_branches"
    description = "List all branches in the repository"
    arguments_model = ListBranchesArguments

    async def run(self, args: ListBranchesArguments) -> Dict[str, Any]:
        branches = await self.client.list_branches(
            args.owner, args.repo,
            protected=args.protected,
            per_page=self.page_size(args.per_page)
        )
        return {
            "success": True,
            "count": len(branches),
            "branches": [project_branch(branch) for branch in branches],
        }

    def failure_detail(self, arguments: Any) -> str:
        return f"Failed to list branches for {repository_of(arguments)}"


class CreateBranchTool(GitHubTool):
    """MCP tool creating a branch from another branch or from a commit SHA."""

    name = "github_create_branch"
    description = "Create a new branch from an existing branch or commit"
    arguments_model = CreateBranchArguments

    async def resolve_sha(self, owner: str, repo: str, ref: str) -> str:
        """Resolve ``ref`` as a branch name first, then as a commit SHA."""
        try:
            source = await self.client.get_branch_ref(owner, repo, ref)
            return source["object"]["sha"]
        except GitHubOperationError as e:
            logger.debug("Ref is not a branch, trying commit", ref=ref, status=e.status)
        commit = await self.client.get_commit(owner, repo, ref)
        return commit["sha"]

    async def run(self, args: CreateBranchArguments) -> Dict[str, Any]:
        sha = await self.resolve_sha(args.owner, args.repo, args.ref)
        created = await self.client.create_ref(args.owner, args.repo, f"refs/heads/{args.branch}", sha)
        logger.info("Branch created", repo=f"{args.owner}/{args.repo}", branch=args.branch, sha=sha)
        return {
            "success": True,
            "branch": {
                "name": args.branch,
                "ref": created.get("ref"),
                "sha": (created.get("object") or {}).get("sha"),
                "url": created.get("url"),
            },
            "message": f'Branch "{args.branch}" created successfully from "{args.ref}"',
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to create branch "{argument_or_unknown(arguments, "branch")}" in {repository_of(arguments)}'


class DeleteBranchTool(GitHubTool):
    """MCP tool deleting a branch."""

    name = "github_delete_branch"
    description = "Delete a branch from the repository"
    arguments_model = DeleteBranchArguments

    async def run(self, args: DeleteBranchArguments) -> Dict[str, Any]:
        await self.client.delete_branch_ref(args.owner, args.repo, args.branch)
        logger.info("Branch deleted", repo=f"{args.owner}/{args.repo}", branch=args.branch)
        return {
            "success": True,
            "message": f'Branch "{args.branch}" deleted successfully from {args.owner}/{args.repo}',
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to delete branch "{argument_or_unknown(arguments, "branch")}" from {repository_of(arguments)}'


class CompareBranchesTool(GitHubTool):
    """MCP tool comparing two branches."""

    name = "github_compare_branches"
    description = "Compare two branches and show the differences"
    arguments_model = CompareBranchesArguments

    async def run(self, args: CompareBranchesArguments) -> Dict[str, Any]:
        comparison = await self.client.compare(args.owner, args.repo, args.base, args.head)
        ahead_by = comparison.get("ahead_by")
        behind_by = comparison.get("behind_by")
        return {
            "success": True,
            "comparison": project_comparison(comparison),
            "message": (f"Comparing {args.base}...{args.head}: "
                        f"{ahead_by} commits ahead, {behind_by} commits behind"),
        }

    def failure_detail(self, arguments: Any) -> str:
        base = argument_or_unknown(arguments, "base")
        head = argument_or_unknown(arguments, "head")
        return f"Failed to compare branches {base}...{head} in {repository_of(arguments)}"
