"""Pull request tools."""

import asyncio
from typing import Any, Dict, Literal, Optional

import structlog
from pydantic import Field

from .base import GitHubTool, Identifier, NonEmptyStr, PerPage, RepositoryArguments
from .errors import argument_or_unknown, repository_of
from .projection import (
    filter_by_query,
    project_comment,
    project_commit,
    project_file,
    project_pull_request_detail,
    project_pull_request_summary,
    ref_of,
)

logger = structlog.get_logger(__name__)


class PullNumberArguments(RepositoryArguments):
    pull_number: Identifier = Field(description="Pull request number")


class CreatePullRequestArguments(RepositoryArguments):
    title: NonEmptyStr = Field(description="PR title")
    head: NonEmptyStr = Field(description="Branch to merge FROM (e.g., 'feature-branch')")
    base: NonEmptyStr = Field(description="Branch to merge INTO (e.g., 'main')")
    body: Optional[str] = Field(None, description="PR body/description (optional)")
    draft: Optional[bool] = Field(None, description="Create as draft PR (optional)")
    maintainer_can_modify: Optional[bool] = Field(None, description="Allow maintainer edits (optional)")


class SearchPullRequestsArguments(RepositoryArguments):
    query: Optional[str] = Field(None, description="Text matched against title and body, case-insensitive (optional)")
    state: Optional[Literal["open", "closed", "all"]] = Field(None, description="PR state (optional, default: open)")
    sort: Optional[Literal["created", "updated", "popularity", "long-running"]] = Field(
        None, description="Sort by (optional)")
    direction: Optional[Literal["asc", "desc"]] = Field(None, description="Sort direction (optional)")
    per_page: Optional[PerPage] = Field(None, description="Results per page, 1-100 (optional, default: 30)")


class MergePullRequestArguments(PullNumberArguments):
    merge_method: Optional[Literal["merge", "squash", "rebase"]] = Field(
        None, description="Merge method (optional, default: merge)")
    commit_title: Optional[str] = Field(None, description="Custom commit title (optional)")
    commit_message: Optional[str] = Field(None, description="Custom commit message (optional)")


class GetPullRequestContextTool(GitHubTool):
    """MCP tool returning a pull request with its comments and commits."""

    name = "github_get_pr_context"
    description = "Get GitHub Pull Request context including title, body, comments, commits, and metadata"
    arguments_model = PullNumberArguments

    async def run(self, args: PullNumberArguments) -> Dict[str, Any]:
        # PR conversation comments live on the issue with the same number.
        pr, comments, commits = await asyncio.gather(
            self.client.get_pull_request(args.owner, args.repo, args.pull_number),
            self.client.list_issue_comments(args.owner, args.repo, args.pull_number),
            self.client.list_pull_request_commits(args.owner, args.repo, args.pull_number),
        )
        return {
            "pull_request": project_pull_request_detail(pr),
            "comments": [project_comment(comment) for comment in comments],
            "commits": [project_commit(commit) for commit in commits],
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to fetch PR #{argument_or_unknown(arguments, 'pull_number')} "
                f"from {repository_of(arguments)}")


class CreatePullRequestTool(GitHubTool):
    """MCP tool for opening a pull request."""

    name = "github_create_pr"
    description = "Create a new GitHub Pull Request"
    arguments_model = CreatePullRequestArguments

    async def run(self, args: CreatePullRequestArguments) -> Dict[str, Any]:
        pr = await self.client.create_pull_request(
            args.owner, args.repo, args.title, args.head, args.base,
            body=args.body, draft=args.draft, maintainer_can_modify=args.maintainer_can_modify
        )
        logger.info("Pull request created", repo=f"{args.owner}/{args.repo}", number=pr.get("number"))
        return {
            "success": True,
            "pull_request": {
                "number": pr.get("number"),
                "title": pr.get("title"),
                "state": pr.get("state"),
                "html_url": pr.get("html_url"),
                "draft": pr.get("draft"),
                "head": ref_of(pr.get("head")),
                "base": ref_of(pr.get("base")),
                "created_at": pr.get("created_at"),
            },
            "message": f"PR #{pr.get('number')} created successfully",
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to create PR "{argument_or_unknown(arguments, "title")}" in {repository_of(arguments)}'


class SearchPullRequestsTool(GitHubTool):
    """MCP tool searching a repository's pull requests."""

    name = "github_search_prs"
    description = "Search for pull requests in a repository with advanced filters"
    arguments_model = SearchPullRequestsArguments

    async def run(self, args: SearchPullRequestsArguments) -> Dict[str, Any]:
        items = await self.client.list_pull_requests(
            args.owner, args.repo,
            state=args.state or "open",
            sort=args.sort,
            direction=args.direction,
            per_page=self.page_size(args.per_page)
        )
        pull_requests = filter_by_query(items, args.query)
        return {
            "total_count": len(pull_requests),
            "pull_requests": [project_pull_request_summary(pr) for pr in pull_requests],
        }

    def failure_detail(self, arguments: Any) -> str:
        return f"Failed to search PRs in {repository_of(arguments)}"


class MergePullRequestTool(GitHubTool):
    """MCP tool for merging a pull request."""

    name = "github_merge_pr"
    description = "Merge a pull request"
    arguments_model = MergePullRequestArguments

    async def run(self, args: MergePullRequestArguments) -> Dict[str, Any]:
        result = await self.client.merge_pull_request(
            args.owner, args.repo, args.pull_number,
            merge_method=args.merge_method,
            commit_title=args.commit_title,
            commit_message=args.commit_message
        )
        logger.info("Pull request merged", repo=f"{args.owner}/{args.repo}", number=args.pull_number,
                    sha=result.get("sha"))
        return {
            "success": True,
            "merged": result.get("merged"),
            "sha": result.get("sha"),
            "message": result.get("message"),
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to merge PR #{argument_or_unknown(arguments, 'pull_number')} "
                f"in {repository_of(arguments)}")


class GetPullRequestDiffTool(GitHubTool):
    """MCP tool returning a pull request's unified diff."""

    name = "github_get_pr_diff"
    description = "Get the full diff of a pull request"
    arguments_model = PullNumberArguments

    async def run(self, args: PullNumberArguments) -> Dict[str, Any]:
        diff = await self.client.get_pull_request_diff(args.owner, args.repo, args.pull_number)
        return {"pull_number": args.pull_number, "diff": diff}

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to get diff for PR #{argument_or_unknown(arguments, 'pull_number')} "
                f"in {repository_of(arguments)}")


class GetPullRequestFilesTool(GitHubTool):
    """MCP tool listing the files a pull request touches."""

    name = "github_get_pr_files"
    description = "Get list of files changed in a pull request with details"
    arguments_model = PullNumberArguments

    async def run(self, args: PullNumberArguments) -> Dict[str, Any]:
        files = await self.client.list_pull_request_files(args.owner, args.repo, args.pull_number)
        return {
            "pull_number": args.pull_number,
            "total_files": len(files),
            "files": [project_file(file) for file in files],
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to get files for PR #{argument_or_unknown(arguments, 'pull_number')} "
                f"in {repository_of(arguments)}")
