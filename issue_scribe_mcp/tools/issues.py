"""Issue tools: context, creation, updates, search and recent listings."""

import asyncio
from typing import Any, Dict, List, Literal, Optional

import structlog
from pydantic import Field

from .base import GitHubTool, Identifier, NonEmptyStr, PerPage, RepositoryArguments
from .errors import argument_or_unknown, repository_of
from .projection import (
    filter_by_query,
    only_issues,
    project_comment,
    project_issue_detail,
    project_issue_summary,
)

logger = structlog.get_logger(__name__)

IssueState = Literal["open", "closed", "all"]


class GetIssueContextArguments(RepositoryArguments):
    issue_number: Identifier = Field(description="Issue number")


class CreateIssueArguments(RepositoryArguments):
    title: NonEmptyStr = Field(description="Issue title")
    body: Optional[str] = Field(None, description="Issue body (optional)")
    labels: Optional[List[NonEmptyStr]] = Field(None, description="Labels to add (optional)")
    assignees: Optional[List[NonEmptyStr]] = Field(None, description="Assignees (optional)")


class UpdateIssueArguments(RepositoryArguments):
    issue_number: Identifier = Field(description="Issue number")
    title: Optional[NonEmptyStr] = Field(None, description="New title (optional)")
    body: Optional[str] = Field(None, description="New body (optional)")
    state: Optional[Literal["open", "closed"]] = Field(None, description="Issue state (optional)")
    labels: Optional[List[NonEmptyStr]] = Field(None, description="New labels, replacing the current ones (optional)")
    assignees: Optional[List[NonEmptyStr]] = Field(None, description="New assignees (optional)")


class SearchIssuesArguments(RepositoryArguments):
    query: Optional[str] = Field(None, description="Text matched against title and body, case-insensitive (optional)")
    state: Optional[IssueState] = Field(None, description="Issue state (optional, default: open)")
    labels: Optional[List[NonEmptyStr]] = Field(None, description="Filter by labels (optional)")
    sort: Optional[Literal["created", "updated", "comments"]] = Field(None, description="Sort by (optional)")
    direction: Optional[Literal["asc", "desc"]] = Field(None, description="Sort direction (optional)")
    per_page: Optional[PerPage] = Field(None, description="Results per page, 1-100 (optional, default: 30)")


class ListRecentIssuesArguments(RepositoryArguments):
    state: Optional[IssueState] = Field(None, description="Issue state (optional, default: open)")
    sort: Optional[Literal["created", "updated"]] = Field(None, description="Sort by (optional, default: created)")
    per_page: Optional[PerPage] = Field(None, description="Results per page, 1-100 (optional, default: 30)")


class GetIssueContextTool(GitHubTool):
    """MCP tool returning an issue together with its comments."""

    name = "github_get_issue_context"
    description = "Get GitHub Issue context including title, body, comments, and metadata"
    arguments_model = GetIssueContextArguments

    async def run(self, args: GetIssueContextArguments) -> Dict[str, Any]:
        issue, comments = await asyncio.gather(
            self.client.get_issue(args.owner, args.repo, args.issue_number),
            self.client.list_issue_comments(args.owner, args.repo, args.issue_number),
        )
        return {
            "issue": project_issue_detail(issue),
            "comments": [project_comment(comment) for comment in comments],
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to fetch issue #{argument_or_unknown(arguments, 'issue_number')} "
                f"from {repository_of(arguments)}")


class CreateIssueTool(GitHubTool):
    """MCP tool for opening a new issue."""

    name = "github_create_issue"
    description = "Create a new GitHub Issue"
    arguments_model = CreateIssueArguments

    async def run(self, args: CreateIssueArguments) -> Dict[str, Any]:
        issue = await self.client.create_issue(
            args.owner, args.repo, args.title,
            body=args.body, labels=args.labels, assignees=args.assignees
        )
        logger.info("Issue created", repo=f"{args.owner}/{args.repo}", number=issue.get("number"))
        return {
            "success": True,
            "issue": {
                "number": issue.get("number"),
                "title": issue.get("title"),
                "state": issue.get("state"),
                "html_url": issue.get("html_url"),
                "created_at": issue.get("created_at"),
            },
            "message": f"Issue #{issue.get('number')} created successfully",
        }

    def failure_detail(self, arguments: Any) -> str:
        return f'Failed to create issue "{argument_or_unknown(arguments, "title")}" in {repository_of(arguments)}'


class UpdateIssueTool(GitHubTool):
    """MCP tool for editing an issue's title, body, state, labels or assignees."""

    name = "github_update_issue"
    description = "Update an existing GitHub Issue"
    arguments_model = UpdateIssueArguments

    async def run(self, args: UpdateIssueArguments) -> Dict[str, Any]:
        fields = args.model_dump(include={"title", "body", "state", "labels", "assignees"}, exclude_none=True)
        issue = await self.client.update_issue(args.owner, args.repo, args.issue_number, **fields)
        logger.info("Issue updated", repo=f"{args.owner}/{args.repo}", number=args.issue_number,
                    fields=sorted(fields))
        return {
            "success": True,
            "issue": {
                "number": issue.get("number"),
                "title": issue.get("title"),
                "state": issue.get("state"),
                "html_url": issue.get("html_url"),
                "updated_at": issue.get("updated_at"),
            },
            "message": f"Issue #{issue.get('number')} updated successfully",
        }

    def failure_detail(self, arguments: Any) -> str:
        return (f"Failed to update issue #{argument_or_unknown(arguments, 'issue_number')} "
                f"in {repository_of(arguments)}")


class SearchIssuesTool(GitHubTool):
    """MCP tool searching a repository's issues, excluding pull requests."""

    name = "github_search_issues"
    description = "Search for issues in a repository with advanced filters"
    arguments_model = SearchIssuesArguments

    async def run(self, args: SearchIssuesArguments) -> Dict[str, Any]:
        items = await self.client.list_issues(
            args.owner, args.repo,
            state=args.state or "open",
            labels=args.labels,
            sort=args.sort,
            direction=args.direction,
            per_page=self.page_size(args.per_page)
        )
        issues = filter_by_query(only_issues(items), args.query)
        return {
            "total_count": len(issues),
            "issues": [project_issue_summary(issue) for issue in issues],
        }

    def failure_detail(self, arguments: Any) -> str:
        return f"Failed to search issues in {repository_of(arguments)}"


class ListRecentIssuesTool(GitHubTool):
    """MCP tool listing the newest (or most recently updated) issues."""

    name = "github_list_recent_issues"
    description = "List recent issues in a repository"
    arguments_model = ListRecentIssuesArguments

    async def run(self, args: ListRecentIssuesArguments) -> Dict[str, Any]:
        items = await self.client.list_issues(
            args.owner, args.repo,
            state=args.state or "open",
            sort=args.sort or "created",
            direction="desc",
            per_page=self.page_size(args.per_page)
        )
        issues = only_issues(items)
        return {
            "count": len(issues),
            "issues": [project_issue_summary(issue) for issue in issues],
        }

    def failure_detail(self, arguments: Any) -> str:
        return f"Failed to list recent issues in {repository_of(arguments)}"
