"""Tool registry and dispatcher."""

from typing import Any, Dict, List, Optional, Type

import structlog
from mcp.types import CallToolResult, Tool

from ..config import MCPConfig
from ..github.client import GitHubClient
from .base import GitHubTool
from .branches import CompareBranchesTool, CreateBranchTool, DeleteBranchTool, ListBranchesTool
from .comments import AddCommentTool, AddReactionTool, DeleteCommentTool, UpdateCommentTool
from .errors import UnknownToolError
from .issues import (
    CreateIssueTool,
    GetIssueContextTool,
    ListRecentIssuesTool,
    SearchIssuesTool,
    UpdateIssueTool,
)
from .labels import CreateLabelTool, DeleteLabelTool, ListLabelsTool, UpdateLabelTool
from .pull_requests import (
    CreatePullRequestTool,
    GetPullRequestContextTool,
    GetPullRequestDiffTool,
    GetPullRequestFilesTool,
    MergePullRequestTool,
    SearchPullRequestsTool,
)

logger = structlog.get_logger(__name__)

# Advertised order of the tool catalogue
TOOL_CLASSES: List[Type[GitHubTool]] = [
    GetIssueContextTool,
    GetPullRequestContextTool,
    CreateIssueTool,
    UpdateIssueTool,
    CreatePullRequestTool,
    AddCommentTool,
    UpdateCommentTool,
    DeleteCommentTool,
    AddReactionTool,
    SearchIssuesTool,
    SearchPullRequestsTool,
    ListRecentIssuesTool,
    MergePullRequestTool,
    GetPullRequestDiffTool,
    GetPullRequestFilesTool,
    CreateLabelTool,
    UpdateLabelTool,
    DeleteLabelTool,
    ListLabelsTool,
    ListBranchesTool,
    CreateBranchTool,
    DeleteBranchTool,
    CompareBranchesTool,
]


class ToolRegistry:
    """Static catalogue of GitHub tools keyed by name.

    Built once at startup and read-only afterwards.
    """

    def __init__(self, client: GitHubClient, config: Optional[MCPConfig] = None,
                 tool_classes: Optional[List[Type[GitHubTool]]] = None):
        """Initialize the registry.

        Args:
            client: GitHub client shared by every tool
            config: MCP configuration
            tool_classes: Tool classes to register, defaults to the full catalogue

        Raises:
            ValueError: If two tools share a name
        """
        self._tools: Dict[str, GitHubTool] = {}
        for tool_class in tool_classes or TOOL_CLASSES:
            tool = tool_class(client, config)
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
        logger.info("Tool registry initialized", tools=len(self._tools))

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[Tool]:
        """Return the tool descriptors in catalogue order."""
        return [tool.get_tool_definition() for tool in self._tools.values()]

    def get_tool(self, name: str) -> GitHubTool:
        """Look up a tool by name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def dispatch(self, name: str, arguments: Any) -> CallToolResult:
        """Route one invocation to its tool.

        Validation and GitHub failures come back as ``isError`` results; only an
        unknown tool name raises.
        """
        tool = self.get_tool(name)
        return await tool.execute(arguments)
