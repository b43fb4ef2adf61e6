#!/usr/bin/env python3
"""
Tests for the MCP server wiring and entry point
"""

import json
import pytest
from unittest.mock import AsyncMock, Mock, patch
from mcp import types
from starlette.applications import Starlette

from issue_scribe_mcp.config import Config, ConfigurationError, GitHubConfig, MCPConfig
from issue_scribe_mcp.github.client import GitHubClient
from issue_scribe_mcp.server import create_server, create_starlette_app, main, parse_args
from issue_scribe_mcp.tools.registry import ToolRegistry


def make_config():
    return Config(github=GitHubConfig(token="ghp_test"), mcp=MCPConfig())


class TestCreateServer:
    """Test the list/call handlers registered on the MCP server."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = Mock(spec=GitHubClient)
        self.registry = ToolRegistry(self.client, MCPConfig())
        self.server = create_server(self.registry, make_config())

    def test_server_identity(self):
        assert self.server.name == "issue-scribe-mcp"
        assert self.server.version == "1.0.0"

    @pytest.mark.asyncio
    async def test_list_tools(self):
        handler = self.server.request_handlers[types.ListToolsRequest]

        response = await handler(types.ListToolsRequest(method="tools/list"))

        names = [tool.name for tool in response.root.tools]
        assert len(names) == 23
        assert len(set(names)) == len(names)

    @pytest.mark.asyncio
    async def test_call_tool(self):
        self.client.create_issue.return_value = {"number": 42, "title": "Crash on load", "state": "open"}
        handler = self.server.request_handlers[types.CallToolRequest]

        response = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="github_create_issue",
                arguments={"owner": "acme", "repo": "widgets", "title": "Crash on load"}
            )
        ))

        result = response.root
        assert result.isError is False
        assert json.loads(result.content[0].text)["message"] == "Issue #42 created successfully"

    @pytest.mark.asyncio
    async def test_call_tool_validation_error(self):
        handler = self.server.request_handlers[types.CallToolRequest]

        response = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="github_merge_pr", arguments={"owner": "acme"})
        ))

        result = response.root
        assert result.isError is True
        payload = json.loads(result.content[0].text)
        assert payload["detail"] == "Failed to merge PR #unknown in acme/unknown"
        self.client.merge_pull_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_tool_fails_only_the_call(self):
        handler = self.server.request_handlers[types.CallToolRequest]

        response = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="github_fork", arguments={})
        ))

        assert response.root.isError is True
        assert "Unknown tool: github_fork" in response.root.content[0].text

        self.client.list_labels.return_value = []
        response = await handler(types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="github_list_labels",
                                               arguments={"owner": "acme", "repo": "widgets"})
        ))
        assert response.root.isError is False


class TestStarletteApp:
    """Test the SSE application routes."""

    def test_routes(self):
        server = create_server(ToolRegistry(Mock(spec=GitHubClient)), make_config())

        app = create_starlette_app(server)

        assert isinstance(app, Starlette)
        paths = [route.path for route in app.routes]
        assert "/sse" in paths
        assert "/messages" in paths


class TestMain:
    """Test the entry point."""

    def test_parse_args_defaults(self):
        args = parse_args([])
        assert args.transport == "stdio"
        assert args.port == 8756

    def test_parse_args_sse(self):
        args = parse_args(["--transport", "sse", "--host", "0.0.0.0", "--port", "9000"])
        assert args.transport == "sse"
        assert args.host == "0.0.0.0"
        assert args.port == 9000

    @patch('issue_scribe_mcp.server.configure_logging')
    @patch('issue_scribe_mcp.server.GitHubClient')
    @patch('issue_scribe_mcp.server.load_config')
    def test_missing_token_exits(self, mock_load_config, mock_client_class, mock_configure_logging):
        mock_load_config.side_effect = ConfigurationError("GITHUB_TOKEN environment variable is required")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        mock_client_class.assert_not_called()

    @patch('issue_scribe_mcp.server.configure_logging')
    @patch('issue_scribe_mcp.server.run_stdio', new_callable=AsyncMock)
    @patch('issue_scribe_mcp.server.GitHubClient')
    @patch('issue_scribe_mcp.server.load_config')
    def test_stdio(self, mock_load_config, mock_client_class, mock_run_stdio, mock_configure_logging):
        mock_load_config.return_value = make_config()

        main([])

        mock_run_stdio.assert_awaited_once()
        mock_client_class.return_value.close.assert_called_once()

    @patch('issue_scribe_mcp.server.configure_logging')
    @patch('issue_scribe_mcp.server.uvicorn')
    @patch('issue_scribe_mcp.server.GitHubClient')
    @patch('issue_scribe_mcp.server.load_config')
    def test_sse(self, mock_load_config, mock_client_class, mock_uvicorn, mock_configure_logging):
        mock_load_config.return_value = make_config()

        main(["--transport", "sse", "--port", "9000"])

        _, kwargs = mock_uvicorn.run.call_args
        assert kwargs["port"] == 9000
        assert kwargs["host"] == "127.0.0.1"

    @patch('issue_scribe_mcp.server.configure_logging')
    @patch('issue_scribe_mcp.server.run_stdio', new_callable=AsyncMock)
    @patch('issue_scribe_mcp.server.GitHubClient')
    @patch('issue_scribe_mcp.server.load_config')
    def test_fatal_error_exits(self, mock_load_config, mock_client_class, mock_run_stdio, mock_configure_logging):
        mock_load_config.return_value = make_config()
        mock_run_stdio.side_effect = RuntimeError("stream closed")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        mock_client_class.return_value.close.assert_called_once()
