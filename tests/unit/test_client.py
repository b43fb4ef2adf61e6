"""Unit tests for the GitHub client module."""

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
from unittest.mock import patch
from github.GithubException import GithubException

from issue_scribe_mcp.config import GitHubConfig
from issue_scribe_mcp.github.client import (
    DIFF_MEDIA_TYPE,
    GitHubClient,
    GitHubConnectionError,
    GitHubOperationError,
)


class TestGitHubClient:
    """Test GitHubClient request building and error mapping."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = GitHubConfig(token="ghp_test", api_url="https://api.github.com", timeout=15)
        self.patcher = patch('issue_scribe_mcp.github.client.Github')
        self.mock_github_class = self.patcher.start()
        self.requester = self.mock_github_class.return_value.requester
        self.requester.requestJsonAndCheck.return_value = ({}, {})
        self.client = GitHubClient(self.config)

    def teardown_method(self):
        self.patcher.stop()

    def last_call(self):
        args, kwargs = self.requester.requestJsonAndCheck.call_args
        return args, kwargs

    def test_initialization(self):
        """Test the PyGithub handle is built from configuration."""
        _, kwargs = self.mock_github_class.call_args
        assert kwargs['base_url'] == "https://api.github.com"
        assert kwargs['timeout'] == 15
        assert kwargs['verify'] is True
        assert kwargs['auth'] is not None
        assert kwargs['retry'] is None

    @pytest.mark.asyncio
    async def test_get_issue(self):
        self.requester.requestJsonAndCheck.return_value = ({}, {"number": 5, "title": "Bug"})

        issue = await self.client.get_issue("acme", "widgets", 5)

        assert issue == {"number": 5, "title": "Bug"}
        args, kwargs = self.last_call()
        assert args == ("GET", "/repos/acme/widgets/issues/5")
        assert kwargs['parameters'] is None
        assert kwargs['input'] is None

    @pytest.mark.asyncio
    async def test_list_issues_parameters(self):
        """Test unset filters are not sent and labels are comma joined."""
        self.requester.requestJsonAndCheck.return_value = ({}, [])

        await self.client.list_issues("acme", "widgets", state="all", labels=["bug", "ui"], per_page=10)

        args, kwargs = self.last_call()
        assert args == ("GET", "/repos/acme/widgets/issues")
        assert kwargs['parameters'] == {'state': 'all', 'labels': 'bug,ui', 'per_page': 10}

    @pytest.mark.asyncio
    async def test_create_issue_drops_unset_fields(self):
        await self.client.create_issue("acme", "widgets", "Crash on load")

        args, kwargs = self.last_call()
        assert args == ("POST", "/repos/acme/widgets/issues")
        assert kwargs['input'] == {'title': 'Crash on load'}

    @pytest.mark.asyncio
    async def test_update_issue_sends_only_given_fields(self):
        await self.client.update_issue("acme", "widgets", 3, state="closed")

        args, kwargs = self.last_call()
        assert args == ("PATCH", "/repos/acme/widgets/issues/3")
        assert kwargs['input'] == {'state': 'closed'}

    @pytest.mark.asyncio
    async def test_pull_request_diff_uses_diff_media_type(self):
        self.requester.requestJsonAndCheck.return_value = ({}, {"data": "diff --git a/x b/x"})

        diff = await self.client.get_pull_request_diff("acme", "widgets", 7)

        assert diff == "diff --git a/x b/x"
        _, kwargs = self.last_call()
        assert kwargs['headers'] == {'Accept': DIFF_MEDIA_TYPE}

    @pytest.mark.asyncio
    async def test_merge_pull_request(self):
        self.requester.requestJsonAndCheck.return_value = ({}, {"merged": True, "sha": "abc"})

        result = await self.client.merge_pull_request("acme", "widgets", 7, merge_method="squash")

        assert result["merged"] is True
        args, kwargs = self.last_call()
        assert args == ("PUT", "/repos/acme/widgets/pulls/7/merge")
        assert kwargs['input'] == {'merge_method': 'squash'}

    @pytest.mark.asyncio
    async def test_label_names_are_quoted(self):
        await self.client.update_label("acme", "widgets", "good first issue", color="00ff00")

        args, kwargs = self.last_call()
        assert args == ("PATCH", "/repos/acme/widgets/labels/good%20first%20issue")
        assert kwargs['input'] == {'color': '00ff00'}

    @pytest.mark.asyncio
    async def test_list_branches_protected_filter(self):
        self.requester.requestJsonAndCheck.return_value = ({}, [])

        await self.client.list_branches("acme", "widgets", protected=True, per_page=5)

        _, kwargs = self.last_call()
        assert kwargs['parameters'] == {'protected': 'true', 'per_page': 5}

    @pytest.mark.asyncio
    async def test_branch_refs(self):
        await self.client.get_branch_ref("acme", "widgets", "feature/login")
        args, _ = self.last_call()
        assert args == ("GET", "/repos/acme/widgets/git/ref/heads/feature/login")

        await self.client.create_ref("acme", "widgets", "refs/heads/topic", "abc123")
        args, kwargs = self.last_call()
        assert args == ("POST", "/repos/acme/widgets/git/refs")
        assert kwargs['input'] == {'ref': 'refs/heads/topic', 'sha': 'abc123'}

        await self.client.delete_branch_ref("acme", "widgets", "topic")
        args, _ = self.last_call()
        assert args == ("DELETE", "/repos/acme/widgets/git/refs/heads/topic")

    @pytest.mark.asyncio
    async def test_compare(self):
        await self.client.compare("acme", "widgets", "main", "feature")

        args, _ = self.last_call()
        assert args == ("GET", "/repos/acme/widgets/compare/main...feature")

    @pytest.mark.asyncio
    async def test_github_error_is_mapped(self):
        """Test upstream errors keep their status and message."""
        self.requester.requestJsonAndCheck.side_effect = GithubException(404, {"message": "Not Found"}, {})

        with pytest.raises(GitHubOperationError) as exc_info:
            await self.client.get_issue("acme", "widgets", 999)

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Not Found"

    @pytest.mark.asyncio
    async def test_connection_error_is_mapped(self):
        self.requester.requestJsonAndCheck.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(GitHubConnectionError) as exc_info:
            await self.client.list_labels("acme", "widgets")

        assert exc_info.value.status is None
        assert "refused" in str(exc_info.value)

    def test_close(self):
        self.client.close()
        self.mock_github_class.return_value.close.assert_called_once()



class BadGatewayHandler(BaseHTTPRequestHandler):
    """Answers every request with 502 and records what it received."""

    requests_seen = []

    def _reply(self):
        length = int(self.headers.get('Content-Length') or 0)
        if length:
            self.rfile.read(length)
        self.requests_seen.append((self.command, self.path))
        body = json.dumps({"message": "Bad Gateway"}).encode()
        self.send_response(502)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _reply

    def log_message(self, format, *args):
        pass


class TestGitHubClientUpstreamFailures:
    """Test against a live HTTP endpoint that always fails."""

    def setup_method(self):
        """Start a local server standing in for the GitHub API."""
        BadGatewayHandler.requests_seen = []
        self.httpd = ThreadingHTTPServer(("127.0.0.1", 0), BadGatewayHandler)
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self.thread.start()
        host, port = self.httpd.server_address
        self.client = GitHubClient(GitHubConfig(token="ghp_test", api_url=f"http://{host}:{port}", timeout=5))

    def teardown_method(self):
        self.client.close()
        self.httpd.shutdown()
        self.httpd.server_close()

    @pytest.mark.asyncio
    async def test_merge_is_sent_once(self):
        """A 5xx on a mutation is reported, not retried."""
        with pytest.raises(GitHubOperationError) as exc_info:
            await self.client.merge_pull_request("acme", "widgets", 7)

        assert exc_info.value.status == 502
        assert exc_info.value.message == "Bad Gateway"
        assert BadGatewayHandler.requests_seen == [("PUT", "/repos/acme/widgets/pulls/7/merge")]

    @pytest.mark.asyncio
    async def test_comment_is_sent_once(self):
        with pytest.raises(GitHubOperationError) as exc_info:
            await self.client.create_issue_comment("acme", "widgets", 4, "Thanks!")

        assert exc_info.value.status == 502
        assert len(BadGatewayHandler.requests_seen) == 1

    @pytest.mark.asyncio
    async def test_read_is_sent_once(self):
        with pytest.raises(GitHubOperationError):
            await self.client.get_issue("acme", "widgets", 5)

        assert BadGatewayHandler.requests_seen == [("GET", "/repos/acme/widgets/issues/5")]
