"""GitHub API client module."""

import asyncio
from typing import Dict, Any, List, Optional
from urllib.parse import quote

import requests
import structlog
from github import Auth, Github
from github.GithubException import GithubException

from ..config import GitHubConfig

logger = structlog.get_logger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.diff"


class GitHubError(Exception):
    """Base exception for failed GitHub calls."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class GitHubConnectionError(GitHubError):
    """Exception raised when the GitHub API cannot be reached."""
    pass


class GitHubOperationError(GitHubError):
    """Exception raised when GitHub answers a call with an error status."""
    pass


def _drop_unset(values: Dict[str, Any]) -> Dict[str, Any]:
    """Remove keys whose value was not supplied."""
    return {key: value for key, value in values.items() if value is not None}


class GitHubClient:
    """GitHub REST client shared by every tool.

    Holds a single authenticated PyGithub handle. Requests are never retried:
    every failure reaches the caller with its upstream status. Calls are
    blocking, so each public operation runs its request in a worker thread and
    can be awaited concurrently with other operations. The handle is never
    reconfigured after construction.
    """

    def __init__(self, config: GitHubConfig):
        """Initialize GitHub client.

        Args:
            config: GitHub configuration
        """
        self.config = config
        self._github = Github(
            auth=Auth.Token(config.token),
            base_url=config.api_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            retry=None
        )

    def _request(self, verb: str, path: str, parameters: Optional[Dict[str, Any]] = None,
                 body: Optional[Dict[str, Any]] = None,
                 headers: Optional[Dict[str, str]] = None) -> Any:
        """Perform one REST call and return the decoded response body.

        Raises:
            GitHubOperationError: If GitHub returns an error status
            GitHubConnectionError: If the request cannot be completed
        """
        try:
            _, data = self._github.requester.requestJsonAndCheck(
                verb,
                path,
                parameters=_drop_unset(parameters or {}) or None,
                headers=headers,
                input=_drop_unset(body) if body is not None else None
            )
            return data
        except GithubException as e:
            message = e.data.get("message") if isinstance(e.data, dict) else None
            logger.debug("GitHub call failed", verb=verb, path=path, status=e.status)
            raise GitHubOperationError(message or str(e), status=e.status) from e
        except requests.exceptions.RequestException as e:
            logger.debug("GitHub call could not be completed", verb=verb, path=path, error=str(e))
            raise GitHubConnectionError(f"Connection failed: {e}") from e

    async def _call(self, verb: str, path: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._request, verb, path, **kwargs)

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    # Issues

    async def get_issue(self, owner: str, repo: str, issue_number: int) -> Dict[str, Any]:
        """Get a single issue (or pull request viewed as an issue)."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/issues/{issue_number}")

    async def list_issue_comments(self, owner: str, repo: str, issue_number: int) -> List[Dict[str, Any]]:
        """List comments on an issue or pull request."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/issues/{issue_number}/comments")

    async def list_issues(self, owner: str, repo: str, state: str = "open",
                          labels: Optional[List[str]] = None, sort: Optional[str] = None,
                          direction: Optional[str] = None, per_page: int = 30) -> List[Dict[str, Any]]:
        """List issues for a repository.

        GitHub returns pull requests from this endpoint as well; callers filter
        them out by the ``pull_request`` marker.
        """
        parameters = {
            'state': state,
            'labels': ",".join(labels) if labels else None,
            'sort': sort,
            'direction': direction,
            'per_page': per_page
        }
        return await self._call("GET", f"{self._repo_path(owner, repo)}/issues", parameters=parameters)

    async def create_issue(self, owner: str, repo: str, title: str, body: Optional[str] = None,
                           labels: Optional[List[str]] = None,
                           assignees: Optional[List[str]] = None) -> Dict[str, Any]:
        """Create a new issue."""
        payload = {'title': title, 'body': body, 'labels': labels, 'assignees': assignees}
        return await self._call("POST", f"{self._repo_path(owner, repo)}/issues", body=payload)

    async def update_issue(self, owner: str, repo: str, issue_number: int,
                           **fields: Any) -> Dict[str, Any]:
        """Update an issue with the supplied fields (title, body, state, labels, assignees)."""
        return await self._call("PATCH", f"{self._repo_path(owner, repo)}/issues/{issue_number}",
                                body=dict(fields))

    # Comments and reactions

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> Dict[str, Any]:
        """Add a comment to an issue or pull request."""
        return await self._call("POST", f"{self._repo_path(owner, repo)}/issues/{issue_number}/comments",
                                body={'body': body})

    async def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> Dict[str, Any]:
        """Replace the body of an issue comment."""
        return await self._call("PATCH", f"{self._repo_path(owner, repo)}/issues/comments/{comment_id}",
                                body={'body': body})

    async def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete an issue comment."""
        await self._call("DELETE", f"{self._repo_path(owner, repo)}/issues/comments/{comment_id}")

    async def create_comment_reaction(self, owner: str, repo: str, comment_id: int, content: str) -> Dict[str, Any]:
        """React to an issue comment."""
        return await self._call("POST", f"{self._repo_path(owner, repo)}/issues/comments/{comment_id}/reactions",
                                body={'content': content})

    async def create_issue_reaction(self, owner: str, repo: str, issue_number: int, content: str) -> Dict[str, Any]:
        """React to an issue or pull request."""
        return await self._call("POST", f"{self._repo_path(owner, repo)}/issues/{issue_number}/reactions",
                                body={'content': content})

    # Pull requests

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> Dict[str, Any]:
        """Get a single pull request."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/pulls/{pull_number}")

    async def list_pull_request_commits(self, owner: str, repo: str, pull_number: int) -> List[Dict[str, Any]]:
        """List commits on a pull request."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/pulls/{pull_number}/commits")

    async def list_pull_request_files(self, owner: str, repo: str, pull_number: int) -> List[Dict[str, Any]]:
        """List files changed by a pull request."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/pulls/{pull_number}/files")

    async def get_pull_request_diff(self, owner: str, repo: str, pull_number: int) -> str:
        """Get the unified diff of a pull request as text."""
        data = await self._call("GET", f"{self._repo_path(owner, repo)}/pulls/{pull_number}",
                                headers={'Accept': DIFF_MEDIA_TYPE})
        # Non-JSON bodies come back wrapped as {"data": <text>}
        if isinstance(data, dict):
            return data.get('data') or ""
        return data or ""

    async def list_pull_requests(self, owner: str, repo: str, state: str = "open",
                                 sort: Optional[str] = None, direction: Optional[str] = None,
                                 per_page: int = 30) -> List[Dict[str, Any]]:
        """List pull requests for a repository."""
        parameters = {'state': state, 'sort': sort, 'direction': direction, 'per_page': per_page}
        return await self._call("GET", f"{self._repo_path(owner, repo)}/pulls", parameters=parameters)

    async def create_pull_request(self, owner: str, repo: str, title: str, head: str, base: str,
                                  body: Optional[str] = None, draft: Optional[bool] = None,
                                  maintainer_can_modify: Optional[bool] = None) -> Dict[str, Any]:
        """Open a new pull request."""
        payload = {
            'title': title,
            'head': head,
            'base': base,
            'body': body,
            'draft': draft,
            'maintainer_can_modify': maintainer_can_modify
        }
        return await self._call("POST", f"{self._repo_path(owner, repo)}/pulls", body=payload)

    async def merge_pull_request(self, owner: str, repo: str, pull_number: int,
                                 merge_method: Optional[str] = None, commit_title: Optional[str] = None,
                                 commit_message: Optional[str] = None) -> Dict[str, Any]:
        """Merge a pull request."""
        payload = {
            'merge_method': merge_method,
            'commit_title': commit_title,
            'commit_message': commit_message
        }
        return await self._call("PUT", f"{self._repo_path(owner, repo)}/pulls/{pull_number}/merge", body=payload)

    # Labels

    async def list_labels(self, owner: str, repo: str, per_page: int = 30) -> List[Dict[str, Any]]:
        """List labels defined in a repository."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/labels",
                                parameters={'per_page': per_page})

    async def create_label(self, owner: str, repo: str, name: str, color: str,
                           description: Optional[str] = None) -> Dict[str, Any]:
        """Create a label."""
        payload = {'name': name, 'color': color, 'description': description}
        return await self._call("POST", f"{self._repo_path(owner, repo)}/labels", body=payload)

    async def update_label(self, owner: str, repo: str, name: str, new_name: Optional[str] = None,
                           color: Optional[str] = None, description: Optional[str] = None) -> Dict[str, Any]:
        """Rename or recolor a label."""
        payload = {'new_name': new_name, 'color': color, 'description': description}
        return await self._call("PATCH", f"{self._repo_path(owner, repo)}/labels/{quote(name, safe='')}",
                                body=payload)

    async def delete_label(self, owner: str, repo: str, name: str) -> None:
        """Delete a label."""
        await self._call("DELETE", f"{self._repo_path(owner, repo)}/labels/{quote(name, safe='')}")

    # Branches and refs

    async def list_branches(self, owner: str, repo: str, protected: Optional[bool] = None,
                            per_page: int = 30) -> List[Dict[str, Any]]:
        """List branches, optionally only protected (or unprotected) ones."""
        parameters = {
            'protected': str(protected).lower() if protected is not None else None,
            'per_page': per_page
        }
        return await self._call("GET", f"{self._repo_path(owner, repo)}/branches", parameters=parameters)

    async def get_branch_ref(self, owner: str, repo: str, branch: str) -> Dict[str, Any]:
        """Resolve ``heads/<branch>`` to a git reference."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/git/ref/heads/{quote(branch, safe='/')}")

    async def get_commit(self, owner: str, repo: str, sha: str) -> Dict[str, Any]:
        """Get a git commit object by SHA."""
        return await self._call("GET", f"{self._repo_path(owner, repo)}/git/commits/{quote(sha, safe='')}")

    async def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> Dict[str, Any]:
        """Create a git reference (``ref`` must be fully qualified)."""
        return await self._call("POST", f"{self._repo_path(owner, repo)}/git/refs",
                                body={'ref': ref, 'sha': sha})

    async def delete_branch_ref(self, owner: str, repo: str, branch: str) -> None:
        """Delete ``heads/<branch>``."""
        await self._call("DELETE", f"{self._repo_path(owner, repo)}/git/refs/heads/{quote(branch, safe='/')}")

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Dict[str, Any]:
        """Compare two commits, branches or tags."""
        basehead = f"{quote(base, safe='/')}...{quote(head, safe='/')}"
        return await self._call("GET", f"{self._repo_path(owner, repo)}/compare/{basehead}")

    def close(self) -> None:
        """Release the underlying HTTP resources."""
        self._github.close()
        logger.info("GitHub client closed")
