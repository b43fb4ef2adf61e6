"""Projection of raw GitHub API payloads into compact tool results.

Every function here is a pure mapping over the decoded JSON that GitHub
returns. Optional upstream fields (a deleted author, a missing commit author)
project to ``None`` instead of raising.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

Label = Union[str, Mapping[str, Any]]


def label_name(label: Label) -> Optional[str]:
    """Normalize a label given either as a bare name or as a label object."""
    if isinstance(label, str):
        return label
    if isinstance(label, Mapping):
        return label.get("name")
    return getattr(label, "name", None)


def label_names(labels: Optional[Iterable[Label]]) -> List[Optional[str]]:
    return [label_name(label) for label in labels or []]


def login_of(user: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the login of a user object, or None when absent."""
    if not user:
        return None
    return user.get("login")


def ref_of(branch: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not branch:
        return None
    return branch.get("ref")


def is_pull_request(item: Mapping[str, Any]) -> bool:
    """True when an item from the issues endpoint is actually a pull request."""
    return bool(item.get("pull_request"))


def only_issues(items: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [item for item in items if not is_pull_request(item)]


def matches_query(item: Mapping[str, Any], query: Optional[str]) -> bool:
    """Case-insensitive substring match of ``query`` against title or body."""
    if not query:
        return True
    needle = query.lower()
    title = (item.get("title") or "").lower()
    body = (item.get("body") or "").lower()
    return needle in title or needle in body


def filter_by_query(items: Iterable[Mapping[str, Any]], query: Optional[str]) -> List[Mapping[str, Any]]:
    return [item for item in items if matches_query(item, query)]


def project_issue_detail(issue: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "number": issue.get("number"),
        "title": issue.get("title"),
        "body": issue.get("body"),
        "state": issue.get("state"),
        "user": login_of(issue.get("user")),
        "created_at": issue.get("created_at"),
        "updated_at": issue.get("updated_at"),
        "labels": label_names(issue.get("labels")),
    }


def project_issue_summary(issue: Mapping[str, Any]) -> Dict[str, Any]:
    """Row used by issue listings."""
    return {
        "number": issue.get("number"),
        "title": issue.get("title"),
        "state": issue.get("state"),
        "user": login_of(issue.get("user")),
        "labels": label_names(issue.get("labels")),
        "created_at": issue.get("created_at"),
        "updated_at": issue.get("updated_at"),
        "comments": issue.get("comments"),
        "html_url": issue.get("html_url"),
    }


def project_comment(comment: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": comment.get("id"),
        "user": login_of(comment.get("user")),
        "body": comment.get("body"),
        "created_at": comment.get("created_at"),
        "html_url": comment.get("html_url"),
    }


def project_commit(commit: Mapping[str, Any]) -> Dict[str, Any]:
    details = commit.get("commit") or {}
    author = details.get("author") or {}
    return {
        "sha": commit.get("sha"),
        "message": details.get("message"),
        "author": author.get("name"),
        "date": author.get("date"),
    }


def project_pull_request_detail(pr: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "number": pr.get("number"),
        "title": pr.get("title"),
        "body": pr.get("body"),
        "state": pr.get("state"),
        "user": login_of(pr.get("user")),
        "created_at": pr.get("created_at"),
        "updated_at": pr.get("updated_at"),
        "merged_at": pr.get("merged_at"),
        "base": ref_of(pr.get("base")),
        "head": ref_of(pr.get("head")),
        "labels": label_names(pr.get("labels")),
    }


def project_pull_request_summary(pr: Mapping[str, Any]) -> Dict[str, Any]:
    """Row used by pull request listings."""
    return {
        "number": pr.get("number"),
        "title": pr.get("title"),
        "state": pr.get("state"),
        "user": login_of(pr.get("user")),
        "head": ref_of(pr.get("head")),
        "base": ref_of(pr.get("base")),
        "created_at": pr.get("created_at"),
        "updated_at": pr.get("updated_at"),
        "draft": pr.get("draft"),
        "html_url": pr.get("html_url"),
    }


def project_file(file: Mapping[str, Any], include_links: bool = True) -> Dict[str, Any]:
    projected = {
        "filename": file.get("filename"),
        "status": file.get("status"),
        "additions": file.get("additions"),
        "deletions": file.get("deletions"),
        "changes": file.get("changes"),
    }
    if include_links:
        projected.update({
            "blob_url": file.get("blob_url"),
            "raw_url": file.get("raw_url"),
            "patch": file.get("patch"),
        })
    return projected


def project_label(label: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "name": label.get("name"),
        "color": label.get("color"),
        "description": label.get("description"),
        "url": label.get("url"),
    }


def project_branch(branch: Mapping[str, Any]) -> Dict[str, Any]:
    commit = branch.get("commit") or {}
    return {
        "name": branch.get("name"),
        "commit": {
            "sha": commit.get("sha"),
            "url": commit.get("url"),
        },
        "protected": branch.get("protected"),
    }


def project_reaction(reaction: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": reaction.get("id"),
        "content": reaction.get("content"),
        "user": login_of(reaction.get("user")),
        "created_at": reaction.get("created_at"),
    }


def project_comparison(comparison: Mapping[str, Any]) -> Dict[str, Any]:
    base_commit = comparison.get("base_commit") or {}
    files = comparison.get("files")
    return {
        "status": comparison.get("status"),
        "ahead_by": comparison.get("ahead_by"),
        "behind_by": comparison.get("behind_by"),
        "total_commits": comparison.get("total_commits"),
        "base_commit": {
            "sha": base_commit.get("sha"),
            "message": (base_commit.get("commit") or {}).get("message"),
        },
        "commits": [project_commit(commit) for commit in comparison.get("commits") or []],
        "files": [project_file(file, include_links=False) for file in files] if files is not None else None,
    }
