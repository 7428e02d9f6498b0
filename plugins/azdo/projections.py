"""Projection of Azure DevOps responses into the records the tools return.

Every function here is pure: it takes the JSON decoded from one or more
upstream responses and returns a typed record. Fields missing upstream
become ``None`` so the serialized shape never changes.
"""

from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import quote

from pydantic import ValidationError

from .azure_rest_utils import build_web_url
from .errors import UpstreamError
from .types import (
    CommentSummary,
    CreatedWorkItem,
    PullRequestList,
    PullRequestSummary,
    RepositoryList,
    RepositorySummary,
    ThreadList,
    ThreadSummary,
    UpstreamPage,
)


def _require_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise UpstreamError(
            None,
            "",
            message=f"Unexpected response for {what}: expected a JSON object, got {type(data).__name__}",
        )
    return data


def _as_page(data: Any) -> UpstreamPage:
    data = _require_object(data if data is not None else {}, "list request")
    try:
        return UpstreamPage(count=data.get("count"), value=data.get("value") or [])
    except ValidationError as e:
        raise UpstreamError(
            None, "", message=f"Unexpected list response: {e.error_count()} invalid field(s)"
        ) from e


def _display_name(identity: Any) -> Optional[str]:
    # Older work item payloads carry identities as "Name <email>" strings
    if isinstance(identity, dict):
        return identity.get("displayName")
    if isinstance(identity, str):
        return identity
    return None


def project_repository(repo: Dict[str, Any]) -> RepositorySummary:
    project = repo.get("project") or {}
    return RepositorySummary(
        id=repo.get("id"),
        name=repo.get("name"),
        url=repo.get("url"),
        project=project.get("name"),
        defaultBranch=repo.get("defaultBranch"),
        size=repo.get("size"),
        remoteUrl=repo.get("remoteUrl"),
        webUrl=repo.get("webUrl"),
    )


def project_repositories(data: Dict[str, Any]) -> RepositoryList:
    """Project a ``git/repositories`` response."""
    page = _as_page(data)
    return RepositoryList(
        count=page.count,
        repositories=[project_repository(repo) for repo in page.value],
    )


def pull_request_web_url(
    organization: str, project: str, repository: str, pull_request_id: Any
) -> str:
    return build_web_url(
        organization,
        project,
        f"_git/{quote(str(repository), safe='')}/pullrequest/{pull_request_id}",
    )


def project_pull_request(
    pr: Dict[str, Any],
    organization: str,
    project: str,
    requested_repository: Optional[str] = None,
) -> PullRequestSummary:
    """Project one pull request.

    The browser URL is synthesized from the organization, the project, the
    repository name and the pull request id; upstream URLs point at the API.
    """
    repository_name = (pr.get("repository") or {}).get("name")
    pull_request_id = pr.get("pullRequestId")
    return PullRequestSummary(
        id=pull_request_id,
        title=pr.get("title"),
        status=pr.get("status"),
        createdBy=_display_name(pr.get("createdBy")),
        creationDate=pr.get("creationDate"),
        repository=repository_name,
        sourceRefName=pr.get("sourceRefName"),
        targetRefName=pr.get("targetRefName"),
        url=pull_request_web_url(
            organization,
            project,
            repository_name or requested_repository or "",
            pull_request_id,
        ),
    )


def project_pull_requests(
    pages: Sequence[Tuple[str, Dict[str, Any]]],
    organization: str,
    project: str,
) -> PullRequestList:
    """Flatten per-repository pull request pages into one list.

    Args:
        pages: ``(repository name, response)`` pairs in request order
        organization: Organization used to build browser URLs
        project: Project used to build browser URLs

    Returns:
        All pull requests, in the order of ``pages`` and then of each page
    """
    pull_requests = [
        project_pull_request(pr, organization, project, requested_repository=repository)
        for repository, data in pages
        for pr in _as_page(data).value
    ]
    return PullRequestList(count=len(pull_requests), pullRequests=pull_requests)


def project_comment(comment: Dict[str, Any]) -> CommentSummary:
    return CommentSummary(
        id=comment.get("id"),
        content=comment.get("content"),
        author=_display_name(comment.get("author")),
        publishedDate=comment.get("publishedDate"),
        lastUpdatedDate=comment.get("lastUpdatedDate"),
        commentType=comment.get("commentType"),
    )


def project_thread(thread: Dict[str, Any]) -> ThreadSummary:
    return ThreadSummary(
        id=thread.get("id"),
        status=thread.get("status"),
        threadContext=thread.get("threadContext"),
        comments=[project_comment(c) for c in thread.get("comments") or []],
    )


def project_threads(data: Dict[str, Any]) -> ThreadList:
    """Project a pull request ``threads`` response (thread, then comments)."""
    page = _as_page(data)
    return ThreadList(
        count=page.count,
        threads=[project_thread(thread) for thread in page.value],
    )


def project_work_item(
    item: Dict[str, Any], work_item_type: str, title: str
) -> CreatedWorkItem:
    """Project a freshly created work item.

    The URL prefers the web link over the API URL, and the message echoes
    the requested type and title.
    """
    item = _require_object(item, "created work item")
    fields = item.get("fields") or {}
    web_link = ((item.get("_links") or {}).get("web") or {}).get("href")
    item_id = item.get("id")
    return CreatedWorkItem(
        id=item_id,
        url=web_link or item.get("url"),
        type=fields.get("System.WorkItemType"),
        title=fields.get("System.Title"),
        state=fields.get("System.State"),
        createdBy=_display_name(fields.get("System.CreatedBy")),
        assignedTo=_display_name(fields.get("System.AssignedTo")),
        message=f"Successfully created {work_item_type} work item #{item_id}: {title}",
    )
