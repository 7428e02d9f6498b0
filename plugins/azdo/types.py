from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field


class UpstreamPage(BaseModel):
    """One list response from Azure DevOps: a count and a page of records"""

    count: Optional[int] = None
    value: List[Dict[str, Any]] = Field(default_factory=list)


class RepositorySummary(BaseModel):
    """Repository as returned by get_all_repos"""

    id: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None
    project: Optional[str] = None
    defaultBranch: Optional[str] = None
    size: Optional[int] = None
    remoteUrl: Optional[str] = None
    webUrl: Optional[str] = None


class RepositoryList(BaseModel):
    count: Optional[int] = None
    repositories: List[RepositorySummary] = Field(default_factory=list)


class PullRequestSummary(BaseModel):
    """Authored pull request with a synthesized browser URL"""

    id: Optional[int] = None
    title: Optional[str] = None
    status: Optional[str] = None
    createdBy: Optional[str] = None
    creationDate: Optional[str] = None
    repository: Optional[str] = None
    sourceRefName: Optional[str] = None
    targetRefName: Optional[str] = None
    url: str


class PullRequestList(BaseModel):
    count: int
    pullRequests: List[PullRequestSummary] = Field(default_factory=list)


class CommentSummary(BaseModel):
    """Pull request comment information"""

    id: Optional[int] = None
    content: Optional[str] = None
    author: Optional[str] = None
    publishedDate: Optional[str] = None
    lastUpdatedDate: Optional[str] = None
    commentType: Optional[str] = None


class ThreadSummary(BaseModel):
    """Pull request comment thread information"""

    id: Optional[int] = None
    status: Optional[str] = None
    threadContext: Optional[Dict[str, Any]] = None
    comments: List[CommentSummary] = Field(default_factory=list)


class ThreadList(BaseModel):
    count: Optional[int] = None
    threads: List[ThreadSummary] = Field(default_factory=list)


class CreatedWorkItem(BaseModel):
    """Work item returned by create_work_item"""

    id: Optional[int] = None
    url: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    state: Optional[str] = None
    createdBy: Optional[str] = None
    assignedTo: Optional[str] = None
    message: str


class PatchOperation(BaseModel):
    """One entry of a JSON-patch document"""

    op: str = "add"
    path: str
    value: str
