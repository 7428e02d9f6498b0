"""Azure DevOps pull request tools.

Two tools live here: one that collects the active pull requests created by
the configured identity across several repositories, and one that reads the
comment threads of a single pull request.
"""

from typing import Dict, Any, List, Tuple, Union
from urllib.parse import quote

from mcp_tools.plugin import register_tool

from .errors import InvalidArgumentsError, UpstreamError
from .projections import project_pull_requests, project_threads
from .tool_base import AzureDevOpsTool, require_string
from .types import PullRequestList, ThreadList


def validate_repository_names(repos: Any) -> List[str]:
    """Check the repository list of an authored pull request query.

    Raises:
        InvalidArgumentsError: If ``repos`` is not a non-empty list of names
    """
    if not isinstance(repos, list) or not repos:
        raise InvalidArgumentsError("repos must be a non-empty list of repository names")
    for repo in repos:
        if not isinstance(repo, str) or not repo.strip():
            raise InvalidArgumentsError(f"Invalid repository name: {repo!r}")
    return list(repos)


def validate_pull_request_id(pr_id: Any) -> str:
    # Booleans are ints in Python but never a valid id
    if isinstance(pr_id, bool) or not isinstance(pr_id, (int, str)):
        raise InvalidArgumentsError("pr_id is required")
    pr_id = str(pr_id).strip()
    if not pr_id:
        raise InvalidArgumentsError("pr_id is required")
    return pr_id


@register_tool
class AuthoredPullRequestsTool(AzureDevOpsTool):
    """List active pull requests created by the configured identity.

    One request is issued per repository, in the order given. The first
    failing request aborts the whole call; nothing partial is returned.
    """

    error_prefix = "Failed to fetch pull requests"

    @property
    def name(self) -> str:
        """Get the tool name."""
        return "get_all_authored_pull_requests"

    @property
    def description(self) -> str:
        """Get the tool description."""
        return "Get all active pull requests created by the current user across the given repositories"

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return {
            "type": "object",
            "properties": {
                "repos": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Names of the repositories to search for pull requests",
                    "minItems": 1,
                },
            },
            "required": ["repos"],
        }

    async def list_authored_pull_requests(self, repos: List[str]) -> PullRequestList:
        """Collect authored active pull requests from several repositories.

        Args:
            repos: Repository names, queried sequentially in this order

        Returns:
            All pull requests, grouped by repository in input order

        Raises:
            InvalidArgumentsError: If ``repos`` is empty or malformed
            MissingCredentialError: If no PAT is configured
            UpstreamError: From the first repository whose request fails, naming it
        """
        repos = validate_repository_names(repos)
        credential = self.credential_provider()
        settings = self._get_settings()

        query = {
            "searchCriteria.creatorId": settings.creator_id,
            "searchCriteria.status": "active",
        }

        pages: List[Tuple[str, Dict[str, Any]]] = []
        async with self._open_client(credential, settings) as client:
            for repo in repos:
                self.logger.debug(f"Fetching authored pull requests from {repo}")
                try:
                    data = await client.request(
                        "GET",
                        f"git/repositories/{quote(repo, safe='')}/pullrequests",
                        query=query,
                    )
                except UpstreamError as e:
                    raise UpstreamError(
                        e.status,
                        e.status_text,
                        body_text=e.body_text,
                        url=e.url,
                        message=f"Repository '{repo}': {e}",
                    ) from e
                pages.append((repo, data))

        return project_pull_requests(pages, settings.org, settings.project)

    async def _execute(self, arguments: Dict[str, Any]) -> PullRequestList:
        return await self.list_authored_pull_requests(arguments.get("repos"))


@register_tool
class PullRequestCommentsTool(AzureDevOpsTool):
    """Read the comment threads of one pull request."""

    error_prefix = "Failed to fetch PR comments"

    @property
    def name(self) -> str:
        """Get the tool name."""
        return "get_comments_on_pull_request"

    @property
    def description(self) -> str:
        """Get the tool description."""
        return "Get all comment threads on a pull request"

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return {
            "type": "object",
            "properties": {
                "repo": {
                    "type": "string",
                    "description": "Name of the repository containing the pull request",
                },
                "pr_id": {
                    "type": ["string", "integer"],
                    "description": "ID of the pull request",
                },
            },
            "required": ["repo", "pr_id"],
        }

    async def get_comments(self, repo: str, pr_id: Union[int, str]) -> ThreadList:
        """Get the threads of a pull request, each with its comments.

        Raises:
            InvalidArgumentsError: If ``repo`` or ``pr_id`` is missing
            MissingCredentialError: If no PAT is configured
            UpstreamError: If Azure DevOps rejects the request
        """
        repo = require_string(repo, "repo")
        pr_id = validate_pull_request_id(pr_id)
        credential = self.credential_provider()
        settings = self._get_settings()

        async with self._open_client(credential, settings) as client:
            data = await client.request(
                "GET",
                f"git/repositories/{quote(repo, safe='')}/pullrequests/"
                f"{quote(pr_id, safe='')}/threads",
            )

        return project_threads(data)

    async def _execute(self, arguments: Dict[str, Any]) -> ThreadList:
        return await self.get_comments(arguments.get("repo"), arguments.get("pr_id"))
