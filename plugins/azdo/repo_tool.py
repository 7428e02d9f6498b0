"""Azure DevOps repository tool implementation."""

from typing import Dict, Any

from mcp_tools.plugin import register_tool

from .projections import project_repositories
from .tool_base import AzureDevOpsTool
from .types import RepositoryList


@register_tool
class AzureRepositoryTool(AzureDevOpsTool):
    """List the Git repositories of the configured Azure DevOps project.

    Example:
        tool = AzureRepositoryTool()
        repositories = await tool.list_repositories()
        print([repo.name for repo in repositories.repositories])
    """

    error_prefix = "Failed to fetch repositories"

    @property
    def name(self) -> str:
        """Get the tool name."""
        return "get_all_repos"

    @property
    def description(self) -> str:
        """Get the tool description."""
        return "Get all repositories in the Azure DevOps project"

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return {"type": "object", "properties": {}}

    async def list_repositories(self) -> RepositoryList:
        """List every repository of the configured project.

        Returns:
            The repositories projected to their summary fields

        Raises:
            MissingCredentialError: If no PAT is configured
            UpstreamError: If Azure DevOps rejects the request
        """
        credential = self.credential_provider()
        settings = self._get_settings()

        async with self._open_client(credential, settings) as client:
            data = await client.request("GET", "git/repositories")

        result = project_repositories(data)
        self.logger.debug(f"Fetched {len(result.repositories)} repositories")
        return result

    async def _execute(self, arguments: Dict[str, Any]) -> RepositoryList:
        return await self.list_repositories()
