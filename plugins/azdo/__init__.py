"""Azure DevOps plugin.

Tools for the repositories, pull requests and work items of one Azure
DevOps project, called through the REST API with a personal access token.
"""

from plugins.azdo.repo_tool import AzureRepositoryTool
from plugins.azdo.pr_tool import AuthoredPullRequestsTool, PullRequestCommentsTool
from plugins.azdo.workitem_tool import AzureWorkItemTool

__all__ = [
    "AzureRepositoryTool",
    "AuthoredPullRequestsTool",
    "PullRequestCommentsTool",
    "AzureWorkItemTool",
]
