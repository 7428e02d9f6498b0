"""
Shared fixtures for Azure DevOps plugin tests.
"""

import pytest

from plugins.azdo.repo_tool import AzureRepositoryTool
from plugins.azdo.pr_tool import AuthoredPullRequestsTool, PullRequestCommentsTool
from plugins.azdo.workitem_tool import AzureWorkItemTool

from .test_helpers import (
    FakeAzureDevOpsClient,
    create_credential_provider,
    create_test_settings,
    mock_azdo_settings,
)


@pytest.fixture
def azdo_settings():
    """Patch the tool settings with a test organization and project."""
    settings = create_test_settings()
    with mock_azdo_settings(settings):
        yield settings


@pytest.fixture
def credential_provider():
    """Credential provider returning a fixed PAT."""
    return create_credential_provider()


@pytest.fixture
def fake_client():
    """Fake Azure DevOps client; tests queue responses on ``fake_client.responses``."""
    return FakeAzureDevOpsClient()


@pytest.fixture
def repo_tool(azdo_settings, credential_provider, fake_client):
    return AzureRepositoryTool(
        credential_provider=credential_provider, client_factory=fake_client
    )


@pytest.fixture
def authored_pr_tool(azdo_settings, credential_provider, fake_client):
    return AuthoredPullRequestsTool(
        credential_provider=credential_provider, client_factory=fake_client
    )


@pytest.fixture
def pr_comments_tool(azdo_settings, credential_provider, fake_client):
    return PullRequestCommentsTool(
        credential_provider=credential_provider, client_factory=fake_client
    )


@pytest.fixture
def workitem_tool(azdo_settings, credential_provider, fake_client):
    return AzureWorkItemTool(
        credential_provider=credential_provider, client_factory=fake_client
    )
