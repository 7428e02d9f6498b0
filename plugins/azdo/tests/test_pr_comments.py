"""
Tests for the get_comments_on_pull_request tool.
"""

import pytest

from plugins.azdo.errors import InvalidArgumentsError, ToolExecutionError

from .test_helpers import (
    assert_no_upstream_calls,
    create_mock_comment,
    create_mock_page,
    create_mock_thread,
    create_upstream_error,
    parse_tool_output,
)


class TestPullRequestCommentsProperties:
    """Test the tool definition."""

    def test_name_and_schema(self, pr_comments_tool):
        assert pr_comments_tool.name == "get_comments_on_pull_request"
        assert pr_comments_tool.input_schema["required"] == ["repo", "pr_id"]


class TestGetComments:
    """Test reading the comment threads of a pull request."""

    @pytest.mark.asyncio
    async def test_request_path(self, pr_comments_tool, fake_client):
        fake_client.responses = [create_mock_page([])]

        await pr_comments_tool.get_comments("repo-a", 123)

        assert fake_client.calls == [
            {
                "method": "GET",
                "path": "git/repositories/repo-a/pullrequests/123/threads",
                "query": None,
                "body": None,
                "project": None,
            }
        ]

    @pytest.mark.asyncio
    async def test_string_pr_id(self, pr_comments_tool, fake_client):
        fake_client.responses = [create_mock_page([])]

        await pr_comments_tool.get_comments("repo-a", "456")

        assert fake_client.calls[0]["path"] == "git/repositories/repo-a/pullrequests/456/threads"

    @pytest.mark.asyncio
    async def test_execute_tool_output(self, pr_comments_tool, fake_client):
        fake_client.responses = [
            create_mock_page([
                create_mock_thread(1, comments=[create_mock_comment(5, "Please rename")]),
                create_mock_thread(2, status=None, comments=[]),
            ])
        ]

        output = parse_tool_output(
            await pr_comments_tool.execute_tool({"repo": "repo-a", "pr_id": 9})
        )

        assert output["count"] == 2
        first, second = output["threads"]
        assert first["comments"] == [
            {
                "id": 5,
                "content": "Please rename",
                "author": "Reviewer",
                "publishedDate": "2024-01-16T09:00:00Z",
                "lastUpdatedDate": "2024-01-16T09:30:00Z",
                "commentType": "text",
            }
        ]
        assert second["comments"] == []
        assert second["status"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [{}, {"repo": "repo-a"}, {"pr_id": 1}, {"repo": "", "pr_id": 1}, {"repo": "r", "pr_id": True}],
    )
    async def test_missing_arguments(self, pr_comments_tool, fake_client, credential_provider, arguments):
        with pytest.raises(ToolExecutionError, match="^Failed to fetch PR comments: ") as exc_info:
            await pr_comments_tool.execute_tool(arguments)

        assert isinstance(exc_info.value.__cause__, InvalidArgumentsError)
        credential_provider.assert_not_called()
        assert_no_upstream_calls(fake_client)

    @pytest.mark.asyncio
    async def test_upstream_failure(self, pr_comments_tool, fake_client):
        fake_client.responses = [create_upstream_error(404, "Not Found")]

        with pytest.raises(ToolExecutionError) as exc_info:
            await pr_comments_tool.execute_tool({"repo": "repo-a", "pr_id": 1})

        assert str(exc_info.value) == (
            "Failed to fetch PR comments: Azure DevOps API returned 404: Not Found"
        )
