"""
Tests for the create_work_item tool.
"""

import pytest

from plugins.azdo.errors import (
    InvalidArgumentsError,
    MissingCredentialError,
    ToolExecutionError,
    UpstreamError,
)
from plugins.azdo.workitem_tool import build_work_item_patch_document, validate_priority

from .test_helpers import (
    assert_no_upstream_calls,
    create_mock_work_item_response,
    create_upstream_error,
    parse_tool_output,
)


def _patch_fields(call):
    return [(op["path"], op["value"]) for op in call["body"]]


class TestWorkItemToolProperties:
    """Test the tool definition."""

    def test_name_and_schema(self, workitem_tool):
        schema = workitem_tool.input_schema
        assert workitem_tool.name == "create_work_item"
        assert schema["required"] == ["title", "description", "type"]
        assert schema["properties"]["type"]["enum"] == ["Task", "Bug"]
        assert schema["properties"]["priority"]["default"] == 2
        # Whole floats such as 3.0 are accepted, so the schema allows numbers
        assert schema["properties"]["priority"]["type"] == "number"


class TestPatchDocument:
    """Test building the JSON-patch document."""

    def test_minimal_document_order(self):
        operations = build_work_item_patch_document("T", "D", 2)

        assert [op.model_dump() for op in operations] == [
            {"op": "add", "path": "/fields/System.Title", "value": "T"},
            {"op": "add", "path": "/fields/System.Description", "value": "D"},
            {"op": "add", "path": "/fields/Microsoft.VSTS.Common.Priority", "value": "2"},
        ]

    def test_assignee_then_tags(self):
        operations = build_work_item_patch_document(
            "T", "D", 1, assigned_to="dev@example.com", tags=["x", "y"]
        )

        assert [(op.path, op.value) for op in operations][2:] == [
            ("/fields/Microsoft.VSTS.Common.Priority", "1"),
            ("/fields/System.AssignedTo", "dev@example.com"),
            ("/fields/System.Tags", "x; y"),
        ]

    def test_empty_tags_omitted(self):
        operations = build_work_item_patch_document("T", "D", 2, tags=[])
        assert "/fields/System.Tags" not in [op.path for op in operations]


class TestValidatePriority:
    """Test priority validation."""

    @pytest.mark.parametrize("priority,expected", [(None, 2), (1, 1), (4, 4), (3.0, 3)])
    def test_valid(self, priority, expected):
        assert validate_priority(priority) == expected

    @pytest.mark.parametrize("priority", [0, 5, -1, 2.5, "2", True])
    def test_invalid(self, priority):
        with pytest.raises(InvalidArgumentsError):
            validate_priority(priority)


class TestCreateWorkItem:
    """Test creating work items."""

    @pytest.mark.asyncio
    async def test_create_task(self, workitem_tool, fake_client):
        fake_client.responses = [create_mock_work_item_response(42, "Task", "Write docs")]

        result = await workitem_tool.create_work_item(
            title="Write docs", description="Document the API", work_item_type="Task"
        )

        call = fake_client.calls[0]
        assert call["method"] == "POST"
        assert call["path"] == "wit/workitems/$Task"
        assert call["project"] is None
        assert _patch_fields(call) == [
            ("/fields/System.Title", "Write docs"),
            ("/fields/System.Description", "Document the API"),
            ("/fields/Microsoft.VSTS.Common.Priority", "2"),
        ]
        assert result.id == 42
        assert result.message == "Successfully created Task work item #42: Write docs"

    @pytest.mark.asyncio
    async def test_execute_tool_with_all_arguments(self, workitem_tool, fake_client):
        fake_client.responses = [
            create_mock_work_item_response(7, "Bug", "Crash", assigned_to="dev@example.com")
        ]

        output = parse_tool_output(
            await workitem_tool.execute_tool(
                {
                    "title": "Crash",
                    "description": "App crashes on start",
                    "type": "Bug",
                    "assignedTo": "dev@example.com",
                    "priority": 1,
                    "tags": ["x", "y"],
                    "project": "Other Project",
                }
            )
        )

        call = fake_client.calls[0]
        assert call["path"] == "wit/workitems/$Bug"
        assert call["project"] == "Other Project"
        assert _patch_fields(call) == [
            ("/fields/System.Title", "Crash"),
            ("/fields/System.Description", "App crashes on start"),
            ("/fields/Microsoft.VSTS.Common.Priority", "1"),
            ("/fields/System.AssignedTo", "dev@example.com"),
            ("/fields/System.Tags", "x; y"),
        ]
        assert output == {
            "id": 7,
            "url": "https://dev.azure.com/testorg/Test%20Project/_workitems/edit/7",
            "type": "Bug",
            "title": "Crash",
            "state": "New",
            "createdBy": "Creator",
            "assignedTo": "dev@example.com",
            "message": "Successfully created Bug work item #7: Crash",
        }

    @pytest.mark.asyncio
    async def test_empty_tags_and_assignee_omitted(self, workitem_tool, fake_client):
        fake_client.responses = [create_mock_work_item_response()]

        await workitem_tool.execute_tool(
            {"title": "T", "description": "D", "type": "Task", "tags": [], "assignedTo": ""}
        )

        paths = [path for path, _ in _patch_fields(fake_client.calls[0])]
        assert "/fields/System.Tags" not in paths
        assert "/fields/System.AssignedTo" not in paths

    @pytest.mark.asyncio
    @pytest.mark.parametrize("priority", [0, 5])
    async def test_out_of_range_priority_makes_no_request(
        self, workitem_tool, fake_client, credential_provider, priority
    ):
        with pytest.raises(ToolExecutionError, match="^Failed to create work item: priority") as exc_info:
            await workitem_tool.execute_tool(
                {"title": "T", "description": "D", "type": "Task", "priority": priority}
            )

        assert isinstance(exc_info.value.__cause__, InvalidArgumentsError)
        credential_provider.assert_not_called()
        assert_no_upstream_calls(fake_client)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [
            {"description": "D", "type": "Task"},
            {"title": "T", "type": "Task"},
            {"title": "T", "description": "D"},
            {"title": "T", "description": "D", "type": "Epic"},
            {"title": "T", "description": "D", "type": "Task", "tags": "x"},
        ],
    )
    async def test_invalid_arguments(self, workitem_tool, fake_client, arguments):
        with pytest.raises(ToolExecutionError) as exc_info:
            await workitem_tool.execute_tool(arguments)

        assert isinstance(exc_info.value.__cause__, InvalidArgumentsError)
        assert_no_upstream_calls(fake_client)

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(
        self, workitem_tool, fake_client, credential_provider
    ):
        credential_provider.side_effect = MissingCredentialError()

        with pytest.raises(ToolExecutionError) as exc_info:
            await workitem_tool.execute_tool({"title": "T", "description": "D", "type": "Task"})

        assert str(exc_info.value) == (
            "Failed to create work item: PAT is required. Set AZURE_DEVOPS_PAT environment variable."
        )
        assert_no_upstream_calls(fake_client)

    @pytest.mark.asyncio
    async def test_upstream_failure_includes_details(self, workitem_tool, fake_client):
        fake_client.responses = [
            create_upstream_error(400, "Bad Request", body_text="TF401326: Invalid field")
        ]

        with pytest.raises(ToolExecutionError) as exc_info:
            await workitem_tool.execute_tool({"title": "T", "description": "D", "type": "Bug"})

        assert str(exc_info.value) == (
            "Failed to create work item: Azure DevOps API returned 400: Bad Request. "
            "Details: TF401326: Invalid field"
        )
        assert isinstance(exc_info.value.__cause__, UpstreamError)

    @pytest.mark.asyncio
    async def test_whole_float_priority_is_sent_as_integer(self, workitem_tool, fake_client):
        fake_client.responses = [create_mock_work_item_response()]

        await workitem_tool.execute_tool(
            {"title": "T", "description": "D", "type": "Task", "priority": 3.0}
        )

        assert ("/fields/Microsoft.VSTS.Common.Priority", "3") in _patch_fields(fake_client.calls[0])
