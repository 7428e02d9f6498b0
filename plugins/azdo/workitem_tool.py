"""Azure DevOps work item tool implementation."""

from typing import Dict, Any, List, Optional
from urllib.parse import quote

from mcp_tools.plugin import register_tool

from .errors import InvalidArgumentsError
from .projections import project_work_item
from .tool_base import AzureDevOpsTool, optional_string, require_string
from .types import CreatedWorkItem, PatchOperation

WORK_ITEM_TYPES = ("Task", "Bug")
DEFAULT_PRIORITY = 2
MIN_PRIORITY = 1
MAX_PRIORITY = 4


def validate_priority(priority: Any) -> int:
    """Return the priority as an int in 1..4, defaulting to 2 when absent."""
    if priority is None:
        return DEFAULT_PRIORITY
    if isinstance(priority, bool) or not isinstance(priority, (int, float)):
        raise InvalidArgumentsError(f"priority must be a number, got {priority!r}")
    if isinstance(priority, float):
        if not priority.is_integer():
            raise InvalidArgumentsError(f"priority must be a whole number, got {priority}")
        priority = int(priority)
    if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise InvalidArgumentsError(
            f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {priority}"
        )
    return priority


def validate_tags(tags: Any) -> List[str]:
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise InvalidArgumentsError("tags must be a list of strings")
    return list(tags)


def build_work_item_patch_document(
    title: str,
    description: str,
    priority: int,
    assigned_to: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> List[PatchOperation]:
    """Build the JSON-patch document that creates a work item.

    Operations are ordered: title, description, priority, then the assignee
    and the tags when present. An empty tag list adds no operation.
    """
    operations = [
        PatchOperation(path="/fields/System.Title", value=title),
        PatchOperation(path="/fields/System.Description", value=description),
        PatchOperation(path="/fields/Microsoft.VSTS.Common.Priority", value=str(priority)),
    ]
    if assigned_to:
        operations.append(PatchOperation(path="/fields/System.AssignedTo", value=assigned_to))
    if tags:
        operations.append(PatchOperation(path="/fields/System.Tags", value="; ".join(tags)))
    return operations


@register_tool
class AzureWorkItemTool(AzureDevOpsTool):
    """Create Task and Bug work items in Azure DevOps.

    Example:
        tool = AzureWorkItemTool()
        created = await tool.create_work_item(
            title="Flaky build",
            description="The nightly build fails one run in ten",
            work_item_type="Bug",
            priority=1,
            tags=["ci", "build"],
        )
        print(created.message)
    """

    error_prefix = "Failed to create work item"

    @property
    def name(self) -> str:
        """Get the tool name."""
        return "create_work_item"

    @property
    def description(self) -> str:
        """Get the tool description."""
        return "Create a new work item (Task or Bug) in Azure DevOps"

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return {
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Title of the work item",
                },
                "description": {
                    "type": "string",
                    "description": "Description of the work item",
                },
                "type": {
                    "type": "string",
                    "enum": list(WORK_ITEM_TYPES),
                    "description": "Type of work item to create",
                },
                "assignedTo": {
                    "type": "string",
                    "description": "Email of the user to assign the work item to",
                },
                "project": {
                    "type": "string",
                    "description": "Azure DevOps project name (uses the configured project if not provided)",
                },
                "priority": {
                    "type": "number",
                    "minimum": MIN_PRIORITY,
                    "maximum": MAX_PRIORITY,
                    "default": DEFAULT_PRIORITY,
                    "description": "Priority of the work item, 1 (highest) to 4 (lowest)",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Tags to add to the work item",
                },
            },
            "required": ["title", "description", "type"],
        }

    async def create_work_item(
        self,
        title: str,
        description: str,
        work_item_type: str,
        assigned_to: Optional[str] = None,
        priority: Optional[int] = None,
        tags: Optional[List[str]] = None,
        project: Optional[str] = None,
    ) -> CreatedWorkItem:
        """Create a work item.

        Args:
            title: Title of the work item
            description: Description of the work item
            work_item_type: ``Task`` or ``Bug``
            assigned_to: Optional assignee
            priority: 1 to 4, defaults to 2
            tags: Optional tags, joined with ``"; "``
            project: Project override, defaults to the configured project

        Returns:
            The created work item with a confirmation message

        Raises:
            InvalidArgumentsError: If an argument is missing or out of range
            MissingCredentialError: If no PAT is configured
            UpstreamError: If Azure DevOps rejects the request
        """
        title = require_string(title, "title")
        description = require_string(description, "description")
        if work_item_type not in WORK_ITEM_TYPES:
            raise InvalidArgumentsError(
                f"type must be one of {', '.join(WORK_ITEM_TYPES)}, got {work_item_type!r}"
            )
        assigned_to = optional_string(assigned_to, "assignedTo")
        project = optional_string(project, "project")
        priority = validate_priority(priority)
        tags = validate_tags(tags)

        credential = self.credential_provider()
        settings = self._get_settings()

        patch_document = build_work_item_patch_document(
            title, description, priority, assigned_to=assigned_to, tags=tags
        )
        self.logger.debug(
            f"Creating {work_item_type} work item in project {project or settings.project}"
        )

        async with self._open_client(credential, settings) as client:
            item = await client.request(
                "POST",
                f"wit/workitems/${quote(work_item_type, safe='')}",
                body=[operation.model_dump() for operation in patch_document],
                project=project,
            )

        result = project_work_item(item, work_item_type, title)
        self.logger.info(result.message)
        return result

    async def _execute(self, arguments: Dict[str, Any]) -> CreatedWorkItem:
        return await self.create_work_item(
            title=arguments.get("title"),
            description=arguments.get("description"),
            work_item_type=arguments.get("type"),
            assigned_to=arguments.get("assignedTo"),
            priority=arguments.get("priority"),
            tags=arguments.get("tags"),
            project=arguments.get("project"),
        )
