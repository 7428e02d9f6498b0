"""Shared plumbing for the Azure DevOps tools."""

import asyncio
import json
import logging
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, ValidationError

from mcp_tools.interfaces import ToolInterface
from mcp_tools.types import TextContent

# Import configuration manager
from config import AzureDevOpsSettings, env_manager

from .azure_rest_utils import AzureDevOpsClient, CredentialProvider, resolve_credential
from .errors import AzureDevOpsError, InvalidArgumentsError, ToolExecutionError

ClientFactory = Callable[..., AzureDevOpsClient]

# Failures a tool call reports instead of letting them escape unprefixed
TOOL_FAILURES = (
    AzureDevOpsError,
    ValidationError,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class AzureDevOpsTool(ToolInterface):
    """Base class for tools that call the Azure DevOps REST API.

    Subclasses implement :meth:`_execute`, which validates the arguments,
    performs the upstream calls and returns a pydantic record. This class
    serializes that record as the tool output and turns every failure into
    a :class:`ToolExecutionError` carrying :attr:`error_prefix`.

    Args:
        credential_provider: Callable returning the PAT. Defaults to reading
            ``AZURE_DEVOPS_PAT`` through the environment manager.
        client_factory: Callable building an :class:`AzureDevOpsClient`.
    """

    error_prefix = "Azure DevOps request failed"

    def __init__(
        self,
        credential_provider: Optional[CredentialProvider] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        super().__init__()
        self.credential_provider = credential_provider or resolve_credential
        self.client_factory = client_factory or AzureDevOpsClient
        self.logger = logging.getLogger(type(self).__module__)

    def _get_settings(self) -> AzureDevOpsSettings:
        """Read the Azure DevOps settings at call time."""
        return env_manager.ensure_loaded().get_azdo_settings()

    def _open_client(
        self, credential: str, settings: AzureDevOpsSettings
    ) -> AzureDevOpsClient:
        return self.client_factory(
            credential,
            settings.org,
            settings.project,
            api_version=settings.api_version,
            request_timeout=settings.request_timeout,
        )

    @staticmethod
    def _to_text_content(result: BaseModel) -> List[TextContent]:
        return [TextContent(type="text", text=json.dumps(result.model_dump(), indent=2))]

    @abstractmethod
    async def _execute(self, arguments: Dict[str, Any]) -> BaseModel:
        """Run the operation for validated arguments and return its record."""
        pass

    async def execute_tool(self, arguments: Dict[str, Any]) -> List[TextContent]:
        """Execute the tool and return its result as one JSON text block.

        Raises:
            ToolExecutionError: If validation, authentication, the upstream
                call or response parsing fails
        """
        try:
            result = await self._execute(arguments or {})
        except TOOL_FAILURES as e:
            self.logger.error(f"{self.name} failed: {e}")
            raise ToolExecutionError(f"{self.error_prefix}: {e}") from e

        return self._to_text_content(result)


def require_string(value: Any, key: str) -> str:
    """Return a required, non-empty string argument."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentsError(f"{key} is required")
    return value


def optional_string(value: Any, key: str) -> Optional[str]:
    """Return an optional string argument, treating an empty string as absent."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidArgumentsError(f"{key} must be a string")
    return value
