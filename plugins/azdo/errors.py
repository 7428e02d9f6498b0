"""Error kinds raised by the Azure DevOps plugin."""

from typing import Optional


class AzureDevOpsError(Exception):
    """Base class for every failure of an Azure DevOps tool call."""


class MissingCredentialError(AzureDevOpsError):
    """The personal access token is not configured."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "PAT is required. Set AZURE_DEVOPS_PAT environment variable."
        )


class InvalidArgumentsError(AzureDevOpsError):
    """A required tool argument is missing, empty or out of range."""


class UpstreamError(AzureDevOpsError):
    """Azure DevOps answered with a non-2xx status or an unreadable body.

    Attributes:
        status: HTTP status code, or None when the body could not be parsed
        status_text: HTTP reason phrase
        body_text: Response body, captured for write calls only
        url: The request URL
    """

    def __init__(
        self,
        status: Optional[int],
        status_text: str,
        body_text: Optional[str] = None,
        url: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.status = status
        self.status_text = status_text
        self.body_text = body_text
        self.url = url

        if message is None:
            message = f"Azure DevOps API returned {status}: {status_text}"
            if body_text is not None:
                message += f". Details: {body_text}"
        super().__init__(message)


class ToolExecutionError(Exception):
    """A tool invocation failed; the message carries the tool-specific prefix."""
