from typing import Optional
from pydantic import BaseModel


class AzureDevOpsSettings(BaseModel):
    """Model representing the Azure DevOps connection parameters"""

    org: str
    project: str
    creator_id: str
    api_version: str = "7.0"
    request_timeout: Optional[float] = None
    pat: Optional[str] = None

    @property
    def has_credential(self) -> bool:
        return bool(self.pat)
