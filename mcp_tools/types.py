"""
Protocol content types used throughout the mcp_tools package.

Tools return these models; the server converts them into the
wire types of the MCP library.
"""

from typing import Dict, Any, Optional, Literal
from pydantic import BaseModel, ConfigDict


class TextContent(BaseModel):
    """Text content for a message."""

    type: Literal["text"] = "text"
    text: str
    """The text content of the message."""

    model_config = ConfigDict(extra="allow")


class Tool(BaseModel):
    """Definition for a tool the client can call."""

    name: str
    """The name of the tool."""
    description: Optional[str] = None
    """A human-readable description of the tool."""
    inputSchema: Dict[str, Any]
    """A JSON Schema object defining the expected parameters for the tool."""

    model_config = ConfigDict(extra="allow")
