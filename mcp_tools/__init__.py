"""MCP Tools - tool interface, registry and content types."""

from mcp_tools.interfaces import ToolInterface

from mcp_tools.plugin import (
    register_tool,
    registry,
    discover_and_register_tools,
    PluginRegistry,
)

from mcp_tools.types import TextContent, Tool

__version__ = "0.1.0"

__all__ = [
    "ToolInterface",
    "register_tool",
    "registry",
    "discover_and_register_tools",
    "PluginRegistry",
    "TextContent",
    "Tool",
]
