"""Tool result processing utilities.

This module converts tool execution results into the MCP content types
returned by the server.
"""

import json
from typing import Any, List

from mcp.types import TextContent


def process_tool_result(result: Any) -> List[TextContent]:
    """Process a tool execution result into MCP content types.

    Args:
        result: The result from a tool execution. Can be:
            - List of TextContent objects (returned as-is)
            - List of objects with type/text attributes, such as the
              content models returned by the tools (converted to TextContent)
            - List of dicts with text properties (converted to TextContent)
            - Single TextContent object (wrapped in list)
            - Dictionary (serialized as indented JSON)
            - Any other type (converted to string and wrapped in TextContent)

    Returns:
        List of TextContent objects
    """
    if isinstance(result, list):
        if all(isinstance(item, TextContent) for item in result):
            return result
        elif all(isinstance(item, dict) for item in result):
            return [TextContent(**item) for item in result]
        elif all(hasattr(item, "type") and hasattr(item, "text") for item in result):
            return [TextContent(type="text", text=item.text) for item in result]
        else:
            # Mixed or unknown list contents - convert to text
            return [TextContent(type="text", text=str(result))]
    elif isinstance(result, TextContent):
        return [result]
    elif isinstance(result, dict):
        return [TextContent(type="text", text=json.dumps(result, indent=2))]
    else:
        return [TextContent(type="text", text=str(result))]
