"""MCP Plugins Package.

This package contains plugins that extend the MCP toolset.
Each subdirectory contains a separate plugin implementation.
"""

# List of all plugin modules for easy importing
__all__ = ["azdo"]
