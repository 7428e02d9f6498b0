"""MCP server exposing the registered tools over SSE or stdio."""
