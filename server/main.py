import os
from pathlib import Path
import logging
import click
import json
import datetime
import time
from typing import Dict, Any, Optional, List

# Starlette and uvicorn imports
from starlette.applications import Starlette
from starlette.routing import Route, Mount
from starlette.requests import Request
from starlette.responses import Response

import anyio
import uvicorn

# MCP imports
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

# Import tools directly from mcp_tools
from mcp_tools.plugin import registry, discover_and_register_tools

from config import env

from server.tool_result_processor import process_tool_result

SCRIPT_DIR = Path(__file__).resolve().parent

# Create the server
server = Server("azdo-tools")

# Initialize tools system directly
discover_and_register_tools()

logging.info(
    f"Registered {len(registry.tools)} tools: {', '.join(registry.tools) or 'None'}"
)


# Tool history recording functions
def get_new_invocation_dir(tool_name: str) -> Optional[Path]:
    """Create and return a new directory for this tool invocation."""
    if not env.is_tool_history_enabled():
        return None
    base_path = env.get_tool_history_path()
    if not os.path.isabs(base_path):
        base_path = SCRIPT_DIR / base_path
    history_dir = Path(base_path)
    history_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S_%f")
    # Directory name includes tool name for clarity
    invocation_dir = history_dir / f"{timestamp}_{tool_name}"
    invocation_dir.mkdir(parents=True, exist_ok=True)
    return invocation_dir


def record_tool_invocation(
    tool_name: str,
    arguments: Dict[str, Any],
    result: Any,
    duration_ms: float,
    success: bool = True,
    error: Optional[str] = None,
    invocation_dir: Optional[Path] = None,
) -> bool:
    """Record a tool invocation to a record.jsonl file in the invocation directory."""
    if not env.is_tool_history_enabled() or invocation_dir is None:
        return False
    try:
        record = {
            "timestamp": datetime.datetime.now().isoformat(),
            "tool": tool_name,
            "arguments": arguments,
            "result": (
                result
                if isinstance(result, (dict, list, str, int, float, bool, type(None)))
                else str(result)
            ),
            "duration_ms": duration_ms,
            "success": success,
        }
        if error:
            record["error"] = error
        record_file = invocation_dir / "record.jsonl"
        with open(record_file, "a", encoding="utf-8") as f:
            json_str = json.dumps(record, indent=4, sort_keys=True)
            f.write(json_str + "\n")
        logging.debug(f"Recorded tool invocation for {tool_name} in {record_file}")
        return True
    except (OSError, TypeError, ValueError) as e:
        logging.error(f"Error recording tool invocation: {e}")
        return False


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.inputSchema)
        for tool in registry.get_tool_definitions()
    ]


@server.call_tool()
async def call_tool_handler(name: str, arguments: dict) -> List[TextContent]:
    """Dispatch a tool call to the registered tool.

    Failures are raised, never returned as text, so the protocol layer
    reports the call result as an error.
    """
    logging.info(f"TOOL CALL HANDLER INVOKED: {name}")
    arguments = arguments or {}

    invocation_dir = get_new_invocation_dir(name)

    tool = registry.get_tool_instance(name)
    if not tool:
        available_tools = ", ".join(registry.tools) or "None"
        error_msg = f"Tool '{name}' not found. Available tools: {available_tools}"
        logging.error(error_msg)
        record_tool_invocation(
            name, arguments, None, 0, False, error_msg, invocation_dir
        )
        raise ValueError(error_msg)

    start_time = time.time()
    try:
        result = await tool.execute_tool(arguments)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logging.error(f"Error executing tool {name}: {e}")
        record_tool_invocation(
            name, arguments, None, duration_ms, False, str(e), invocation_dir
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    logging.info(f"Tool '{name}' executed successfully in {duration_ms:.2f}ms")

    # Process the tool result into protocol content types
    content_items = process_tool_result(result)
    record_tool_invocation(
        name,
        arguments,
        [item.text for item in content_items],
        duration_ms,
        True,
        None,
        invocation_dir,
    )
    return content_items


# Setup SSE transport
sse = SseServerTransport("/messages/")


async def handle_sse(request: Request):
    async with sse.connect_sse(
        request.scope, request.receive, request._send
    ) as streams:
        options = server.create_initialization_options()
        try:
            await server.run(streams[0], streams[1], options, raise_exceptions=False)
        except Exception as e:
            # Keep the worker alive when a single client session breaks
            logging.error(f"SSE handler error: {type(e).__name__}: {e}")
    return Response()


routes = [
    Route("/sse", endpoint=handle_sse),
    Mount("/messages/", app=sse.handle_post_message),
]

# Create Starlette app
starlette_app = Starlette(routes=routes)


async def run_stdio() -> None:
    """Serve the tools over stdin/stdout."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )


def setup_logging(console_level: str = "INFO") -> None:
    """Log DEBUG to server/.logs/server.log and ``console_level`` to stderr."""
    # Ensure the logs directory exists
    log_dir = SCRIPT_DIR / ".logs"
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / "server.log"

    # basicConfig does nothing once the root logger has handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(str(log_file.absolute()))
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    level = logging.getLevelName(str(console_level).upper())
    console_handler.setLevel(level if isinstance(level, int) else logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)


# Setup function for logging and environment
def setup():
    env.load()
    setup_logging(env.get_setting("log_level", "INFO"))

    logging.info(f"Loaded configuration: {env.get_all_configuration()}")

    if not env.get_azdo_settings().has_credential:
        logging.warning(
            "AZURE_DEVOPS_PAT is not set; Azure DevOps tools will fail until it is configured"
        )

    if env.is_tool_history_enabled():
        logging.info(
            f"Tool history recording is enabled. Recording to: {env.get_tool_history_path()}"
        )
    else:
        logging.info("Tool history recording is disabled")


@click.command()
@click.option("--port", default=None, type=int, help="Port to run the server on")
@click.option(
    "--transport",
    default="sse",
    type=click.Choice(["sse", "stdio"]),
    help="Serve over HTTP with server-sent events, or over stdin/stdout",
)
def main(port: Optional[int] = None, transport: str = "sse") -> None:
    setup()

    if transport == "stdio":
        logging.info("Starting server on stdio")
        anyio.run(run_stdio)
        return

    # Determine port from CLI argument, environment, or default
    if port is None:
        port = env.get_setting("server_port", 8000)

    logging.info(f"Starting server on port {port}")
    uvicorn.run(starlette_app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
