"""
cinemem MCP Server - movie memory operations for MCP clients.

Exposes the memory (write, search, delete) and a Trakt passthrough as MCP
tools so an assistant can read and update what the user has watched.

Every call goes through the same pipeline:
- JSON Schema validation against the tool's inputSchema
- per-tool sanitization (control characters, defaults)
- dispatch to the async handler
- result returned both as structured content and as JSON text

Usage:
    cinemem mcp  # Start MCP server (stdio transport)
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from cinemem.config import get_settings
from cinemem.errors import ConfigurationError, UpstreamError
from cinemem.mcp.context import ToolContext
from cinemem.mcp.handlers import HANDLERS, VALIDATORS
from cinemem.mcp.tool_definitions import MCP_TOOL_NAMES, MCP_TOOLS, TOOLS

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = Server("cinemem")

_SCHEMA_VALIDATORS: Dict[str, Draft7Validator] = {
    tool.name: Draft7Validator(tool.inputSchema) for tool in TOOLS
}

_context: Optional[ToolContext] = None


class ToolCallError(Exception):
    """A tool call failed; the message is safe to show to the caller."""

    pass


def set_context(ctx: Optional[ToolContext]) -> None:
    """Replace the tool context for this process (tests, embedding apps)."""
    global _context
    _context = ctx


def get_context() -> ToolContext:
    """Get or create the process-wide tool context."""
    global _context
    if _context is None:
        _context = ToolContext.from_settings(get_settings())
    return _context


# =============================================================================
# INPUT VALIDATION
# =============================================================================


def validate_tool_input(name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and sanitize tool inputs. No I/O happens here."""
    try:
        if not isinstance(name, str) or not name:
            raise ValueError("tool name must be a non-empty string")
        if not isinstance(arguments, dict):
            raise ValueError(f"arguments must be an object, got {type(arguments).__name__}")

        validator = VALIDATORS.get(name)
        schema_validator = _SCHEMA_VALIDATORS.get(name)
        if validator is None or schema_validator is None:
            raise ValueError(f"Unknown tool: {name}")

        errors = sorted(schema_validator.iter_errors(arguments), key=lambda err: list(err.path))
        if errors:
            first = errors[0]
            path = ".".join(str(part) for part in first.path) or "(root)"
            raise ValueError(f"Schema validation failed at {path}: {first.message}")

        return validator(arguments)

    except (ValueError, TypeError) as e:
        logger.warning(f"Input validation failed for tool {name}: {e}")
        raise ValueError(f"Invalid input: {str(e)}")


async def execute_tool(name: str, arguments: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """Validate then run one tool. Validation failures never reach the handler."""
    sanitized_args = validate_tool_input(name, arguments)
    return await HANDLERS[name](sanitized_args, ctx)


def render_tool_output(result: Dict[str, Any]) -> str:
    """Human-readable rendering for callers that only consume text."""
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def handle_tool_error(e: Exception, tool_name: str, arguments: Any) -> str:
    """Map a tool failure to a message that is safe to return."""
    if isinstance(e, ValueError):
        logger.warning(f"Invalid input for tool {tool_name}: {e}")
        message = str(e)
        return message if message.startswith("Invalid input") else f"Invalid input: {message}"

    elif isinstance(e, ConfigurationError):
        logger.warning(f"Tool {tool_name} unavailable: {e}")
        return f"Not configured: {e}"

    elif isinstance(e, UpstreamError):
        logger.error(f"Upstream error in tool {tool_name}: {e}")
        return f"Upstream service error: {e}"

    else:
        argument_keys = list(arguments.keys()) if isinstance(arguments, dict) else []
        logger.error(
            f"Internal error in tool {tool_name}",
            extra={
                "tool_name": tool_name,
                "arguments_keys": argument_keys,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        return "Internal server error"


# =============================================================================
# MCP PROTOCOL HANDLERS
# =============================================================================


@mcp.list_tools()
async def list_tools() -> list[Tool]:
    """List available movie memory tools."""
    return list(MCP_TOOLS)


@mcp.call_tool()
async def call_tool(
    name: str, arguments: Dict[str, Any]
) -> Tuple[List[TextContent], Dict[str, Any]]:
    """Handle tool calls; errors surface as MCP error results."""
    try:
        if name not in MCP_TOOL_NAMES:
            raise ValueError(f"Unknown tool: {name}")
        result = await execute_tool(name, arguments or {}, get_context())
        return [TextContent(type="text", text=render_tool_output(result))], result
    except Exception as e:
        raise ToolCallError(handle_tool_error(e, name, arguments)) from e


async def run_server():
    """Run the MCP server."""
    try:
        async with stdio_server() as (read_stream, write_stream):
            await mcp.run(
                read_stream,
                write_stream,
                mcp.create_initialization_options(),
            )
    finally:
        if _context is not None:
            await _context.aclose()


def main():
    """Entry point for MCP server (stdio transport)."""
    get_context()  # fail fast on missing configuration
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
