"""Handler for the generic Trakt passthrough tool."""

import logging
from typing import Any, Dict

from cinemem.mcp.context import ToolContext
from cinemem.mcp.sanitize import sanitize_mapping, sanitize_string, validate_enum
from cinemem.mcp.tool_definitions import TRAKT_METHODS

logger = logging.getLogger(__name__)


def validate_trakt_request(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["method"] = validate_enum(arguments.get("method"), "method", TRAKT_METHODS)
    path = sanitize_string(arguments.get("path"), "path", 500, required=True)
    if not path.startswith("/"):
        raise ValueError("path must start with '/'")
    sanitized["path"] = path
    query = sanitize_mapping(arguments.get("query"), "query")
    if query is not None:
        for key, value in query.items():
            if not isinstance(value, str):
                raise ValueError(f"query.{key} must be a string")
    sanitized["query"] = query
    sanitized["body"] = sanitize_mapping(arguments.get("body"), "body", max_items=200)
    reason = sanitize_string(arguments.get("reason"), "reason", 500, required=True)
    if len(reason) < 5:
        raise ValueError("reason too short (min 5 characters)")
    sanitized["reason"] = reason
    return sanitized


async def handle_trakt_request(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    logger.info("trakt_request %s %s (reason: %s)", args["method"], args["path"], args["reason"])
    return await ctx.trakt.request(
        args["method"],
        args["path"],
        query=args.get("query"),
        body=args.get("body"),
    )


HANDLERS = {
    "trakt_request": handle_trakt_request,
}

VALIDATORS = {
    "trakt_request": validate_trakt_request,
}
