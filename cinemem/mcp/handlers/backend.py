"""Handler for the single-endpoint backend tool.

Calls back into our own HTTP surface (Settings.backend_url) so an agent
can reach the route-level operations (mark seen, import, watchlist).
"""

from typing import Any, Dict

import httpx

from cinemem.mcp.context import ToolContext
from cinemem.mcp.sanitize import sanitize_mapping, validate_enum
from cinemem.mcp.tool_definitions import BACKEND_METHODS, BACKEND_PATHS


def validate_backend_request(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["path"] = validate_enum(arguments.get("path"), "path", BACKEND_PATHS)
    sanitized["method"] = validate_enum(arguments.get("method"), "method", BACKEND_METHODS, "POST")
    sanitized["body"] = sanitize_mapping(arguments.get("body"), "body", max_items=200)
    return sanitized


async def handle_backend_request(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    url = f"{ctx.settings.backend_url.rstrip('/')}{args['path']}"
    method = args.get("method", "POST")
    body = args.get("body")

    http = ctx.backend_http or httpx.AsyncClient(timeout=ctx.settings.request_timeout)
    try:
        response = await http.request(
            method,
            url,
            json=body if method == "POST" and body is not None else None,
            headers={"Content-Type": "application/json"},
        )
    finally:
        if ctx.backend_http is None:
            await http.aclose()

    try:
        data = response.json() if response.text else None
    except ValueError:
        data = {"raw": response.text}

    return {"status": response.status_code, "ok": response.is_success, "url": url, "data": data}


HANDLERS = {
    "backend_request": handle_backend_request,
}

VALIDATORS = {
    "backend_request": validate_backend_request,
}
