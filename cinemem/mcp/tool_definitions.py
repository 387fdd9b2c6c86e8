"""Tool schema definitions for movie memory operations.

Each Tool() defines the name, description, and JSON Schemas (input and
output) for one tool. Validators and handlers live in cinemem.mcp.handlers.
"""

from mcp.types import Tool

from cinemem.storage import MAX_TOP_K

TRAKT_METHODS = ["GET", "POST", "PUT", "DELETE"]
BACKEND_METHODS = ["GET", "POST"]
BACKEND_PATHS = [
    "/mark-seen",
    "/import-trakt-history",
    "/trakt/watchlist/add",
    "/trakt/watchlist/remove",
]

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

SEARCH_RESULT_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "kind": {"type": "string"},
        "tags": {"type": "array"},
        "created_at": {},
        "score": {"type": "number"},
    },
    "required": ["text"],
}

TOOLS = [
    Tool(
        name="trakt_request",
        title="Trakt generic HTTP request",
        description=(
            "Make a generic request to the Trakt API with the server's credentials. "
            "Use it to read or change watch history, the watchlist, or to search content."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "method": {
                    "type": "string",
                    "enum": TRAKT_METHODS,
                    "description": "HTTP method",
                },
                "path": {
                    "type": "string",
                    "minLength": 1,
                    "pattern": "^/",
                    "description": "API path starting with '/', e.g. /sync/watchlist/movies",
                },
                "query": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                    "description": "Query string parameters",
                },
                "body": {
                    "type": "object",
                    "description": "JSON body (ignored for GET)",
                },
                "reason": {
                    "type": "string",
                    "minLength": 5,
                    "description": "Why this call is being made (kept for auditing)",
                },
            },
            "required": ["method", "path", "reason"],
            "additionalProperties": False,
        },
        outputSchema={
            "type": "object",
            "properties": {
                "status": {"type": "integer"},
                "ok": {"type": "boolean"},
                "headers": {"type": "object", "additionalProperties": {"type": "string"}},
                "data": {},
            },
            "required": ["status", "ok", "data"],
        },
    ),
    Tool(
        name="memory_write",
        title="Persistent memory write",
        description=(
            "Save a persistent note in the movie memory. Use it to record movies seen, "
            "watchlist changes, tastes, moods, profile notes, etc."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "kind": {
                    "type": "string",
                    "description": "Kind of note (e.g. 'movie_seen', 'mood', 'preference')",
                },
                "text": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Note content",
                },
                "source": {
                    "type": "string",
                    "description": "Where the note comes from (e.g. 'chat', 'trakt_event')",
                },
                "tags": {
                    **_STRING_ARRAY,
                    "description": "Tags for filtering searches",
                },
            },
            "required": ["kind", "text", "source"],
            "additionalProperties": False,
        },
        outputSchema={
            "type": "object",
            "properties": {
                "ok": {"type": "boolean"},
                "fileId": {"type": "string"},
            },
            "required": ["ok", "fileId"],
        },
    ),
    Tool(
        name="memory_search",
        title="Persistent memory search",
        description=(
            "Search the persistent movie memory for records containing the query "
            "(case-insensitive). Returns matches in storage order."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Text to look for",
                },
                "top_k": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_TOP_K,
                    "description": f"Maximum results (default 10, max {MAX_TOP_K})",
                },
                "filter_tags": {
                    **_STRING_ARRAY,
                    "description": "Only return records carrying all of these tags",
                },
            },
            "required": ["query"],
            "additionalProperties": False,
        },
        outputSchema={
            "type": "object",
            "properties": {
                "results": {"type": "array", "items": SEARCH_RESULT_SCHEMA},
            },
            "required": ["results"],
        },
    ),
    Tool(
        name="memory_delete",
        title="Persistent memory delete",
        description="Delete one memory file (as returned by memory_write) from the store.",
        inputSchema={
            "type": "object",
            "properties": {
                "file_id": {
                    "type": "string",
                    "minLength": 1,
                    "description": "File id returned when the memory was written",
                },
            },
            "required": ["file_id"],
            "additionalProperties": False,
        },
        outputSchema={
            "type": "object",
            "properties": {
                "ok": {"type": "boolean"},
                "fileId": {"type": "string"},
            },
            "required": ["ok", "fileId"],
        },
    ),
    Tool(
        name="backend_request",
        title="Movie backend call",
        description=(
            "Call the movie memory backend. Use /mark-seen when something was watched, "
            "/import-trakt-history to refresh history from Trakt, and "
            "/trakt/watchlist/add or /trakt/watchlist/remove to manage the watchlist."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "enum": BACKEND_PATHS,
                    "description": "Backend route",
                },
                "method": {
                    "type": "string",
                    "enum": BACKEND_METHODS,
                    "default": "POST",
                    "description": "HTTP method (default POST)",
                },
                "body": {
                    "type": ["object", "null"],
                    "description": "JSON body for the route, or null",
                },
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        outputSchema={
            "type": "object",
            "properties": {
                "status": {"type": "integer"},
                "ok": {"type": "boolean"},
                "url": {"type": "string"},
                "data": {},
            },
            "required": ["status", "ok", "url", "data"],
        },
    ),
]

TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}

# One coherent per-action surface for MCP clients; backend_request is the
# alternate single-endpoint style and is only offered to the agent on demand.
MCP_TOOL_NAMES = ("trakt_request", "memory_write", "memory_search", "memory_delete")
MCP_TOOLS = [TOOLS_BY_NAME[name] for name in MCP_TOOL_NAMES]
