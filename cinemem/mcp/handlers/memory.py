"""Handlers for memory tools: write, search, delete."""

from typing import Any, Dict

from cinemem.mcp.context import ToolContext
from cinemem.mcp.sanitize import sanitize_array, sanitize_string, validate_int
from cinemem.storage import DEFAULT_TOP_K, MAX_TOP_K

# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_memory_write(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["kind"] = sanitize_string(arguments.get("kind"), "kind", 100, required=False)
    sanitized["text"] = sanitize_string(arguments.get("text"), "text", 10000, required=True)
    sanitized["source"] = sanitize_string(arguments.get("source"), "source", 200, required=False)
    sanitized["tags"] = sanitize_array(arguments.get("tags"), "tags", 100, 20)
    return sanitized


def validate_memory_search(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["query"] = sanitize_string(arguments.get("query"), "query", 500, required=True)
    sanitized["top_k"] = validate_int(arguments.get("top_k"), "top_k", 1, MAX_TOP_K, DEFAULT_TOP_K)
    sanitized["filter_tags"] = sanitize_array(
        arguments.get("filter_tags"), "filter_tags", 100, 20, drop_empty=False
    )
    return sanitized


def validate_memory_delete(arguments: Dict[str, Any]) -> Dict[str, Any]:
    return {"file_id": sanitize_string(arguments.get("file_id"), "file_id", 200, required=True)}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_memory_write(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    uploaded = await ctx.memory.write_note(
        kind=args["kind"],
        text=args["text"],
        source=args.get("source", ""),
        tags=args.get("tags"),
    )
    return {"ok": True, "fileId": uploaded.file_id}


async def handle_memory_search(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    results = await ctx.memory.search(
        args["query"],
        top_k=args.get("top_k", DEFAULT_TOP_K),
        filter_tags=args.get("filter_tags") or None,
    )
    return {"results": [r.to_dict() for r in results]}


async def handle_memory_delete(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    await ctx.store.delete_file(args["file_id"])
    return {"ok": True, "fileId": args["file_id"]}


# ---------------------------------------------------------------------------
# Registry dicts
# ---------------------------------------------------------------------------

HANDLERS = {
    "memory_write": handle_memory_write,
    "memory_search": handle_memory_search,
    "memory_delete": handle_memory_delete,
}

VALIDATORS = {
    "memory_write": validate_memory_write,
    "memory_search": validate_memory_search,
    "memory_delete": validate_memory_delete,
}
