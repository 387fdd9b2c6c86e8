"""
cinemem CLI - command-line access to the movie memory.

Usage:
    cinemem search QUERY [--top-k N] [--tag T]... [--json]
    cinemem note TEXT [--kind K] [--source S] [--tag T]...
    cinemem seen TITLE [--year Y] [--imdb ID] [--tag T]... [--no-trakt]
    cinemem mcp
    cinemem serve [--host H] [--port P]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from cinemem.config import get_settings
from cinemem.documents import MovieFact
from cinemem.errors import CinememError
from cinemem.mcp.context import ToolContext

# Set up logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

# The HTTP app lives beside the package in the source tree, not in the wheel
DEFAULT_APP_DIR = Path(__file__).resolve().parents[2] / "backend"


async def _with_context(coro_factory):
    ctx = ToolContext.from_settings(get_settings())
    try:
        return await coro_factory(ctx)
    finally:
        await ctx.aclose()


def cmd_search(args):
    """Search memory and print matches."""
    results = asyncio.run(
        _with_context(
            lambda ctx: ctx.memory.search(args.query, top_k=args.top_k, filter_tags=args.tag)
        )
    )
    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return
    if not results:
        print(f"No results for '{args.query}'")
        return
    print(f"Found {len(results)} result(s):\n")
    for i, r in enumerate(results, 1):
        print(f"{i}. [{r.kind}] {r.text}")
        if r.tags:
            print(f"   tags: {', '.join(str(t) for t in r.tags)}")


def cmd_note(args):
    """Write a free-form note."""
    uploaded = asyncio.run(
        _with_context(
            lambda ctx: ctx.memory.write_note(args.kind, args.text, args.source, args.tag)
        )
    )
    print(f"Note saved: {uploaded.file_id}")


def cmd_seen(args):
    """Mark a movie as seen."""
    fact = MovieFact(title=args.title, year=args.year, imdb=args.imdb, tags=args.tag or None)
    result = asyncio.run(
        _with_context(lambda ctx: ctx.memory.mark_seen(fact, sync_trakt=not args.no_trakt))
    )
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_mcp(args):
    """Start the MCP server on stdio."""
    from cinemem.mcp.server import main as mcp_main

    mcp_main()


def cmd_serve(args):
    """Run the HTTP backend."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        app_dir=args.app_dir,
        host=args.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="cinemem", description="Movie memory")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="search memory")
    p_search.add_argument("query")
    p_search.add_argument("--top-k", type=int, default=10)
    p_search.add_argument("--tag", action="append", help="required tag (repeatable)")
    p_search.add_argument("--json", action="store_true")
    p_search.set_defaults(func=cmd_search)

    p_note = sub.add_parser("note", help="write a note")
    p_note.add_argument("text")
    p_note.add_argument("--kind", default="note")
    p_note.add_argument("--source", default="cli")
    p_note.add_argument("--tag", action="append")
    p_note.set_defaults(func=cmd_note)

    p_seen = sub.add_parser("seen", help="mark a movie as seen")
    p_seen.add_argument("title")
    p_seen.add_argument("--year", type=int)
    p_seen.add_argument("--imdb")
    p_seen.add_argument("--tag", action="append")
    p_seen.add_argument("--no-trakt", action="store_true")
    p_seen.set_defaults(func=cmd_seen)

    p_mcp = sub.add_parser("mcp", help="start MCP server (stdio)")
    p_mcp.set_defaults(func=cmd_mcp)

    p_serve = sub.add_parser("serve", help="run the HTTP backend")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument(
        "--app-dir",
        default=str(DEFAULT_APP_DIR),
        help="directory holding the app package (default: backend/ of this checkout)",
    )
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (CinememError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
