"""Tool surface for movie memory (MCP server and agent tools)."""
