"""Hyperchain MCP server, exposing production-chain resolution as tools for AI agents."""

from hyperchain.mcp.server import mcp, run_server

__all__ = ["mcp", "run_server"]
