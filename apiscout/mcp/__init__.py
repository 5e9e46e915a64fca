"""MCP server exposing the API Scout tools over stdio."""

from apiscout.mcp.server import ApiScoutMCPServer, run_mcp_server

__all__ = ["ApiScoutMCPServer", "run_mcp_server"]
