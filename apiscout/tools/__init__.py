"""MCP tool handlers.

Each handler takes a :class:`ToolContext` and a validated parameter model and
returns a JSON-serializable dict. Handlers never raise for expected failures;
they report ``{"success": False, "error": ...}`` instead.
"""

from apiscout.tools.context import ToolContext

__all__ = ["ToolContext"]
