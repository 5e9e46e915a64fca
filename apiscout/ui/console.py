"""Shared Rich console for CLI output.

Everything goes to stderr: stdout belongs to the MCP stdio transport and to
``apiscout config`` snippets.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

API_SCOUT_THEME = Theme(
    {
        "muted": "dim",
        "secret": "magenta",
    }
)

err_console = Console(stderr=True, theme=API_SCOUT_THEME)
