"""API Scout: MCP tools for exploring OpenAPI docs and calling whitelisted APIs."""

__version__ = "0.3.0"
