"""MCP server implementation for API Scout."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import httpx
import mcp.server.stdio
import mcp.types as types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from pydantic import ValidationError

from apiscout import __version__
from apiscout.core.auth.token_cache import TokenCache
from apiscout.mcp.tools import TOOL_DEFINITIONS, TOOLS_BY_NAME
from apiscout.storage.filesystem import JsonStorage
from apiscout.tools.context import ToolContext
from apiscout.utils.config import DEFAULT_SERVER_NAME, ServerSettings

logger = logging.getLogger(__name__)


class ApiScoutMCPServer:
    """MCP server that exposes API doc, credential and API call tools."""

    def __init__(
        self,
        settings: ServerSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        token_cache: TokenCache | None = None,
    ) -> None:
        self.settings = settings or ServerSettings()
        self.storage = JsonStorage(self.settings.storage_dir)
        self.token_cache = token_cache if token_cache is not None else TokenCache()
        self._http_client = http_client
        self._context: ToolContext | None = None

        self.server: Server = Server(DEFAULT_SERVER_NAME)
        self._register_handlers()

        logger.info(
            "Initialized API Scout MCP server with %s API docs and %s credentials (storage: %s)",
            len(self.storage.get_api_docs()),
            len(self.storage.get_credentials()),
            self.settings.storage_dir,
        )

    def _register_handlers(self) -> None:
        @self.server.list_tools()  # type: ignore
        async def handle_list_tools() -> list[types.Tool]:
            return self.list_tools()

        @self.server.call_tool()  # type: ignore
        async def handle_call_tool(
            name: str,
            arguments: dict[str, Any] | None,
        ) -> list[types.TextContent]:
            result = await self.call_tool(name, arguments or {})
            return [types.TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema(),
            )
            for tool in TOOL_DEFINITIONS
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate *arguments* and run the named tool handler."""
        tool = TOOLS_BY_NAME.get(name)
        if tool is None:
            return {"success": False, "error": f"Unknown tool: {name}"}

        try:
            params = tool.params_model.model_validate(arguments)
        except ValidationError as exc:
            return {
                "success": False,
                "error": f"Invalid arguments for {name}",
                "details": exc.errors(include_url=False, include_context=False),
            }

        logger.debug("Calling tool %s", name)
        context = await self._get_context()
        try:
            return await tool.handler(context, params)
        except Exception as exc:
            logger.exception("Error executing %s", name)
            return {"success": False, "error": str(exc)}

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.http_timeout)
        return self._http_client

    async def _get_context(self) -> ToolContext:
        if self._context is None:
            self._context = ToolContext.create(
                self.storage,
                await self._get_http_client(),
                settings=self.settings,
                token_cache=self.token_cache,
            )
        return self._context

    async def run_stdio(self) -> None:
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=DEFAULT_SERVER_NAME,
                    server_version=__version__,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        self._context = None


def run_mcp_server(storage_dir: str | Path | None = None) -> None:
    """Run the API Scout MCP server on stdio."""
    server = ApiScoutMCPServer(ServerSettings.from_cli(storage_dir))

    async def main() -> None:
        try:
            await server.run_stdio()
        finally:
            await server.close()

    asyncio.run(main())
