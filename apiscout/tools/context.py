"""Shared collaborators for tool handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from apiscout.core.auth.applicator import CredentialApplicator
from apiscout.core.auth.lifecycle import TokenLifecycleManager
from apiscout.core.auth.token_cache import TokenCache
from apiscout.core.errors import ApiScoutError, NetworkError, WhitelistViolation
from apiscout.core.http.executor import RequestExecutor
from apiscout.core.whitelist import describe_whitelist
from apiscout.storage.filesystem import JsonStorage
from apiscout.utils.config import ServerSettings

NETWORK_SUGGESTION = "Verify that the target server is running and accessible."
TIMEOUT_SUGGESTION = "The API took too long to respond. Check server performance."


@dataclass
class ToolContext:
    """Everything a tool handler needs, wired once per server process."""

    storage: JsonStorage
    http_client: httpx.AsyncClient
    token_cache: TokenCache
    lifecycle: TokenLifecycleManager
    applicator: CredentialApplicator
    executor: RequestExecutor
    settings: ServerSettings

    @classmethod
    def create(
        cls,
        storage: JsonStorage,
        http_client: httpx.AsyncClient,
        settings: ServerSettings | None = None,
        token_cache: TokenCache | None = None,
    ) -> ToolContext:
        token_cache = token_cache if token_cache is not None else TokenCache()
        lifecycle = TokenLifecycleManager(http_client, token_cache)
        applicator = CredentialApplicator(lifecycle)
        return cls(
            storage=storage,
            http_client=http_client,
            token_cache=token_cache,
            lifecycle=lifecycle,
            applicator=applicator,
            executor=RequestExecutor(http_client, applicator, lifecycle),
            settings=settings or ServerSettings(storage_dir=storage.storage_dir),
        )


def error_result(message: str, suggestion: str | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"success": False, "error": message}
    if suggestion:
        result["suggestion"] = suggestion
    return result


def error_from_exception(exc: ApiScoutError) -> dict[str, Any]:
    """Convert a core error into the tool failure shape."""
    if isinstance(exc, WhitelistViolation):
        return error_result(
            exc.message,
            "Add an API doc with this baseURL to whitelist it. "
            f"Current whitelisted URLs: {describe_whitelist(exc.whitelist)}",
        )
    if isinstance(exc, NetworkError):
        return error_result(exc.message, TIMEOUT_SUGGESTION if exc.timeout else NETWORK_SUGGESTION)
    return error_result(exc.message)
