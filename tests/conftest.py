"""Shared test fixtures for the API Scout test suite."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from apiscout.core.auth.token_cache import TokenCache
from apiscout.storage.filesystem import JsonStorage
from apiscout.tools.context import ToolContext
from apiscout.utils.config import ServerSettings
from tests.helpers import MockApi


@pytest.fixture
def mock_api() -> MockApi:
    return MockApi()


@pytest_asyncio.fixture
async def http_client(mock_api: MockApi):
    async with mock_api.client() as client:
        yield client


@pytest.fixture
def storage(tmp_path: Path) -> JsonStorage:
    return JsonStorage(tmp_path / "store")


@pytest.fixture
def token_cache() -> TokenCache:
    return TokenCache()


@pytest.fixture
def tool_context(
    storage: JsonStorage,
    http_client: httpx.AsyncClient,
    token_cache: TokenCache,
) -> ToolContext:
    return ToolContext.create(
        storage,
        http_client,
        settings=ServerSettings(storage_dir=storage.storage_dir),
        token_cache=token_cache,
    )
