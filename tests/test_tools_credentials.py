"""Tests for the credential management tools."""

from __future__ import annotations

import httpx
import pytest

from apiscout.core.auth.token_cache import TokenCacheEntry
from apiscout.models.credential import AddCredentialParams, UpdateCredentialParams
from apiscout.tools.context import ToolContext
from apiscout.tools.credentials import (
    CredentialIdParams,
    ListCredentialsParams,
    add_credential,
    get_credential,
    list_credentials,
    remove_credential,
    update_credential,
)
from tests.helpers import MockApi, make_smart_bearer

LOGIN = "https://auth.example.com/login"


def _add(**fields: object) -> AddCredentialParams:
    return AddCredentialParams.model_validate(fields)


class TestAddCredential:
    @pytest.mark.asyncio
    async def test_api_key(self, tool_context: ToolContext) -> None:
        result = await add_credential(
            tool_context, _add(id="k", name="Key", type="apiKey", apiKey="abcdefghijklmnop")
        )

        assert result["success"] is True
        assert result["credential"]["id"] == "k"
        assert "updatedAt" not in result["credential"]
        stored = tool_context.storage.get_credential("k")
        assert stored is not None and stored.config.api_key == "abcdefghijklmnop"

    @pytest.mark.asyncio
    async def test_duplicate(self, tool_context: ToolContext) -> None:
        await add_credential(tool_context, _add(id="k", name="Key", type="apiKey", apiKey="a"))
        result = await add_credential(
            tool_context, _add(id="k", name="Key", type="apiKey", apiKey="b")
        )
        assert result == {"success": False, "error": "Credential 'k' already exists"}

    @pytest.mark.asyncio
    async def test_validation_error(self, tool_context: ToolContext) -> None:
        result = await add_credential(tool_context, _add(id="b", name="B", type="basic"))
        assert result["success"] is False
        assert "username and password" in result["error"]
        assert tool_context.storage.get_credential("b") is None

    @pytest.mark.asyncio
    async def test_smart_bearer_verification_failure_is_not_stored(
        self, tool_context: ToolContext, mock_api: MockApi
    ) -> None:
        mock_api.add("POST", LOGIN, httpx.Response(500, text="oops"))

        result = await add_credential(
            tool_context,
            _add(id="s", name="S", type="bearer", loginUrl=LOGIN, loginBody={"u": "a"}),
        )

        assert result["success"] is False
        assert result["error"].startswith("Credential verification failed")
        assert tool_context.storage.get_credential("s") is None

    @pytest.mark.asyncio
    async def test_smart_bearer_verified_and_stored(
        self, tool_context: ToolContext, mock_api: MockApi
    ) -> None:
        mock_api.add("POST", LOGIN, httpx.Response(200, json={"token": "t"}))

        result = await add_credential(
            tool_context,
            _add(id="s", name="S", type="bearer", loginUrl=LOGIN, loginBody={"u": "a"}),
        )

        assert result["success"] is True
        assert "s" not in tool_context.token_cache


class TestUpdateCredential:
    @pytest.mark.asyncio
    async def test_missing(self, tool_context: ToolContext) -> None:
        result = await update_credential(
            tool_context, UpdateCredentialParams.model_validate({"id": "ghost", "name": "x"})
        )
        assert result["error"] == "Credential 'ghost' not found"

    @pytest.mark.asyncio
    async def test_login_change_evicts_token(
        self, tool_context: ToolContext, mock_api: MockApi
    ) -> None:
        tool_context.storage.add_credential(make_smart_bearer())
        tool_context.token_cache.set("smart", TokenCacheEntry(credential_id="smart", token="old"))
        mock_api.add("POST", LOGIN, httpx.Response(200, json={"accessToken": "new"}))

        result = await update_credential(
            tool_context,
            UpdateCredentialParams.model_validate({"id": "smart", "loginBody": {"u": "a", "p": "z"}}),
        )

        assert result["success"] is True
        assert "createdAt" not in result["credential"]
        assert "smart" not in tool_context.token_cache
        stored = tool_context.storage.get_credential("smart")
        assert stored is not None and stored.config.login_body == {"u": "a", "p": "z"}

    @pytest.mark.asyncio
    async def test_failed_verification_leaves_record(
        self, tool_context: ToolContext, mock_api: MockApi
    ) -> None:
        tool_context.storage.add_credential(make_smart_bearer())
        mock_api.add("POST", LOGIN, httpx.Response(403, text="no"))

        result = await update_credential(
            tool_context,
            UpdateCredentialParams.model_validate({"id": "smart", "loginBody": {"u": "x"}}),
        )

        assert result["success"] is False
        stored = tool_context.storage.get_credential("smart")
        assert stored is not None and stored.config.login_body == {"u": "a", "p": "b"}


class TestReadAndRemove:
    @pytest.mark.asyncio
    async def test_list_filters_by_doc(self, tool_context: ToolContext) -> None:
        await add_credential(
            tool_context, _add(id="a", name="A", type="apiKey", apiKey="k", apiDocId="petstore")
        )
        await add_credential(tool_context, _add(id="b", name="B", type="bearer", token="t"))

        everything = await list_credentials(tool_context, ListCredentialsParams())
        filtered = await list_credentials(
            tool_context, ListCredentialsParams.model_validate({"apiDocId": "petstore"})
        )

        assert [c["id"] for c in everything["credentials"]] == ["a", "b"]
        assert [c["id"] for c in filtered["credentials"]] == ["a"]

    @pytest.mark.asyncio
    async def test_get_is_masked_and_reports_cache(self, tool_context: ToolContext) -> None:
        tool_context.storage.add_credential(make_smart_bearer(login_body={"password": "hunter2hunter2"}))
        tool_context.token_cache.set("smart", TokenCacheEntry(credential_id="smart", token="t"))

        result = await get_credential(tool_context, CredentialIdParams(id="smart"))

        credential = result["credential"]
        assert credential["config"]["loginBody"] == {"password": "hunt****ter2"}
        assert credential["tokenCached"] is True

    @pytest.mark.asyncio
    async def test_remove_forgets_token(self, tool_context: ToolContext) -> None:
        tool_context.storage.add_credential(make_smart_bearer())
        tool_context.token_cache.set("smart", TokenCacheEntry(credential_id="smart", token="t"))

        result = await remove_credential(tool_context, CredentialIdParams(id="smart"))
        again = await remove_credential(tool_context, CredentialIdParams(id="smart"))

        assert result["success"] is True
        assert "smart" not in tool_context.token_cache
        assert again["success"] is False
