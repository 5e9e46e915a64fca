"""Tests for applying credentials to request headers."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock

import pytest

from apiscout.core.auth.applicator import CredentialApplicator
from apiscout.models.credential import CredentialType, CustomHeader
from tests.helpers import make_credential, make_smart_bearer


@pytest.fixture
def lifecycle() -> AsyncMock:
    manager = AsyncMock()
    manager.obtain_token.return_value = "dyn-token"
    return manager


@pytest.fixture
def applicator(lifecycle: AsyncMock) -> CredentialApplicator:
    return CredentialApplicator(lifecycle)


class TestApply:
    @pytest.mark.asyncio
    async def test_api_key(self, applicator: CredentialApplicator) -> None:
        headers: dict[str, str] = {}
        credential = make_credential(
            CredentialType.API_KEY, api_key="k-123", api_key_header="X-API-Key"
        )
        await applicator.apply(headers, credential)
        assert headers == {"X-API-Key": "k-123"}

    @pytest.mark.asyncio
    async def test_static_bearer(
        self, applicator: CredentialApplicator, lifecycle: AsyncMock
    ) -> None:
        headers: dict[str, str] = {}
        await applicator.apply(headers, make_credential(token="static"))
        assert headers == {"Authorization": "Bearer static"}
        lifecycle.obtain_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_dynamic_bearer_uses_lifecycle(
        self, applicator: CredentialApplicator, lifecycle: AsyncMock
    ) -> None:
        headers: dict[str, str] = {}
        credential = make_smart_bearer(token="ignored-static")
        await applicator.apply(headers, credential)
        assert headers == {"Authorization": "Bearer dyn-token"}
        lifecycle.obtain_token.assert_awaited_once_with(credential)

    @pytest.mark.asyncio
    async def test_dynamic_bearer_custom_header_and_empty_prefix(
        self, applicator: CredentialApplicator
    ) -> None:
        headers: dict[str, str] = {}
        await applicator.apply(
            headers, make_smart_bearer(token_header="X-Session", token_prefix="")
        )
        assert headers == {"X-Session": "dyn-token"}

    @pytest.mark.asyncio
    async def test_basic(self, applicator: CredentialApplicator) -> None:
        headers: dict[str, str] = {}
        await applicator.apply(
            headers, make_credential(CredentialType.BASIC, username="alice", password="s3cret")
        )
        expected = base64.b64encode(b"alice:s3cret").decode()
        assert headers == {"Authorization": f"Basic {expected}"}

    @pytest.mark.asyncio
    async def test_oauth2(self, applicator: CredentialApplicator) -> None:
        headers: dict[str, str] = {}
        await applicator.apply(
            headers, make_credential(CredentialType.OAUTH2, access_token="oa", client_id="c")
        )
        assert headers == {"Authorization": "Bearer oa"}

    @pytest.mark.asyncio
    async def test_custom_merges_headers(self, applicator: CredentialApplicator) -> None:
        headers = {"Accept": "application/json", "X-Keep": "1"}
        await applicator.apply(
            headers,
            make_credential(CredentialType.CUSTOM, headers={"X-Keep": "2", "X-New": "3"}),
        )
        assert headers == {"Accept": "application/json", "X-Keep": "2", "X-New": "3"}

    @pytest.mark.asyncio
    async def test_custom_headers_applied_verbatim(
        self, applicator: CredentialApplicator
    ) -> None:
        pairs = [CustomHeader(name=f"X-H{i}", value=f"v {i}") for i in range(5)]
        headers: dict[str, str] = {}
        await applicator.apply(
            headers, make_credential(CredentialType.CUSTOM_HEADERS, custom_headers=pairs)
        )
        assert headers == {f"X-H{i}": f"v {i}" for i in range(5)}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("cred_type", "config"),
        [
            (CredentialType.API_KEY, {"api_key_header": "X-API-Key"}),
            (CredentialType.BEARER, {}),
            (CredentialType.BASIC, {"username": "only-user"}),
            (CredentialType.OAUTH2, {"client_id": "c"}),
            (CredentialType.CUSTOM, {}),
            (CredentialType.CUSTOM_HEADERS, {}),
        ],
    )
    async def test_missing_fields_are_a_noop(
        self,
        applicator: CredentialApplicator,
        cred_type: CredentialType,
        config: dict[str, str],
    ) -> None:
        headers = {"Accept": "application/json"}
        await applicator.apply(headers, make_credential(cred_type, **config))
        assert headers == {"Accept": "application/json"}
