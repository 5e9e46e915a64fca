"""Test helpers shared across the API Scout test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from apiscout.models.api_doc import ApiDoc, ApiEndpoint
from apiscout.models.credential import Credential, CredentialConfig, CredentialType

Handler = Callable[[httpx.Request], httpx.Response]


class MockApi:
    """Route table for ``httpx.MockTransport`` that records every request.

    Routes are keyed by ``(METHOD, url-without-query)``. Responses registered
    for a route are served in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[httpx.Response | Handler]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, *responses: httpx.Response | Handler) -> None:
        self.routes[(method.upper(), url)] = list(responses)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method.upper() and str(r.url.copy_with(query=None)) == url
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url.copy_with(query=None)))
        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json={"error": "no route", "url": str(request.url)})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        return item(request) if callable(item) else item

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def make_credential(
    cred_type: CredentialType = CredentialType.BEARER,
    credential_id: str = "cred",
    **config: Any,
) -> Credential:
    """Build a credential directly, bypassing admission control."""
    return Credential(
        id=credential_id,
        name=credential_id.title(),
        type=cred_type,
        config=CredentialConfig(**config),
    )


def make_smart_bearer(credential_id: str = "smart", **overrides: Any) -> Credential:
    config: dict[str, Any] = {
        "login_url": "https://auth.example.com/login",
        "login_body": {"u": "a", "p": "b"},
        "token_path": "accessToken",
        "invalid_status_codes": [401],
    }
    config.update(overrides)
    return make_credential(CredentialType.BEARER, credential_id, **config)


def make_api_doc(
    doc_id: str = "petstore",
    base_url: str = "https://api.example.com/v1",
    endpoints: list[ApiEndpoint] | None = None,
    **fields: Any,
) -> ApiDoc:
    if endpoints is None:
        endpoints = [
            ApiEndpoint(path="/pets", method="GET", summary="List pets", tags=["pets"]),
            ApiEndpoint(
                path="/pets/{petId}",
                method="GET",
                summary="Get a pet",
                tags=["pets"],
                parameters=[{"name": "petId", "in": "path", "required": True}],
            ),
        ]
    return ApiDoc(
        id=doc_id,
        name=doc_id.title(),
        base_url=base_url,
        endpoints=endpoints,
        **fields,
    )
