"""Registered API documentation models."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from apiscout.models.credential import CamelModel, utc_now_iso

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


class ApiEndpoint(CamelModel):
    """A single operation extracted from an OpenAPI document.

    Parameter, request body and response objects are kept as the raw OpenAPI
    mappings so ``$ref`` entries can be resolved lazily.
    """

    model_config = ConfigDict(extra="ignore")

    path: str
    method: str
    summary: str | None = None
    description: str | None = None
    parameters: list[dict[str, Any]] = Field(default_factory=list)
    request_body: dict[str, Any] | None = None
    responses: dict[str, Any] | None = None
    tags: list[str] = Field(default_factory=list)
    security: list[dict[str, list[str]]] | None = None


class ApiDoc(CamelModel):
    """An API registered from an OpenAPI/Swagger spec.

    Registering a doc whitelists its ``base_url`` for raw API calls.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    base_url: str
    spec_url: str | None = None
    version: str | None = None
    description: str | None = None
    endpoints: list[ApiEndpoint] = Field(default_factory=list)
    schemas: dict[str, Any] = Field(default_factory=dict)
    security_schemes: dict[str, Any] = Field(default_factory=dict)
    api_hash_url: str | None = None
    last_hash: str | None = None
    added_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    def tags(self) -> list[str]:
        """Distinct endpoint tags in first-seen order."""
        seen: dict[str, None] = {}
        for endpoint in self.endpoints:
            for tag in endpoint.tags:
                seen.setdefault(tag, None)
        return list(seen)
