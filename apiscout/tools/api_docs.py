"""API doc management tools. Registering a doc whitelists its base URL."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field

from apiscout.core.openapi import (
    OpenAPIError,
    extract_api_doc,
    fetch_openapi,
    parse_openapi_content,
)
from apiscout.models.credential import CamelModel
from apiscout.tools.context import ToolContext, error_result

logger = logging.getLogger(__name__)


class AddApiDocParams(CamelModel):
    id: str = Field(description='Unique identifier for the API doc (e.g., "petstore")')
    name: str = Field(description="Display name for the API")
    spec_url: str | None = Field(
        default=None, description="URL to OpenAPI/Swagger spec (JSON or YAML)"
    )
    spec_content: str | None = Field(
        default=None, description="OpenAPI/Swagger spec content as string (if not using URL)"
    )
    base_url: str | None = Field(
        default=None, description="Override base URL (auto-detected from spec if not provided)"
    )
    api_hash_url: str | None = Field(
        default=None, description="URL that returns a hash/version string to check for updates"
    )


class ApiDocIdParams(CamelModel):
    id: str = Field(description="ID of the API doc")


class ListApiDocsParams(CamelModel):
    verbose: bool = Field(default=False, description="Include endpoint count and other details")


class GetApiDocParams(CamelModel):
    id: str = Field(description="ID of the API doc to get details for")
    include_endpoints: bool = Field(default=False, description="Include full endpoint list")
    include_schemas: bool = Field(default=False, description="Include schema definitions")


async def add_api_doc(ctx: ToolContext, params: AddApiDocParams) -> dict[str, Any]:
    if ctx.storage.get_api_doc(params.id) is not None:
        return error_result(f"API doc '{params.id}' already exists")

    try:
        if params.spec_url:
            spec, _ = await fetch_openapi(ctx.http_client, params.spec_url)
        elif params.spec_content:
            spec = parse_openapi_content(params.spec_content)
        else:
            return error_result("Either specUrl or specContent must be provided")
    except OpenAPIError as exc:
        return error_result(exc.message)

    doc = extract_api_doc(spec, params.id, params.name, params.spec_url)
    if params.base_url:
        doc.base_url = params.base_url
    if params.api_hash_url:
        doc.api_hash_url = params.api_hash_url
    if not doc.base_url:
        return error_result("Could not determine baseUrl. Please provide it explicitly.")

    ctx.storage.add_api_doc(doc)
    return {
        "success": True,
        "apiDoc": {
            "id": doc.id,
            "name": doc.name,
            "baseUrl": doc.base_url,
            "version": doc.version,
            "description": doc.description,
            "endpointCount": len(doc.endpoints),
        },
    }


async def remove_api_doc(ctx: ToolContext, params: ApiDocIdParams) -> dict[str, Any]:
    if not ctx.storage.remove_api_doc(params.id):
        return {"success": False, "message": f"API doc '{params.id}' not found"}
    return {
        "success": True,
        "message": f"API doc '{params.id}' removed successfully. "
        "Its baseURL is no longer whitelisted.",
    }


async def list_api_docs(ctx: ToolContext, params: ListApiDocsParams) -> dict[str, Any]:
    docs = []
    for doc in ctx.storage.get_api_docs():
        entry: dict[str, Any] = {"id": doc.id, "name": doc.name, "baseUrl": doc.base_url}
        if params.verbose:
            entry.update(
                version=doc.version,
                endpointCount=len(doc.endpoints),
                addedAt=doc.added_at,
            )
        docs.append(entry)
    return {"apiDocs": docs, "whitelistedUrls": ctx.storage.get_whitelisted_base_urls()}


async def get_api_doc(ctx: ToolContext, params: GetApiDocParams) -> dict[str, Any]:
    doc = ctx.storage.get_api_doc(params.id)
    if doc is None:
        return error_result(f"API doc '{params.id}' not found")

    payload: dict[str, Any] = {
        "id": doc.id,
        "name": doc.name,
        "baseUrl": doc.base_url,
        "specUrl": doc.spec_url,
        "version": doc.version,
        "description": doc.description,
        "endpointCount": len(doc.endpoints),
        "tags": doc.tags(),
        "securitySchemeNames": list(doc.security_schemes),
        "addedAt": doc.added_at,
        "updatedAt": doc.updated_at,
    }
    if params.include_endpoints:
        payload["endpoints"] = [endpoint.to_json_dict() for endpoint in doc.endpoints]
    if params.include_schemas:
        payload["schemas"] = doc.schemas
    return {"success": True, "apiDoc": payload}


async def refresh_api_doc(ctx: ToolContext, params: ApiDocIdParams) -> dict[str, Any]:
    """Re-fetch a doc from its spec URL, keeping its base URL and addedAt."""
    existing = ctx.storage.get_api_doc(params.id)
    if existing is None:
        return {"success": False, "message": f"API doc '{params.id}' not found"}
    if not existing.spec_url:
        return {
            "success": False,
            "message": f"API doc '{params.id}' has no specUrl to refresh from",
        }

    try:
        spec, _ = await fetch_openapi(ctx.http_client, existing.spec_url)
    except OpenAPIError as exc:
        return {"success": False, "message": exc.message}

    fresh = extract_api_doc(spec, existing.id, existing.name, existing.spec_url)
    ctx.storage.update_api_doc(
        params.id,
        {
            "version": fresh.version,
            "description": fresh.description,
            "endpoints": fresh.endpoints,
            "schemas": fresh.schemas,
            "security_schemes": fresh.security_schemes,
        },
    )
    logger.info("Refreshed API doc %s from %s", params.id, existing.spec_url)
    return {
        "success": True,
        "message": f"API doc '{params.id}' refreshed successfully",
        "endpointCount": len(fresh.endpoints),
    }
