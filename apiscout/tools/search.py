"""Endpoint search and browsing tools."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from apiscout.core.openapi import (
    generate_curl_example,
    get_endpoint_info as find_endpoint,
    resolve_schema,
    search_endpoints as rank_endpoints,
)
from apiscout.core.smart_cache import check_and_refresh_api_doc
from apiscout.models.api_doc import ApiDoc
from apiscout.models.credential import CamelModel
from apiscout.tools.api_call import HttpMethod
from apiscout.tools.context import ToolContext, error_result


class SearchEndpointsParams(CamelModel):
    query: str = Field(description="Search query (searches in path, summary, description, tags)")
    api_doc_id: str | None = Field(default=None, description="Limit search to specific API doc")
    method: HttpMethod | None = Field(default=None, description="Filter by HTTP method")
    tag: str | None = Field(default=None, description="Filter by tag")
    limit: int = Field(default=20, description="Maximum results to return")


class GetEndpointInfoParams(CamelModel):
    api_doc_id: str = Field(description="ID of the API doc")
    path: str = Field(description='Endpoint path (e.g., "/users/{id}")')
    method: str = Field(description="HTTP method (GET, POST, etc.)")
    resolve_schemas: bool = Field(default=True, description="Resolve $ref schema references")


class ListEndpointsParams(CamelModel):
    api_doc_id: str = Field(description="ID of the API doc")
    tag: str | None = Field(default=None, description="Filter by tag")
    method: HttpMethod | None = Field(default=None, description="Filter by HTTP method")
    limit: int = Field(default=50, description="Maximum results to return")
    offset: int = Field(default=0, description="Offset for pagination")


class ListTagsParams(CamelModel):
    api_doc_id: str = Field(description="ID of the API doc")


async def _fresh_doc(ctx: ToolContext, doc_id: str) -> ApiDoc | None:
    await check_and_refresh_api_doc(
        ctx.storage,
        ctx.http_client,
        doc_id,
        probe_timeout=ctx.settings.hash_probe_timeout,
    )
    return ctx.storage.get_api_doc(doc_id)


def _primary_content(content: dict[str, Any] | None) -> dict[str, Any] | None:
    if not content:
        return None
    return content.get("application/json") or next(iter(content.values()))


async def search_endpoints(ctx: ToolContext, params: SearchEndpointsParams) -> dict[str, Any]:
    if params.api_doc_id:
        await _fresh_doc(ctx, params.api_doc_id)

    results = rank_endpoints(
        ctx.storage.get_api_docs(),
        params.query,
        method=params.method,
        tag=params.tag,
        api_doc_id=params.api_doc_id,
    )
    return {
        "results": [
            {
                "apiDocId": result.api_doc_id,
                "apiDocName": result.api_doc_name,
                "method": result.endpoint.method,
                "path": result.endpoint.path,
                "summary": result.endpoint.summary,
                "tags": result.endpoint.tags,
                "score": result.score,
                "matchedFields": result.matched_fields,
            }
            for result in results[: params.limit]
        ],
        "totalFound": len(results),
    }


async def get_endpoint_info(ctx: ToolContext, params: GetEndpointInfoParams) -> dict[str, Any]:
    doc = await _fresh_doc(ctx, params.api_doc_id)
    if doc is None:
        return error_result(f"API doc '{params.api_doc_id}' not found")

    endpoint = find_endpoint(doc, params.path, params.method)
    if endpoint is None:
        return error_result(
            f"Endpoint {params.method.upper()} {params.path} not found in '{params.api_doc_id}'"
        )

    def resolve(schema: dict[str, Any] | None) -> dict[str, Any] | None:
        if params.resolve_schemas and schema:
            return resolve_schema(doc, schema)
        return schema

    request_body = None
    if endpoint.request_body and endpoint.request_body.get("content"):
        content = endpoint.request_body["content"]
        primary = _primary_content(content) or {}
        request_body = {
            "description": endpoint.request_body.get("description"),
            "required": endpoint.request_body.get("required"),
            "contentTypes": list(content),
            "schema": resolve(primary.get("schema")),
            "example": primary.get("example"),
        }

    responses: dict[str, Any] = {}
    for status_code, response in (endpoint.responses or {}).items():
        content = response.get("content") if isinstance(response, dict) else None
        primary = _primary_content(content) or {}
        responses[status_code] = {
            "description": response.get("description") if isinstance(response, dict) else None,
            "contentTypes": list(content) if content else None,
            "schema": resolve(primary.get("schema")),
        }

    parameters = [
        {**param, "schema": resolve(param.get("schema"))} for param in endpoint.parameters
    ]

    return {
        "success": True,
        "endpoint": {
            "method": endpoint.method,
            "path": endpoint.path,
            "summary": endpoint.summary,
            "description": endpoint.description,
            "tags": endpoint.tags,
            "parameters": parameters,
            "requestBody": request_body,
            "responses": responses,
            "security": endpoint.security,
            "curlExample": generate_curl_example(doc.base_url, endpoint),
        },
    }


async def list_endpoints(ctx: ToolContext, params: ListEndpointsParams) -> dict[str, Any]:
    doc = await _fresh_doc(ctx, params.api_doc_id)
    if doc is None:
        return error_result(f"API doc '{params.api_doc_id}' not found")

    endpoints = doc.endpoints
    if params.tag:
        endpoints = [ep for ep in endpoints if params.tag in ep.tags]
    if params.method:
        endpoints = [ep for ep in endpoints if ep.method.upper() == params.method.upper()]

    page = endpoints[params.offset : params.offset + params.limit]
    return {
        "success": True,
        "endpoints": [
            {"method": ep.method, "path": ep.path, "summary": ep.summary, "tags": ep.tags}
            for ep in page
        ],
        "total": len(endpoints),
    }


async def list_tags(ctx: ToolContext, params: ListTagsParams) -> dict[str, Any]:
    doc = await _fresh_doc(ctx, params.api_doc_id)
    if doc is None:
        return error_result(f"API doc '{params.api_doc_id}' not found")

    counts: dict[str, int] = {}
    for endpoint in doc.endpoints:
        for tag in endpoint.tags:
            counts[tag] = counts.get(tag, 0) + 1

    tags = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return {
        "success": True,
        "tags": [{"name": name, "endpointCount": count} for name, count in tags],
    }
