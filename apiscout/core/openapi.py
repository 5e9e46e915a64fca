"""OpenAPI/Swagger document loading, endpoint search and schema resolution.

Supports OpenAPI 3.x (``servers``, ``components``) and Swagger 2.0
(``host``/``basePath``, ``definitions``) documents in JSON or YAML.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
import yaml

from apiscout.core.errors import ApiScoutError
from apiscout.models.api_doc import ApiDoc, ApiEndpoint
from apiscout.models.credential import utc_now_iso

logger = logging.getLogger(__name__)

OPERATION_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")
MAX_SCHEMA_DEPTH = 50
SCHEMA_REF_PREFIXES = ("#/components/schemas/", "#/definitions/")


class OpenAPIError(ApiScoutError):
    """An OpenAPI document could not be fetched or parsed."""


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def parse_openapi_content(content: str) -> dict[str, Any]:
    """Parse a spec as JSON, falling back to YAML."""
    try:
        spec = json.loads(content)
    except ValueError:
        try:
            spec = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise OpenAPIError("Failed to parse OpenAPI spec as JSON or YAML") from exc

    if not isinstance(spec, dict):
        raise OpenAPIError("Failed to parse OpenAPI spec as JSON or YAML")
    return spec


async def fetch_openapi(client: httpx.AsyncClient, url: str) -> tuple[dict[str, Any], str]:
    """Download and parse a spec. Returns ``(spec, raw_content)``."""
    try:
        response = await client.get(url)
    except httpx.RequestError as exc:
        raise OpenAPIError(f"Failed to fetch OpenAPI spec: {exc}") from exc
    if not response.is_success:
        raise OpenAPIError(
            f"Failed to fetch OpenAPI spec: {response.status_code} {response.reason_phrase}"
        )
    content = response.text
    return parse_openapi_content(content), content


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_base_url(spec: dict[str, Any]) -> str:
    """First server URL (OpenAPI 3) or ``scheme://host/basePath`` (Swagger 2)."""
    servers = spec.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"])

    host = spec.get("host")
    if host:
        schemes = spec.get("schemes") or ["https"]
        return f"{schemes[0]}://{host}{spec.get('basePath', '')}"

    return ""


def extract_endpoints(spec: dict[str, Any]) -> list[ApiEndpoint]:
    """One endpoint per (path, method); path-level parameters come first."""
    endpoints: list[ApiEndpoint] = []
    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        path_params = path_item.get("parameters") or []

        for method in OPERATION_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            endpoints.append(
                ApiEndpoint(
                    path=path,
                    method=method.upper(),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    parameters=[*path_params, *(operation.get("parameters") or [])],
                    request_body=operation.get("requestBody"),
                    responses=operation.get("responses"),
                    tags=operation.get("tags") or [],
                    security=operation.get("security"),
                )
            )
    return endpoints


def extract_api_doc(
    spec: dict[str, Any],
    doc_id: str,
    name: str | None = None,
    spec_url: str | None = None,
) -> ApiDoc:
    """Build an :class:`ApiDoc` from a parsed spec."""
    info = spec.get("info") or {}
    components = spec.get("components") or {}
    now = utc_now_iso()
    return ApiDoc(
        id=doc_id,
        name=name or info.get("title") or doc_id,
        base_url=extract_base_url(spec),
        spec_url=spec_url,
        version=info.get("version"),
        description=info.get("description"),
        endpoints=extract_endpoints(spec),
        schemas=components.get("schemas") or spec.get("definitions") or {},
        security_schemes=components.get("securitySchemes") or spec.get("securityDefinitions") or {},
        added_at=now,
        updated_at=now,
    )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@dataclass
class SearchResult:
    api_doc_id: str
    api_doc_name: str
    endpoint: ApiEndpoint
    score: int
    matched_fields: list[str] = field(default_factory=list)


def _score_endpoint(
    endpoint: ApiEndpoint, query: str, terms: list[str]
) -> tuple[int, list[str]]:
    score = 0
    matched: list[str] = []
    path = endpoint.path.lower()
    summary = (endpoint.summary or "").lower()

    if query in path:
        score += 10
        matched.append("path")
    if query in summary:
        score += 8
        matched.append("summary")
    if query in (endpoint.description or "").lower():
        score += 5
        matched.append("description")
    if any(query in tag.lower() for tag in endpoint.tags):
        score += 6
        matched.append("tags")
    if any(
        query in str(param.get("name", "")).lower()
        or query in str(param.get("description") or "").lower()
        for param in endpoint.parameters
    ):
        score += 4
        matched.append("parameters")

    if len(terms) > 1:
        for term in terms:
            if term in path:
                score += 2
            if term in summary:
                score += 1

    return score, matched


def search_endpoints(
    docs: list[ApiDoc],
    query: str,
    *,
    method: str | None = None,
    tag: str | None = None,
    api_doc_id: str | None = None,
) -> list[SearchResult]:
    """Rank endpoints by keyword relevance, best first.

    The whole query is matched as a substring of path (10), summary (8),
    tags (6), description (5) and parameter names/descriptions (4). Multi-word
    queries add +2 per term found in the path and +1 per term in the summary.
    """
    query_lower = query.lower()
    terms = query_lower.split()
    results: list[SearchResult] = []

    for doc in docs:
        if api_doc_id and doc.id != api_doc_id:
            continue
        for endpoint in doc.endpoints:
            if method and endpoint.method.lower() != method.lower():
                continue
            if tag and tag not in endpoint.tags:
                continue
            score, matched = _score_endpoint(endpoint, query_lower, terms)
            if score > 0:
                results.append(
                    SearchResult(
                        api_doc_id=doc.id,
                        api_doc_name=doc.name,
                        endpoint=endpoint,
                        score=score,
                        matched_fields=matched,
                    )
                )

    results.sort(key=lambda result: result.score, reverse=True)
    return results


def get_endpoint_info(doc: ApiDoc, path: str, method: str) -> ApiEndpoint | None:
    """Exact path match, case-insensitive method."""
    for endpoint in doc.endpoints:
        if endpoint.path == path and endpoint.method.lower() == method.lower():
            return endpoint
    return None


# ---------------------------------------------------------------------------
# Schema resolution
# ---------------------------------------------------------------------------


def resolve_schema(
    doc: ApiDoc,
    schema: dict[str, Any],
    visited_refs: frozenset[str] = frozenset(),
    depth: int = 0,
) -> dict[str, Any]:
    """Inline local ``$ref`` schemas.

    A reference already on the current path is returned marked
    ``_circular``; nesting deeper than ``MAX_SCHEMA_DEPTH`` is cut off and
    marked ``_maxDepthReached``.
    """
    if depth >= MAX_SCHEMA_DEPTH:
        return {**schema, "_maxDepthReached": True}

    ref = schema.get("$ref")
    if isinstance(ref, str):
        if ref in visited_refs:
            return {**schema, "_circular": True}
        name = ref
        for prefix in SCHEMA_REF_PREFIXES:
            name = name.replace(prefix, "")
        resolved = doc.schemas.get(name)
        if isinstance(resolved, dict):
            return resolve_schema(doc, resolved, visited_refs | {ref}, depth + 1)

    properties = schema.get("properties")
    if isinstance(properties, dict):
        return {
            **schema,
            "properties": {
                key: resolve_schema(doc, prop, visited_refs, depth + 1)
                if isinstance(prop, dict)
                else prop
                for key, prop in properties.items()
            },
        }

    items = schema.get("items")
    if isinstance(items, dict):
        return {**schema, "items": resolve_schema(doc, items, visited_refs, depth + 1)}

    return schema


# ---------------------------------------------------------------------------
# Examples
# ---------------------------------------------------------------------------


def generate_curl_example(base_url: str, endpoint: ApiEndpoint) -> str:
    """Render a curl command with ``{placeholders}`` for parameters."""
    url = f"{base_url}{endpoint.path}"

    query_params = [p for p in endpoint.parameters if p.get("in") == "query"]
    if query_params:
        url += "?" + "&".join(f"{p['name']}={{{p['name']}}}" for p in query_params)

    parts = [f'curl -X {endpoint.method} "{url}"']
    for header in (p for p in endpoint.parameters if p.get("in") == "header"):
        parts.append(f'-H "{header["name"]}: {{{header["name"]}}}"')

    if endpoint.method in {"POST", "PUT", "PATCH"} and endpoint.request_body:
        parts.append('-H "Content-Type: application/json"')
        parts.append("-d '{...}'")

    return " \\\n  ".join(parts)
