"""API call tools: documented endpoints and whitelisted raw URLs."""

from __future__ import annotations

import logging
import re
from typing import Any, Literal
from urllib.parse import quote, urlencode

from pydantic import Field

from apiscout.core.errors import ApiScoutError, WhitelistViolation
from apiscout.core.openapi import get_endpoint_info
from apiscout.core.whitelist import validate_url_against_whitelist
from apiscout.models.credential import CamelModel, Credential
from apiscout.tools.context import ToolContext, error_from_exception, error_result

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

DEFAULT_REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

_PATH_PARAM_RE = re.compile(r"\{(\w+)\}")


class CallApiParams(CamelModel):
    api_doc_id: str = Field(description="ID of the API doc to call")
    path: str = Field(description='Endpoint path (e.g., "/users/{id}")')
    method: HttpMethod = Field(description="HTTP method")
    path_params: dict[str, str] | None = Field(
        default=None, description='Path parameters (e.g., {"id": "123"})'
    )
    query_params: dict[str, str] | None = Field(default=None, description="Query parameters")
    headers: dict[str, str] | None = Field(default=None, description="Additional headers")
    body: Any = Field(default=None, description="Request body (for POST/PUT/PATCH)")
    credential_id: str | None = Field(
        default=None, description="ID of credential to use for authentication"
    )


class CallRawApiParams(CamelModel):
    url: str = Field(description="Full URL to call (must be whitelisted)")
    method: HttpMethod = Field(description="HTTP method")
    headers: dict[str, str] | None = Field(default=None, description="Request headers")
    body: Any = Field(default=None, description="Request body")
    credential_id: str | None = Field(default=None, description="ID of credential to use")


def build_request_url(
    base_url: str,
    path: str,
    path_params: dict[str, str] | None = None,
    query_params: dict[str, str] | None = None,
) -> str:
    """Join base URL and path, percent-encoding path params and appending a query."""
    resolved = path
    for key, value in (path_params or {}).items():
        resolved = resolved.replace(f"{{{key}}}", quote(value, safe=""))
    url = base_url.rstrip("/") + resolved
    if query_params:
        url += "?" + urlencode(query_params)
    return url


def required_path_params(path: str) -> list[str]:
    return _PATH_PARAM_RE.findall(path)


def _lookup_credential(
    ctx: ToolContext, credential_id: str | None
) -> tuple[Credential | None, dict[str, Any] | None]:
    if not credential_id:
        return None, None
    credential = ctx.storage.get_credential(credential_id)
    if credential is None:
        return None, error_result(
            f"Credential '{credential_id}' not found",
            "Use list_credentials to see available credentials",
        )
    return credential, None


async def call_api(ctx: ToolContext, params: CallApiParams) -> dict[str, Any]:
    """Call a documented endpoint of a registered API doc."""
    doc = ctx.storage.get_api_doc(params.api_doc_id)
    if doc is None:
        return error_result(
            f"API doc '{params.api_doc_id}' not found",
            "Use list_api_docs to see available API docs",
        )

    if get_endpoint_info(doc, params.path, params.method) is None:
        return error_result(
            f"Endpoint {params.method} {params.path} not found in '{params.api_doc_id}'",
            "Use search_endpoints or list_endpoints to find available endpoints",
        )

    credential, failure = _lookup_credential(ctx, params.credential_id)
    if failure is not None:
        return failure

    for name in required_path_params(params.path):
        if not (params.path_params or {}).get(name):
            return error_result(
                f"Missing required path parameter: {name}",
                f'Provide pathParams: {{ "{name}": "value" }}',
            )

    url = build_request_url(doc.base_url, params.path, params.path_params, params.query_params)
    headers = {**DEFAULT_REQUEST_HEADERS, **(params.headers or {})}

    try:
        response = await ctx.executor.execute(url, params.method, headers, params.body, credential)
    except ApiScoutError as exc:
        logger.info("call_api %s %s failed: %s", params.method, url, exc.message)
        return error_from_exception(exc)

    return {
        "success": True,
        "response": response.to_tool_payload(),
        "request": {
            "url": url,
            "method": params.method,
            "headers": params.headers or {},
        },
    }


async def call_raw_api(ctx: ToolContext, params: CallRawApiParams) -> dict[str, Any]:
    """Call an arbitrary URL that falls under a registered base URL."""
    whitelist = ctx.storage.get_whitelisted_base_urls()
    if not validate_url_against_whitelist(params.url, whitelist).valid:
        logger.warning("Rejected non-whitelisted URL %s", params.url)
        return error_from_exception(WhitelistViolation(params.url, whitelist))

    credential, failure = _lookup_credential(ctx, params.credential_id)
    if failure is not None:
        return failure

    headers = {**DEFAULT_REQUEST_HEADERS, **(params.headers or {})}

    try:
        response = await ctx.executor.execute(
            params.url, params.method, headers, params.body, credential
        )
    except ApiScoutError as exc:
        logger.info("call_raw_api %s %s failed: %s", params.method, params.url, exc.message)
        return error_from_exception(exc)

    return {"success": True, "response": response.to_tool_payload()}
