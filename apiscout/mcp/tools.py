"""Tool registry: name, description, parameter model and handler per tool."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from apiscout.models.credential import AddCredentialParams, UpdateCredentialParams
from apiscout.tools import api_call, api_docs, credentials, search
from apiscout.tools.context import ToolContext

ToolHandler = Callable[[ToolContext, Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    params_model: type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        schema = self.params_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return schema


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    # API docs
    ToolDefinition(
        "add_api_doc",
        "Register an OpenAPI/Swagger spec from a URL or inline content. "
        "The API's base URL is whitelisted for call_raw_api.",
        api_docs.AddApiDocParams,
        api_docs.add_api_doc,
    ),
    ToolDefinition(
        "remove_api_doc",
        "Remove a registered API doc. Its base URL is no longer whitelisted.",
        api_docs.ApiDocIdParams,
        api_docs.remove_api_doc,
    ),
    ToolDefinition(
        "list_api_docs",
        "List registered API docs and the whitelisted base URLs.",
        api_docs.ListApiDocsParams,
        api_docs.list_api_docs,
    ),
    ToolDefinition(
        "get_api_doc",
        "Show details of an API doc: tags, security schemes, optionally endpoints and schemas.",
        api_docs.GetApiDocParams,
        api_docs.get_api_doc,
    ),
    ToolDefinition(
        "refresh_api_doc",
        "Re-fetch an API doc from its spec URL.",
        api_docs.ApiDocIdParams,
        api_docs.refresh_api_doc,
    ),
    # Search
    ToolDefinition(
        "search_endpoints",
        "Search endpoints by keyword across path, summary, description, tags and parameters.",
        search.SearchEndpointsParams,
        search.search_endpoints,
    ),
    ToolDefinition(
        "get_endpoint_info",
        "Show parameters, request body, responses and a curl example for one endpoint.",
        search.GetEndpointInfoParams,
        search.get_endpoint_info,
    ),
    ToolDefinition(
        "list_endpoints",
        "List the endpoints of an API doc, filtered by tag or method.",
        search.ListEndpointsParams,
        search.list_endpoints,
    ),
    ToolDefinition(
        "list_tags",
        "List the tags of an API doc with their endpoint counts.",
        search.ListTagsParams,
        search.list_tags,
    ),
    # Credentials
    ToolDefinition(
        "add_credential",
        "Store a credential (apiKey, bearer, basic, oauth2, custom, customHeaders). "
        "Bearer credentials with a loginUrl log in automatically and are verified on save.",
        AddCredentialParams,
        credentials.add_credential,
    ),
    ToolDefinition(
        "update_credential",
        "Update fields of a stored credential.",
        UpdateCredentialParams,
        credentials.update_credential,
    ),
    ToolDefinition(
        "remove_credential",
        "Delete a stored credential.",
        credentials.CredentialIdParams,
        credentials.remove_credential,
    ),
    ToolDefinition(
        "list_credentials",
        "List stored credentials without secrets.",
        credentials.ListCredentialsParams,
        credentials.list_credentials,
    ),
    ToolDefinition(
        "get_credential",
        "Show a credential with secrets masked.",
        credentials.CredentialIdParams,
        credentials.get_credential,
    ),
    # Calls
    ToolDefinition(
        "call_api",
        "Call a documented endpoint of a registered API, optionally with a credential.",
        api_call.CallApiParams,
        api_call.call_api,
    ),
    ToolDefinition(
        "call_raw_api",
        "Call any URL under a whitelisted base URL, optionally with a credential.",
        api_call.CallRawApiParams,
        api_call.call_raw_api,
    ),
)

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}
