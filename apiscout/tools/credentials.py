"""Credential management tools."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field

from apiscout.core.auth.admission import admit_credential_update, admit_new_credential
from apiscout.core.errors import ApiScoutError
from apiscout.models.credential import AddCredentialParams, CamelModel, UpdateCredentialParams
from apiscout.tools.context import ToolContext, error_result

logger = logging.getLogger(__name__)


class CredentialIdParams(CamelModel):
    id: str = Field(description="ID of the credential")


class ListCredentialsParams(CamelModel):
    api_doc_id: str | None = Field(default=None, description="Filter by associated API doc")


async def add_credential(ctx: ToolContext, params: AddCredentialParams) -> dict[str, Any]:
    if ctx.storage.get_credential(params.id) is not None:
        return error_result(f"Credential '{params.id}' already exists")

    try:
        credential = await admit_new_credential(params, ctx.lifecycle)
        saved = ctx.storage.add_credential(credential)
    except ApiScoutError as exc:
        return error_result(exc.message)
    except ValueError as exc:
        return error_result(str(exc))

    summary = saved.summary()
    summary.pop("updatedAt", None)
    return {"success": True, "credential": summary}


async def update_credential(ctx: ToolContext, params: UpdateCredentialParams) -> dict[str, Any]:
    existing = ctx.storage.get_credential(params.id)
    if existing is None:
        return error_result(f"Credential '{params.id}' not found")

    try:
        merged = await admit_credential_update(existing, params, ctx.lifecycle)
    except ApiScoutError as exc:
        return error_result(exc.message)

    updated = ctx.storage.update_credential(
        params.id, {"name": merged.name, "config": merged.config}
    )
    summary = updated.summary()
    summary.pop("createdAt", None)
    return {"success": True, "credential": summary}


async def remove_credential(ctx: ToolContext, params: CredentialIdParams) -> dict[str, Any]:
    if not ctx.storage.remove_credential(params.id):
        return {"success": False, "message": f"Credential '{params.id}' not found"}
    ctx.lifecycle.forget(params.id)
    return {"success": True, "message": f"Credential '{params.id}' removed successfully"}


async def list_credentials(ctx: ToolContext, params: ListCredentialsParams) -> dict[str, Any]:
    credentials = ctx.storage.get_credentials()
    if params.api_doc_id:
        credentials = [c for c in credentials if c.api_doc_id == params.api_doc_id]
    return {"credentials": [c.summary() for c in credentials]}


async def get_credential(ctx: ToolContext, params: CredentialIdParams) -> dict[str, Any]:
    """Masked credential details, including whether a token is cached."""
    credential = ctx.storage.get_masked_credential(params.id)
    if credential is None:
        return error_result(f"Credential '{params.id}' not found")

    payload = credential.summary()
    payload["config"] = credential.config.to_json_dict()
    if credential.is_dynamic_bearer:
        cached = ctx.token_cache.get(credential.id)
        payload["tokenCached"] = cached is not None and cached.token is not None
    return {"success": True, "credential": payload}
