"""Hash-polling refresh of registered API docs.

A doc registered with an ``apiHashUrl`` is checked before it is searched or
browsed: the hash endpoint is fetched with a short timeout, and when its
value differs from the stored ``lastHash`` the OpenAPI document is re-fetched from
``specUrl``. Any failure leaves the cached doc untouched.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from apiscout.core.errors import ApiScoutError
from apiscout.core.openapi import extract_api_doc, fetch_openapi
from apiscout.storage.filesystem import JsonStorage

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 2.0


async def check_and_refresh_api_doc(
    storage: JsonStorage,
    client: httpx.AsyncClient,
    doc_id: str,
    *,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """Refresh *doc_id* if its remote hash changed. Returns True if refreshed."""
    doc = storage.get_api_doc(doc_id)
    if doc is None or not doc.api_hash_url or not doc.spec_url:
        return False

    try:
        response = await client.get(doc.api_hash_url, timeout=probe_timeout)
    except httpx.HTTPError as exc:
        logger.debug("Hash check for %s failed, using cached doc: %s", doc_id, exc)
        return False
    if not response.is_success:
        logger.debug("Hash check for %s returned %s, using cached doc", doc_id, response.status_code)
        return False

    remote_hash = response.text.strip()
    if remote_hash == doc.last_hash:
        return False

    logger.info(
        "Hash mismatch for %s (local %s, remote %s); refreshing",
        doc_id,
        doc.last_hash,
        remote_hash,
    )
    try:
        spec, _ = await fetch_openapi(client, doc.spec_url)
        fresh = extract_api_doc(spec, doc.id, doc.name, doc.spec_url)
        storage.update_api_doc(
            doc_id,
            {
                "version": fresh.version,
                "description": fresh.description,
                "endpoints": fresh.endpoints,
                "schemas": fresh.schemas,
                "security_schemes": fresh.security_schemes,
                "last_hash": remote_hash,
            },
        )
    except (ApiScoutError, OSError, KeyError, ValidationError) as exc:
        logger.warning("Could not refresh API doc %s: %s", doc_id, exc)
        return False

    logger.info("Refreshed API doc %s", doc_id)
    return True
