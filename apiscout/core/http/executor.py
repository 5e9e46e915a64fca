"""Send API calls with credentials attached and one bounded auth retry.

The pipeline is two explicit steps:

1. Attempt: copy the caller's headers, apply the credential, send.
2. Retry gate: for a dynamic bearer credential whose first response status is
   in ``invalid_status_codes``, evict the cached token, rebuild headers from
   the caller's originals, re-apply (forcing refresh or login) and send once
   more. The second response is returned whatever its status.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from apiscout.core.auth.applicator import CredentialApplicator
from apiscout.core.auth.lifecycle import TokenLifecycleManager
from apiscout.core.auth.token_cache import now_ms
from apiscout.core.errors import NetworkError
from apiscout.models.call import ApiCallResponse, ResponseTiming
from apiscout.models.credential import Credential

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class RequestExecutor:
    """Executes outbound calls on a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        applicator: CredentialApplicator,
        lifecycle: TokenLifecycleManager,
    ) -> None:
        self.http_client = http_client
        self.applicator = applicator
        self.lifecycle = lifecycle

    async def execute(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: Any = None,
        credential: Credential | None = None,
    ) -> ApiCallResponse:
        """Send the request, retrying once if a dynamic bearer token was rejected."""
        request_headers = dict(headers)
        if credential is not None:
            await self.applicator.apply(request_headers, credential)

        response = await self.send(url, method, request_headers, body)

        if (
            credential is None
            or not credential.is_dynamic_bearer
            or not self.lifecycle.is_invalid_status(credential, response.status)
        ):
            return response

        logger.info(
            "Credential %s rejected with %s; re-authenticating and retrying once",
            credential.id,
            response.status,
        )
        self.lifecycle.invalidate(credential.id)

        retry_headers = dict(headers)
        await self.applicator.apply(retry_headers, credential)
        return await self.send(url, method, retry_headers, body)

    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> ApiCallResponse:
        """Send a single request and parse the response.

        Raises:
            NetworkError: No HTTP response was received.
        """
        method = method.upper()
        content: str | bytes | None = None
        if body is not None and method not in BODYLESS_METHODS:
            content = body if isinstance(body, str | bytes) else json.dumps(body)

        start = now_ms()
        try:
            response = await self.http_client.request(
                method,
                url,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Network error: {str(exc) or 'request timed out'}", timeout=True) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error: {exc}") from exc
        end = now_ms()

        logger.debug("%s %s -> %s (%d ms)", method, url, response.status_code, end - start)

        return ApiCallResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            body=parse_response_body(response),
            timing=ResponseTiming(start=start, end=end, duration=end - start),
        )


def parse_response_body(response: httpx.Response) -> Any:
    """Decode a response body by content type.

    JSON for ``application/json``, text for ``text/*``, and a size summary
    for anything else. A body that fails to parse falls back to text, then
    to None.
    """
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            return response.json()
        if "text/" in content_type:
            return response.text
        return {
            "_binary": True,
            "size": len(response.content),
            "contentType": content_type,
        }
    except ValueError:
        try:
            return response.text
        except ValueError:
            return None
