"""Smart Bearer token lifecycle: cache, validity probe, refresh, login.

A dynamic bearer credential carries login instructions instead of a fixed
token. The manager turns those instructions into a usable token on demand:

1. A cached token is reused. When the credential names a validity check URL
   the token is probed first; otherwise presence alone counts as valid.
2. An invalid or missing token is evicted. If a refresh endpoint and a cached
   refresh token exist, a refresh is attempted.
3. Anything else falls back to a full login. A failed login raises
   :class:`AuthFailure`; it is never retried here.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from apiscout.core.auth.paths import get_string_by_path
from apiscout.core.auth.token_cache import TokenCache, TokenCacheEntry, now_ms
from apiscout.core.errors import AuthFailure, NetworkError
from apiscout.models.credential import Credential

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

RESPONSE_PREVIEW_CHARS = 200


class TokenLifecycleManager:
    """Obtains and maintains access tokens for dynamic bearer credentials."""

    def __init__(self, http_client: httpx.AsyncClient, token_cache: TokenCache) -> None:
        self.http_client = http_client
        self.token_cache = token_cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def obtain_token(self, credential: Credential) -> str:
        """Return a token for *credential*, logging in only when necessary."""
        cached = self.token_cache.get(credential.id)
        if cached is not None:
            if cached.token and await self.is_token_valid(credential, cached.token):
                return cached.token
            logger.debug("Cached token for credential %s is not usable", credential.id)

            # refresh() reads the refresh token from the stale entry and
            # overwrites it on success.
            token = await self.refresh(credential)
            if token is not None:
                return token
            self.token_cache.delete(credential.id)

        return await self.login(credential)

    async def is_token_valid(self, credential: Credential, token: str) -> bool:
        """Probe the validity check URL with *token*.

        Without a check URL the token is assumed valid and nothing is sent.
        """
        config = credential.config
        if not config.validity_check_url:
            return True

        headers = {config.effective_token_header: f"{config.effective_token_prefix}{token}"}
        try:
            response = await self.http_client.request(
                config.effective_validity_check_method,
                config.validity_check_url,
                headers=headers,
            )
        except httpx.RequestError as exc:
            logger.debug("Validity probe for credential %s failed: %s", credential.id, exc)
            return False

        return response.status_code not in config.effective_invalid_status_codes

    async def login(self, credential: Credential) -> str:
        """Log in and cache the resulting token."""
        token, refresh_token = await self._perform_login(credential)
        self.token_cache.set(
            credential.id,
            TokenCacheEntry(
                credential_id=credential.id,
                token=token,
                refresh_token=refresh_token,
                obtained_at=now_ms(),
            ),
        )
        logger.info("Obtained token for credential %s via login", credential.id)
        return token

    async def test_login(self, credential: Credential) -> str:
        """Log in without touching the cache. Failures propagate unchanged."""
        token, _ = await self._perform_login(credential)
        return token

    async def refresh(self, credential: Credential) -> str | None:
        """Exchange the cached refresh token for a new access token.

        Returns None on any failure; the caller falls back to login.
        """
        config = credential.config
        cached = self.token_cache.get(credential.id)
        if not config.refresh_url or cached is None or not cached.refresh_token:
            return None

        refresh_path = config.effective_refresh_token_path
        field_name = refresh_path.split(".")[-1]
        method = config.effective_refresh_method

        request_kwargs: dict[str, Any] = {"headers": dict(JSON_HEADERS)}
        if method == "GET":
            request_kwargs["params"] = {field_name: cached.refresh_token}
        else:
            request_kwargs["content"] = json.dumps({field_name: cached.refresh_token})

        try:
            response = await self.http_client.request(method, config.refresh_url, **request_kwargs)
        except httpx.RequestError as exc:
            logger.warning("Token refresh for credential %s failed: %s", credential.id, exc)
            return None

        if not response.is_success:
            logger.warning(
                "Token refresh for credential %s returned %s",
                credential.id,
                response.status_code,
            )
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Token refresh for credential %s returned non-JSON body", credential.id)
            return None

        token = get_string_by_path(payload, config.effective_token_path)
        if token is None:
            logger.warning(
                "Token refresh for credential %s returned no token at '%s'",
                credential.id,
                config.effective_token_path,
            )
            return None

        new_refresh_token = get_string_by_path(payload, refresh_path) or cached.refresh_token
        self.token_cache.set(
            credential.id,
            TokenCacheEntry(
                credential_id=credential.id,
                token=token,
                refresh_token=new_refresh_token,
                obtained_at=now_ms(),
            ),
        )
        logger.info("Refreshed token for credential %s", credential.id)
        return token

    def invalidate(self, credential_id: str) -> None:
        """Evict the access token cached for *credential_id*.

        A refresh token, when one was issued, survives eviction so the next
        :meth:`obtain_token` can try a refresh before logging in again.
        """
        cached = self.token_cache.get(credential_id)
        if cached is None:
            return
        if cached.refresh_token:
            cached.token = None
        else:
            self.token_cache.delete(credential_id)
        logger.debug("Evicted cached token for credential %s", credential_id)

    def forget(self, credential_id: str) -> None:
        """Drop everything cached for *credential_id*, refresh token included."""
        self.token_cache.delete(credential_id)

    @staticmethod
    def is_invalid_status(credential: Credential, status_code: int) -> bool:
        return status_code in credential.config.effective_invalid_status_codes

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _perform_login(self, credential: Credential) -> tuple[str, str | None]:
        config = credential.config
        if not config.login_url:
            raise AuthFailure(f"Credential '{credential.id}' has no loginUrl configured")

        method = config.effective_login_method
        headers = {**JSON_HEADERS, **(config.login_headers or {})}
        content: str | None = None
        if config.login_body is not None and method != "GET":
            content = json.dumps(config.login_body)

        try:
            response = await self.http_client.request(
                method,
                config.login_url,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Network error during login: {exc}", timeout=True) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error during login: {exc}") from exc

        if not response.is_success:
            raise AuthFailure(
                f"Login failed: {response.status_code} {response.reason_phrase}. {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthFailure(
                "Login response is not valid JSON: " + _preview(response.text),
                status_code=response.status_code,
            ) from exc

        token_path = config.effective_token_path
        token = get_string_by_path(payload, token_path)
        if token is None:
            raise AuthFailure(
                f"Failed to extract token from login response using path '{token_path}'. "
                f"Response: {_preview(json.dumps(payload))}",
                status_code=response.status_code,
            )

        refresh_token = None
        if config.refresh_url:
            refresh_token = get_string_by_path(payload, config.effective_refresh_token_path)

        return token, refresh_token


def _preview(text: str) -> str:
    return text[:RESPONSE_PREVIEW_CHARS]
