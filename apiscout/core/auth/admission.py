"""Admission control for new and updated credentials.

A credential is validated for the fields its type requires before it is
stored. Smart Bearer credentials additionally have to log in successfully
once, unless the caller explicitly opts out with ``skipValidityCheck``.
"""

from __future__ import annotations

import logging

from apiscout.core.auth.lifecycle import TokenLifecycleManager
from apiscout.core.errors import ApiScoutError, ConfigurationError, CredentialVerificationError
from apiscout.models.credential import (
    DEFAULT_API_KEY_HEADER,
    DEFAULT_INVALID_STATUS_CODES,
    DEFAULT_TOKEN_HEADER,
    DEFAULT_TOKEN_PATH,
    DEFAULT_TOKEN_PREFIX,
    MAX_CUSTOM_HEADERS,
    AddCredentialParams,
    Credential,
    CredentialConfig,
    CredentialType,
    UpdateCredentialParams,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

# Updating any of these re-runs the test login and evicts the cached token.
LOGIN_FIELDS = frozenset(
    {
        "login_url",
        "login_method",
        "login_body",
        "login_headers",
        "token_path",
        "refresh_url",
        "refresh_method",
        "refresh_token_path",
    }
)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def build_credential_config(params: AddCredentialParams) -> CredentialConfig:
    """Keep the fields *params.type* uses, filling defaults.

    Raises:
        ConfigurationError: A field the type requires is missing.
    """
    cred_type = params.type

    if cred_type == CredentialType.API_KEY:
        if not params.api_key:
            raise ConfigurationError("apiKey is required for apiKey type")
        return CredentialConfig(
            api_key=params.api_key,
            api_key_header=params.api_key_header or DEFAULT_API_KEY_HEADER,
        )

    if cred_type == CredentialType.BEARER:
        return _build_bearer_config(params)

    if cred_type == CredentialType.BASIC:
        if not params.username or not params.password:
            raise ConfigurationError("username and password are required for basic type")
        return CredentialConfig(username=params.username, password=params.password)

    if cred_type == CredentialType.OAUTH2:
        if not params.access_token and not params.client_id:
            raise ConfigurationError(
                "accessToken or clientId/clientSecret are required for oauth2 type"
            )
        return CredentialConfig(
            client_id=params.client_id,
            client_secret=params.client_secret,
            access_token=params.access_token,
            refresh_token=params.refresh_token,
            token_url=params.token_url,
        )

    if cred_type == CredentialType.CUSTOM:
        if not params.headers:
            raise ConfigurationError("headers are required for custom type")
        return CredentialConfig(headers=dict(params.headers))

    if cred_type == CredentialType.CUSTOM_HEADERS:
        _check_custom_headers_count(len(params.custom_headers or []))
        return CredentialConfig(custom_headers=list(params.custom_headers or []))

    raise ConfigurationError(f"Unsupported credential type: {cred_type}")


def _build_bearer_config(params: AddCredentialParams) -> CredentialConfig:
    if not params.token and not params.login_url:
        raise ConfigurationError("Either token or loginUrl is required for bearer type")

    config = CredentialConfig(token=params.token)

    if params.login_url:
        method = params.login_method or "POST"
        if params.login_body is None and method != "GET":
            raise ConfigurationError("loginBody is required when loginUrl is provided")
        config.login_url = params.login_url
        config.login_method = method
        config.login_body = params.login_body
        config.login_headers = params.login_headers
        config.token_path = params.token_path or DEFAULT_TOKEN_PATH
        config.token_header = params.token_header or DEFAULT_TOKEN_HEADER
        config.token_prefix = (
            DEFAULT_TOKEN_PREFIX if params.token_prefix is None else params.token_prefix
        )
        config.invalid_status_codes = params.invalid_status_codes or list(
            DEFAULT_INVALID_STATUS_CODES
        )
        if params.validity_check_url:
            config.validity_check_url = params.validity_check_url
            config.validity_check_method = params.validity_check_method or "GET"

    if params.refresh_url:
        config.refresh_url = params.refresh_url
        config.refresh_method = params.refresh_method or "POST"
        config.refresh_token_path = params.refresh_token_path
        if config.invalid_status_codes is None:
            config.invalid_status_codes = params.invalid_status_codes or list(
                DEFAULT_INVALID_STATUS_CODES
            )

    return config


def _check_custom_headers_count(count: int) -> None:
    if count == 0:
        raise ConfigurationError(
            f"customHeaders (1-{MAX_CUSTOM_HEADERS} headers) are required for customHeaders type"
        )
    if count > MAX_CUSTOM_HEADERS:
        raise ConfigurationError(
            f"customHeaders type supports maximum {MAX_CUSTOM_HEADERS} headers"
        )


def build_credential(params: AddCredentialParams) -> Credential:
    """Validate *params* into a new credential record (not yet stored)."""
    now = utc_now_iso()
    return Credential(
        id=params.id,
        name=params.name,
        type=params.type,
        api_doc_id=params.api_doc_id,
        config=build_credential_config(params),
        created_at=now,
        updated_at=now,
    )


def merge_credential_update(
    existing: Credential,
    params: UpdateCredentialParams,
) -> tuple[Credential, bool]:
    """Apply a partial update on top of *existing*.

    Returns the merged credential and whether login-related fields changed.

    Raises:
        ConfigurationError: The update leaves the credential invalid.
    """
    updates = params.config_updates()

    if "custom_headers" in updates:
        count = len(updates["custom_headers"] or [])
        if count > MAX_CUSTOM_HEADERS:
            raise ConfigurationError(f"customHeaders supports maximum {MAX_CUSTOM_HEADERS} headers")
        if existing.type == CredentialType.CUSTOM_HEADERS:
            _check_custom_headers_count(count)

    config = existing.config.model_copy(update=updates)
    merged = existing.model_copy(
        update={
            "name": params.name if params.name is not None else existing.name,
            "config": config,
        }
    )

    if merged.is_dynamic_bearer:
        if config.login_body is None and config.effective_login_method != "GET":
            raise ConfigurationError("loginBody is required when loginUrl is provided")

    return merged, bool(LOGIN_FIELDS & updates.keys())


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


async def verify_credential(credential: Credential, lifecycle: TokenLifecycleManager) -> None:
    """Test-login a Smart Bearer credential without caching the token.

    Raises:
        CredentialVerificationError: The login failed for any reason.
    """
    if not credential.is_dynamic_bearer:
        return
    try:
        await lifecycle.test_login(credential)
    except ApiScoutError as exc:
        logger.info("Verification of credential %s failed: %s", credential.id, exc.message)
        raise CredentialVerificationError(exc.message) from exc


async def admit_new_credential(
    params: AddCredentialParams,
    lifecycle: TokenLifecycleManager,
) -> Credential:
    """Validate and, for Smart Bearer credentials, verify a new credential."""
    credential = build_credential(params)
    if not params.skip_validity_check:
        await verify_credential(credential, lifecycle)
    return credential


async def admit_credential_update(
    existing: Credential,
    params: UpdateCredentialParams,
    lifecycle: TokenLifecycleManager,
) -> Credential:
    """Merge, verify when login settings changed, and evict stale tokens."""
    merged, login_changed = merge_credential_update(existing, params)
    if login_changed and not params.skip_validity_check:
        await verify_credential(merged, lifecycle)
    if login_changed:
        lifecycle.forget(existing.id)
    return merged
