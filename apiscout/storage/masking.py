"""Masking of credential secrets for display."""

from __future__ import annotations

from typing import Any

from apiscout.models.credential import CredentialConfig, CustomHeader

SENSITIVE_CONFIG_FIELDS = (
    "api_key",
    "token",
    "password",
    "client_secret",
    "access_token",
    "refresh_token",
)
SENSITIVE_HEADER_MARKERS = ("auth", "secret", "key", "token", "bearer")
SENSITIVE_BODY_MARKERS = ("password", "secret", "token", "key", "credential")


def mask_string(value: str) -> str:
    """Keep the first and last four characters of long values."""
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}****{value[-4:]}"


def is_sensitive_header(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_HEADER_MARKERS)


def _mask_headers(headers: dict[str, str]) -> dict[str, str]:
    return {
        name: mask_string(value) if is_sensitive_header(name) else value
        for name, value in headers.items()
    }


def _mask_login_body(body: dict[str, Any]) -> dict[str, Any]:
    masked: dict[str, Any] = {}
    for key, value in body.items():
        lowered = key.lower()
        if isinstance(value, str) and any(m in lowered for m in SENSITIVE_BODY_MARKERS):
            masked[key] = mask_string(value)
        else:
            masked[key] = value
    return masked


def mask_credential_config(config: CredentialConfig) -> CredentialConfig:
    """Return a copy of *config* with secrets masked."""
    updates: dict[str, Any] = {}
    for field in SENSITIVE_CONFIG_FIELDS:
        value = getattr(config, field)
        if value:
            updates[field] = mask_string(value)

    if config.headers:
        updates["headers"] = _mask_headers(config.headers)
    if config.login_headers:
        updates["login_headers"] = _mask_headers(config.login_headers)
    if config.custom_headers:
        updates["custom_headers"] = [
            CustomHeader(
                name=header.name,
                value=mask_string(header.value) if is_sensitive_header(header.name) else header.value,
            )
            for header in config.custom_headers
        ]
    if config.login_body:
        updates["login_body"] = _mask_login_body(config.login_body)

    return config.model_copy(update=updates)
