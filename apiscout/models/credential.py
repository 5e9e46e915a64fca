"""Credential models shared by the store, the tool layer and the auth core."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_TOKEN_PATH = "token"
DEFAULT_TOKEN_HEADER = "Authorization"
DEFAULT_TOKEN_PREFIX = "Bearer "
DEFAULT_INVALID_STATUS_CODES = (401, 403)
DEFAULT_REFRESH_TOKEN_PATH = "refreshToken"
MAX_CUSTOM_HEADERS = 5

AuthMethod = Literal["GET", "POST"]


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class CredentialType(StrEnum):
    """Supported credential types."""

    API_KEY = "apiKey"
    BEARER = "bearer"
    BASIC = "basic"
    OAUTH2 = "oauth2"
    CUSTOM = "custom"
    CUSTOM_HEADERS = "customHeaders"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CustomHeader(CamelModel):
    """A single static header for the customHeaders credential type."""

    name: str
    value: str


class CredentialConfig(CamelModel):
    """Type-specific credential settings.

    Which fields matter depends on the owning credential's type. The Smart
    Bearer fields (``login_url`` and friends) only apply to bearer
    credentials.
    """

    # apiKey
    api_key: str | None = Field(default=None, description="API key value (apiKey type)")
    api_key_header: str | None = Field(default=None, description="Header name for the API key (default: X-API-Key)")

    # bearer (static)
    token: str | None = Field(default=None, description="Static bearer token (bearer type)")

    # basic
    username: str | None = Field(default=None, description="Username (basic type)")
    password: str | None = Field(default=None, description="Password (basic type)")

    # oauth2
    client_id: str | None = Field(default=None, description="OAuth2 client ID")
    client_secret: str | None = Field(default=None, description="OAuth2 client secret")
    access_token: str | None = Field(default=None, description="OAuth2 access token")
    refresh_token: str | None = Field(default=None, description="OAuth2 refresh token")
    token_url: str | None = Field(default=None, description="OAuth2 token endpoint URL")

    # custom
    headers: dict[str, str] | None = Field(default=None, description="Headers merged into every request (custom type)")

    # customHeaders
    custom_headers: list[CustomHeader] | None = Field(default=None, description="1-5 {name, value} headers (customHeaders type)")

    # Smart Bearer
    login_url: str | None = Field(default=None, description="Login endpoint URL (Smart Bearer)")
    login_method: AuthMethod | None = Field(default=None, description="HTTP method for login (default: POST)")
    login_body: dict[str, Any] | None = Field(default=None, description="Login request body, e.g. {\"username\": \"u\", \"password\": \"p\"}")
    login_headers: dict[str, str] | None = Field(default=None, description="Additional headers for the login request")
    token_path: str | None = Field(default=None, description="Dot path of the token in the login response (default: token)")
    token_header: str | None = Field(default=None, description="Header that carries the token (default: Authorization)")
    token_prefix: str | None = Field(default=None, description="Prefix for the token value (default: \"Bearer \")")
    invalid_status_codes: list[int] | None = Field(default=None, description="Statuses meaning the token is invalid (default: [401, 403])")
    validity_check_url: str | None = Field(default=None, description="URL probed to check a cached token before use")
    validity_check_method: AuthMethod | None = Field(default=None, description="HTTP method for the validity check (default: GET)")
    refresh_url: str | None = Field(default=None, description="Refresh endpoint URL")
    refresh_method: AuthMethod | None = Field(default=None, description="HTTP method for refresh (default: POST)")
    refresh_token_path: str | None = Field(default=None, description="Dot path of the refresh token (default: refreshToken)")

    @property
    def effective_login_method(self) -> str:
        return self.login_method or "POST"

    @property
    def effective_token_path(self) -> str:
        return self.token_path or DEFAULT_TOKEN_PATH

    @property
    def effective_token_header(self) -> str:
        return self.token_header or DEFAULT_TOKEN_HEADER

    @property
    def effective_token_prefix(self) -> str:
        # An explicit empty prefix is meaningful (raw token in a custom header).
        return DEFAULT_TOKEN_PREFIX if self.token_prefix is None else self.token_prefix

    @property
    def effective_invalid_status_codes(self) -> list[int]:
        if self.invalid_status_codes is None:
            return list(DEFAULT_INVALID_STATUS_CODES)
        return list(self.invalid_status_codes)

    @property
    def effective_validity_check_method(self) -> str:
        return self.validity_check_method or "GET"

    @property
    def effective_refresh_method(self) -> str:
        return self.refresh_method or "POST"

    @property
    def effective_refresh_token_path(self) -> str:
        return self.refresh_token_path or DEFAULT_REFRESH_TOKEN_PATH


class Credential(CamelModel):
    """A stored credential record."""

    id: str
    name: str
    type: CredentialType
    api_doc_id: str | None = None
    config: CredentialConfig = Field(default_factory=CredentialConfig)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    @property
    def is_dynamic_bearer(self) -> bool:
        """True for bearer credentials that log in on their own."""
        return self.type == CredentialType.BEARER and bool(self.config.login_url)

    def summary(self) -> dict[str, Any]:
        """Identity fields only; never includes secrets."""
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.api_doc_id:
            payload["apiDocId"] = self.api_doc_id
        return payload


class AddCredentialParams(CredentialConfig):
    """Arguments of the ``add_credential`` tool.

    Every config field is accepted regardless of type; admission keeps only
    the ones the type uses.
    """

    id: str = Field(description="Unique identifier for the credential")
    name: str = Field(description="Display name for the credential")
    type: CredentialType = Field(description="Authentication type")
    api_doc_id: str | None = Field(
        default=None, description="Associate with a specific API doc (optional)"
    )
    skip_validity_check: bool = Field(
        default=False,
        description="Save a Smart Bearer credential without test-logging in first",
    )


class UpdateCredentialParams(CredentialConfig):
    """Arguments of the ``update_credential`` tool. Unset fields are left alone."""

    id: str = Field(description="ID of the credential to update")
    name: str | None = Field(default=None, description="New display name")
    skip_validity_check: bool = Field(
        default=False, description="Skip verification of credential login"
    )

    def config_updates(self) -> dict[str, Any]:
        """Config fields explicitly provided by the caller."""
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if field in CredentialConfig.model_fields
        }
