"""Pydantic data models for API Scout."""

from apiscout.models.api_doc import HTTP_METHODS, ApiDoc, ApiEndpoint
from apiscout.models.call import ApiCallResponse, ResponseTiming
from apiscout.models.credential import (
    MAX_CUSTOM_HEADERS,
    Credential,
    CredentialConfig,
    CredentialType,
    CustomHeader,
)

__all__ = [
    # API docs
    "HTTP_METHODS",
    "ApiDoc",
    "ApiEndpoint",
    # Calls
    "ApiCallResponse",
    "ResponseTiming",
    # Credentials
    "MAX_CUSTOM_HEADERS",
    "Credential",
    "CredentialConfig",
    "CredentialType",
    "CustomHeader",
]
