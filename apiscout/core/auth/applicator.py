"""Attach a stored credential to outgoing request headers."""

from __future__ import annotations

import base64
import logging

from apiscout.core.auth.lifecycle import TokenLifecycleManager
from apiscout.models.credential import Credential, CredentialType

logger = logging.getLogger(__name__)


def basic_auth_value(username: str, password: str) -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {encoded}"


class CredentialApplicator:
    """Mutates a header mapping in place according to the credential type.

    Missing fields are a silent no-op: admission control is where incomplete
    credentials get rejected. Only dynamic bearer credentials perform network
    I/O, through the lifecycle manager.
    """

    def __init__(self, lifecycle: TokenLifecycleManager) -> None:
        self.lifecycle = lifecycle

    async def apply(self, headers: dict[str, str], credential: Credential) -> None:
        config = credential.config
        cred_type = credential.type

        if cred_type == CredentialType.API_KEY:
            if config.api_key and config.api_key_header:
                headers[config.api_key_header] = config.api_key

        elif cred_type == CredentialType.BEARER:
            if config.login_url:
                token = await self.lifecycle.obtain_token(credential)
                headers[config.effective_token_header] = f"{config.effective_token_prefix}{token}"
            elif config.token:
                headers["Authorization"] = f"Bearer {config.token}"

        elif cred_type == CredentialType.BASIC:
            if config.username and config.password:
                headers["Authorization"] = basic_auth_value(config.username, config.password)

        elif cred_type == CredentialType.OAUTH2:
            if config.access_token:
                headers["Authorization"] = f"Bearer {config.access_token}"

        elif cred_type == CredentialType.CUSTOM:
            if config.headers:
                headers.update(config.headers)

        elif cred_type == CredentialType.CUSTOM_HEADERS:
            for header in config.custom_headers or []:
                headers[header.name] = header.value

        else:
            raise ValueError(f"Unsupported credential type: {cred_type}")

        logger.debug("Applied %s credential %s", cred_type.value, credential.id)
