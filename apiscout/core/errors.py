"""Error taxonomy for credential handling and outbound API calls."""

from __future__ import annotations


class ApiScoutError(Exception):
    """Base class for errors surfaced to the tool layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ApiScoutError):
    """A credential is missing a field its type requires."""


class AuthFailure(ApiScoutError):
    """Login or refresh was rejected, or no token was found in the response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ApiScoutError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


class WhitelistViolation(ApiScoutError):
    """A raw URL does not fall under any registered base URL."""

    def __init__(self, url: str, whitelist: list[str]) -> None:
        super().__init__(f"URL is not whitelisted: {url}")
        self.url = url
        self.whitelist = list(whitelist)


class CredentialVerificationError(ApiScoutError):
    """Test login of a Smart Bearer credential failed during create/update."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Credential verification failed: {reason}. "
            "Use skipValidityCheck=true to force save."
        )
        self.reason = reason
