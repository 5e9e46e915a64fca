"""Credential application and Smart Bearer token lifecycle."""

from apiscout.core.auth.applicator import CredentialApplicator
from apiscout.core.auth.lifecycle import TokenLifecycleManager
from apiscout.core.auth.paths import get_value_by_path
from apiscout.core.auth.token_cache import TokenCache, TokenCacheEntry

__all__ = [
    "CredentialApplicator",
    "TokenCache",
    "TokenCacheEntry",
    "TokenLifecycleManager",
    "get_value_by_path",
]
