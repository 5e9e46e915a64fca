"""In-memory cache of access tokens obtained for Smart Bearer credentials."""

from __future__ import annotations

import time
from dataclasses import dataclass


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TokenCacheEntry:
    """A token obtained by login or refresh.

    ``token`` is None after the access token was rejected but a refresh token
    is still worth trying.
    """

    credential_id: str
    token: str | None
    refresh_token: str | None = None
    obtained_at: int = 0


class TokenCache:
    """Process-local map from credential id to its current token.

    The cache never expires entries on its own; the lifecycle manager decides
    staleness through validity probes or invalid-status eviction. Nothing here
    is persisted, so a restart forces a fresh login.

    There is no locking: two concurrent calls on the same credential may both
    log in, and the last ``set`` wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, TokenCacheEntry] = {}

    def get(self, credential_id: str) -> TokenCacheEntry | None:
        return self._entries.get(credential_id)

    def set(self, credential_id: str, entry: TokenCacheEntry) -> None:
        self._entries[credential_id] = entry

    def delete(self, credential_id: str) -> bool:
        """Evict an entry. Returns True if it existed."""
        return self._entries.pop(credential_id, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, credential_id: object) -> bool:
        return credential_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
