"""Tests for the in-memory token cache."""

from __future__ import annotations

from apiscout.core.auth.token_cache import TokenCache, TokenCacheEntry


def test_set_get_delete() -> None:
    cache = TokenCache()
    entry = TokenCacheEntry(credential_id="c1", token="t1", obtained_at=1)

    assert cache.get("c1") is None
    cache.set("c1", entry)
    assert cache.get("c1") is entry
    assert "c1" in cache
    assert len(cache) == 1

    assert cache.delete("c1") is True
    assert cache.delete("c1") is False
    assert cache.get("c1") is None


def test_instances_are_independent() -> None:
    first, second = TokenCache(), TokenCache()
    first.set("c1", TokenCacheEntry(credential_id="c1", token="t1"))
    assert second.get("c1") is None


def test_clear() -> None:
    cache = TokenCache()
    cache.set("a", TokenCacheEntry(credential_id="a", token="x"))
    cache.set("b", TokenCacheEntry(credential_id="b", token="y"))
    cache.clear()
    assert len(cache) == 0
