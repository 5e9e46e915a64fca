"""Dot-path lookup into JSON response bodies."""

from __future__ import annotations

from typing import Any


def get_value_by_path(obj: Any, path: str) -> Any | None:
    """Walk *obj* along a dot-separated *path*.

    Each step must land on a JSON object (a ``dict``; lists are never
    indexed) that has the next key. Any miss returns None.

    >>> get_value_by_path({"data": {"token": "abc"}}, "data.token")
    'abc'
    >>> get_value_by_path({"token": "abc"}, "data.token") is None
    True
    >>> get_value_by_path([1, 2], "0") is None
    True
    """
    current = obj
    for part in path.split("."):
        if current is None or not isinstance(current, dict):
            return None
        if part not in current:
            return None
        current = current[part]
    return current


def get_string_by_path(obj: Any, path: str) -> str | None:
    """Like :func:`get_value_by_path` but only accepts a non-empty string."""
    value = get_value_by_path(obj, path)
    if isinstance(value, str) and value:
        return value
    return None
