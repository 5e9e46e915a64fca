"""URL whitelist checks for raw API calls.

Every registered API doc contributes its base URL to the whitelist. A raw
call is authorized when the target shares the base URL's origin and its path
starts with the base URL's path.

Design principles:
- **Origin equality**: scheme and host (with non-default port) must match
  exactly, after lowercasing. No wildcard hosts.
- **Prefix match**: the base path, with trailing slashes stripped, must be a
  string prefix of the target path. No regex.
- **Compare what is sent**: ``.`` and ``..`` segments, including the
  percent-encoded ``%2e`` forms, are resolved on both sides first, as the
  HTTP client resolves them before sending.
- **Skip, don't fail**: malformed entries on either side are ignored; a
  malformed target simply matches nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}
_ENCODED_DOT_RE = re.compile(r"%2e", re.IGNORECASE)


@dataclass(frozen=True)
class WhitelistMatch:
    """Outcome of a whitelist check."""

    valid: bool
    matched_base_url: str | None = None


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_base_url(url: str) -> str:
    """Strip trailing slashes from a base URL."""
    return url.rstrip("/")


def remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments of an absolute path.

    ``%2e`` counts as a literal dot. ``..`` never climbs above ``/``.

    >>> remove_dot_segments("/v1/../admin")
    '/admin'
    >>> remove_dot_segments("/v1/%2E%2e/admin")
    '/admin'
    """
    segments = _ENCODED_DOT_RE.sub(".", path).split("/")[1:]
    output: list[str] = []
    for segment in segments:
        if segment == "..":
            if output:
                output.pop()
        elif segment != ".":
            output.append(segment)
    # A trailing dot segment leaves the path ending in a slash.
    if segments and segments[-1] in (".", ".."):
        output.append("")
    return "/" + "/".join(output)


def _split_origin_and_path(url: str) -> tuple[str, str] | None:
    """Return ``(origin, path)`` or None when *url* is not an absolute URL.

    * Lowercases scheme and host
    * Only http and https are accepted
    * Drops the port when it is the scheme default
    * Keeps IPv6 literals bracketed
    * An empty path becomes ``/``
    * Dot segments in the path are resolved
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not host:
        return None

    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    return f"{scheme}://{host}", remove_dot_segments(parts.path or "/")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_url_against_whitelist(
    url: str,
    whitelisted_base_urls: list[str],
) -> WhitelistMatch:
    """Check *url* against each base URL in order; first match wins."""
    target = _split_origin_and_path(url)
    if target is None:
        return WhitelistMatch(valid=False)
    target_origin, target_path = target

    for base_url in whitelisted_base_urls:
        base = _split_origin_and_path(normalize_base_url(base_url))
        if base is None:
            continue
        base_origin, base_path = base
        if base_origin != target_origin:
            continue
        if target_path.startswith(base_path.rstrip("/")):
            return WhitelistMatch(valid=True, matched_base_url=base_url)

    return WhitelistMatch(valid=False)


def describe_whitelist(whitelisted_base_urls: list[str]) -> str:
    """Human-readable whitelist for error suggestions."""
    return ", ".join(whitelisted_base_urls) or "none"
