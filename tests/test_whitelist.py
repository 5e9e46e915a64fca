"""Tests for the raw-call URL whitelist."""

from __future__ import annotations

import pytest

from apiscout.core.whitelist import (
    describe_whitelist,
    normalize_base_url,
    remove_dot_segments,
    validate_url_against_whitelist,
)

# ---------------------------------------------------------------------------
# validate_url_against_whitelist
# ---------------------------------------------------------------------------


class TestValidateUrlAgainstWhitelist:
    def test_matches_path_under_base(self) -> None:
        result = validate_url_against_whitelist(
            "https://api.x.com/v1/users", ["https://api.x.com/v1"]
        )
        assert result.valid is True
        assert result.matched_base_url == "https://api.x.com/v1"

    def test_rejects_other_host(self) -> None:
        result = validate_url_against_whitelist(
            "https://evil.com/v1/users", ["https://api.x.com/v1"]
        )
        assert result.valid is False
        assert result.matched_base_url is None

    def test_rejects_path_outside_base(self) -> None:
        assert not validate_url_against_whitelist(
            "https://api.x.com/v2/users", ["https://api.x.com/v1"]
        ).valid

    def test_trailing_slash_on_base_is_ignored(self) -> None:
        assert validate_url_against_whitelist(
            "https://api.x.com/v1/users", ["https://api.x.com/v1/"]
        ).valid

    def test_host_comparison_is_case_insensitive(self) -> None:
        assert validate_url_against_whitelist(
            "https://API.X.com/v1/users", ["https://api.x.com/v1"]
        ).valid

    def test_scheme_must_match(self) -> None:
        assert not validate_url_against_whitelist(
            "http://api.x.com/v1/users", ["https://api.x.com/v1"]
        ).valid

    def test_port_is_part_of_origin(self) -> None:
        assert not validate_url_against_whitelist(
            "https://api.x.com:8443/v1/users", ["https://api.x.com/v1"]
        ).valid
        assert validate_url_against_whitelist(
            "https://api.x.com:443/v1/users", ["https://api.x.com/v1"]
        ).valid

    def test_root_base_url_covers_whole_origin(self) -> None:
        assert validate_url_against_whitelist(
            "https://api.x.com/anything/at/all", ["https://api.x.com"]
        ).valid

    def test_first_match_wins(self) -> None:
        result = validate_url_against_whitelist(
            "https://api.x.com/v1/users",
            ["https://api.x.com", "https://api.x.com/v1"],
        )
        assert result.matched_base_url == "https://api.x.com"

    def test_malformed_entries_are_skipped(self) -> None:
        result = validate_url_against_whitelist(
            "https://api.x.com/v1/users",
            ["not a url", "https://[::1", "https://api.x.com/v1"],
        )
        assert result.valid is True
        assert result.matched_base_url == "https://api.x.com/v1"

    def test_malformed_target_matches_nothing(self) -> None:
        assert not validate_url_against_whitelist("/v1/users", ["https://api.x.com/v1"]).valid

    def test_non_http_scheme_is_refused(self) -> None:
        assert not validate_url_against_whitelist(
            "ftp://api.x.com/v1/file", ["ftp://api.x.com/v1"]
        ).valid

    @pytest.mark.parametrize(
        "url",
        [
            "https://api.x.com/v1/../admin",
            "https://api.x.com/v1/%2e%2e/admin",
            "https://api.x.com/v1/%2E%2E/admin",
            "https://api.x.com/v1/./../../admin",
        ],
    )
    def test_dot_segments_cannot_escape_base(self, url: str) -> None:
        assert not validate_url_against_whitelist(url, ["https://api.x.com/v1"]).valid

    def test_dot_segments_inside_base_are_allowed(self) -> None:
        assert validate_url_against_whitelist(
            "https://api.x.com/v1/users/../pets/./1", ["https://api.x.com/v1"]
        ).valid

    def test_dot_segments_in_base_are_resolved(self) -> None:
        assert validate_url_against_whitelist(
            "https://api.x.com/v2/users", ["https://api.x.com/v1/../v2"]
        ).valid

    def test_empty_whitelist(self) -> None:
        assert not validate_url_against_whitelist("https://api.x.com/v1", []).valid


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_normalize_base_url_strips_trailing_slashes() -> None:
    assert normalize_base_url("https://api.x.com/v1//") == "https://api.x.com/v1"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/", "/"),
        ("/v1/users", "/v1/users"),
        ("/v1/../admin", "/admin"),
        ("/v1/%2e%2E/admin", "/admin"),
        ("/../../etc", "/etc"),
        ("/v1/.", "/v1/"),
        ("/v1/users/..", "/v1/"),
        ("/a//b", "/a//b"),
    ],
)
def test_remove_dot_segments(path: str, expected: str) -> None:
    assert remove_dot_segments(path) == expected


def test_describe_whitelist() -> None:
    assert describe_whitelist([]) == "none"
    assert describe_whitelist(["https://a", "https://b"]) == "https://a, https://b"
