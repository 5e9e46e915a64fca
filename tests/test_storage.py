"""Tests for the JSON file store and secret masking."""

from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from apiscout.models.credential import CredentialConfig, CredentialType, CustomHeader
from apiscout.storage.filesystem import JsonStorage
from apiscout.storage.masking import is_sensitive_header, mask_credential_config, mask_string
from tests.helpers import make_api_doc, make_credential, make_smart_bearer


class TestMasking:
    def test_long_values_keep_edges(self) -> None:
        assert mask_string("abcdefghijklmnopqrstuvwxyz") == "abcd****wxyz"

    @pytest.mark.parametrize("value", ["", "short", "12345678"])
    def test_short_values_fully_masked(self, value: str) -> None:
        assert mask_string(value) == "****"

    @pytest.mark.parametrize(
        ("name", "sensitive"),
        [
            ("Authorization", True),
            ("X-API-Key", True),
            ("X-Client-Secret", True),
            ("X-Session-Token", True),
            ("Accept", False),
            ("X-Tenant", False),
        ],
    )
    def test_sensitive_header_names(self, name: str, sensitive: bool) -> None:
        assert is_sensitive_header(name) is sensitive

    def test_config_masking(self) -> None:
        config = CredentialConfig(
            api_key="abcdefghijklmnopqrstuvwxyz",
            headers={"Authorization": "Bearer abcdefghijkl", "X-Tenant": "acme"},
            custom_headers=[
                CustomHeader(name="X-Api-Key", value="secret-value-123"),
                CustomHeader(name="X-Tenant", value="acme"),
            ],
            login_body={"username": "alice", "password": "hunter22", "remember": True},
            login_url="https://auth.example.com/login",
        )

        masked = mask_credential_config(config)

        assert masked.api_key == "abcd****wxyz"
        assert masked.headers == {"Authorization": "Bear****ijkl", "X-Tenant": "acme"}
        assert [h.value for h in masked.custom_headers or []] == ["secr****-123", "acme"]
        assert masked.login_body == {"username": "alice", "password": "****", "remember": True}
        assert masked.login_url == "https://auth.example.com/login"
        assert config.api_key == "abcdefghijklmnopqrstuvwxyz"


class TestApiDocs:
    def test_add_and_whitelist(self, storage: JsonStorage) -> None:
        storage.add_api_doc(make_api_doc(base_url="https://api.example.com/v1//"))

        assert storage.get_api_doc("petstore") is not None
        assert storage.get_whitelisted_base_urls() == ["https://api.example.com/v1"]

    def test_duplicate_id_rejected(self, storage: JsonStorage) -> None:
        storage.add_api_doc(make_api_doc())
        with pytest.raises(ValueError, match="already exists"):
            storage.add_api_doc(make_api_doc())

    def test_update_never_changes_id(self, storage: JsonStorage) -> None:
        storage.add_api_doc(make_api_doc())

        updated = storage.update_api_doc("petstore", {"id": "other", "version": "2.0"})

        assert updated.id == "petstore"
        assert updated.version == "2.0"
        assert storage.get_api_doc("other") is None

    def test_update_missing_raises(self, storage: JsonStorage) -> None:
        with pytest.raises(KeyError):
            storage.update_api_doc("missing", {"version": "2"})

    def test_remove_unwhitelists(self, storage: JsonStorage) -> None:
        storage.add_api_doc(make_api_doc())

        assert storage.remove_api_doc("petstore") is True
        assert storage.remove_api_doc("petstore") is False
        assert storage.get_whitelisted_base_urls() == []


class TestCredentials:
    def test_reads_are_masked_except_get_credential(self, storage: JsonStorage) -> None:
        returned = storage.add_credential(
            make_credential(CredentialType.API_KEY, api_key="abcdefghijklmnop")
        )

        assert returned.config.api_key == "abcd****mnop"
        assert storage.get_credentials()[0].config.api_key == "abcd****mnop"
        masked = storage.get_masked_credential("cred")
        assert masked is not None and masked.config.api_key == "abcd****mnop"
        raw = storage.get_credential("cred")
        assert raw is not None and raw.config.api_key == "abcdefghijklmnop"

    def test_duplicate_id_rejected(self, storage: JsonStorage) -> None:
        storage.add_credential(make_credential(token="t"))
        with pytest.raises(ValueError):
            storage.add_credential(make_credential(token="t"))

    def test_update_preserves_id_and_created_at(self, storage: JsonStorage) -> None:
        storage.add_credential(make_credential(token="t"))
        original = storage.get_credential("cred")
        assert original is not None

        storage.update_credential("cred", {"id": "x", "name": "Renamed"})

        updated = storage.get_credential("cred")
        assert updated is not None
        assert updated.name == "Renamed"
        assert updated.created_at == original.created_at
        assert storage.get_credential("x") is None

    def test_remove(self, storage: JsonStorage) -> None:
        storage.add_credential(make_credential(token="t"))
        assert storage.remove_credential("cred") is True
        assert storage.remove_credential("cred") is False


class TestPersistence:
    def test_round_trip_across_instances(self, tmp_path: Path) -> None:
        first = JsonStorage(tmp_path)
        first.add_api_doc(make_api_doc())
        first.add_credential(make_smart_bearer())

        second = JsonStorage(tmp_path)

        assert [d.id for d in second.get_api_docs()] == ["petstore"]
        credential = second.get_credential("smart")
        assert credential is not None
        assert credential.is_dynamic_bearer
        assert credential.config.login_body == {"u": "a", "p": "b"}

    def test_file_layout_is_camel_case(self, storage: JsonStorage) -> None:
        storage.add_api_doc(make_api_doc())
        storage.add_credential(make_credential(CredentialType.API_KEY, api_key="k"))

        raw = json.loads(storage.data_path.read_text())

        assert set(raw) == {"apiDocs", "credentials"}
        assert raw["apiDocs"][0]["baseUrl"] == "https://api.example.com/v1"
        assert raw["credentials"][0]["config"] == {"apiKey": "k"}

    def test_file_is_private(self, storage: JsonStorage) -> None:
        storage.add_credential(make_credential(token="t"))
        assert stat.S_IMODE(storage.data_path.stat().st_mode) == 0o600

    def test_corrupt_file_starts_empty(self, tmp_path: Path) -> None:
        (tmp_path / "data.json").write_text("{not json")

        storage = JsonStorage(tmp_path)

        assert storage.get_api_docs() == []
        assert storage.get_credentials() == []
        storage.add_api_doc(make_api_doc())
        assert json.loads((tmp_path / "data.json").read_text())["apiDocs"]

    def test_missing_directory_is_created_on_write(self, tmp_path: Path) -> None:
        storage = JsonStorage(tmp_path / "nested" / "dir")
        storage.add_api_doc(make_api_doc())
        assert storage.data_path.exists()
