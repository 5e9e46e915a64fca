"""JSON file storage for registered API docs and credentials."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from apiscout.core.whitelist import normalize_base_url
from apiscout.models.api_doc import ApiDoc
from apiscout.models.credential import Credential, utc_now_iso
from apiscout.storage.masking import mask_credential_config
from apiscout.utils.files import PRIVATE_FILE_MODE, atomic_write_text, set_file_mode
from apiscout.utils.state import DATA_FILENAME

logger = logging.getLogger(__name__)


class JsonStorage:
    """Single-file store at ``<storage_dir>/data.json``.

    The whole dataset is loaded on construction and rewritten atomically on
    every mutation. The file holds plaintext secrets, so it is kept at mode
    0600.
    """

    def __init__(self, storage_dir: Path | str) -> None:
        self.storage_dir = Path(storage_dir)
        self.data_path = self.storage_dir / DATA_FILENAME
        self._api_docs: list[ApiDoc] = []
        self._credentials: list[Credential] = []
        self._load()

    # ------------------------------------------------------------------
    # API docs
    # ------------------------------------------------------------------

    def get_api_docs(self) -> list[ApiDoc]:
        return list(self._api_docs)

    def get_api_doc(self, doc_id: str) -> ApiDoc | None:
        for doc in self._api_docs:
            if doc.id == doc_id:
                return doc
        return None

    def add_api_doc(self, doc: ApiDoc) -> ApiDoc:
        """Store a new doc. Its base URL is whitelisted from now on.

        Raises:
            ValueError: A doc with the same id exists.
        """
        if self.get_api_doc(doc.id) is not None:
            raise ValueError(f"API doc with id '{doc.id}' already exists")
        self._api_docs.append(doc)
        self._save()
        logger.info("Registered API doc %s (%s)", doc.id, doc.base_url)
        return doc

    def update_api_doc(self, doc_id: str, updates: dict[str, Any]) -> ApiDoc:
        """Apply *updates* (snake_case field names); the id never changes.

        Raises:
            KeyError: No doc with *doc_id*.
        """
        index = self._index_of(self._api_docs, doc_id)
        safe_updates = {k: v for k, v in updates.items() if k != "id"}
        safe_updates["updated_at"] = utc_now_iso()
        updated = self._api_docs[index].model_copy(update=safe_updates)
        self._api_docs[index] = updated
        self._save()
        return updated

    def remove_api_doc(self, doc_id: str) -> bool:
        try:
            index = self._index_of(self._api_docs, doc_id)
        except KeyError:
            return False
        del self._api_docs[index]
        self._save()
        logger.info("Removed API doc %s", doc_id)
        return True

    def get_whitelisted_base_urls(self) -> list[str]:
        return [normalize_base_url(doc.base_url) for doc in self._api_docs]

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_credential(self, credential_id: str) -> Credential | None:
        """Unmasked record, for applying to requests. Never display this."""
        for credential in self._credentials:
            if credential.id == credential_id:
                return credential
        return None

    def get_masked_credential(self, credential_id: str) -> Credential | None:
        credential = self.get_credential(credential_id)
        if credential is None:
            return None
        return _masked(credential)

    def get_credentials(self) -> list[Credential]:
        """All credentials with secrets masked."""
        return [_masked(credential) for credential in self._credentials]

    def add_credential(self, credential: Credential) -> Credential:
        """Store a new credential.

        Raises:
            ValueError: A credential with the same id exists.
        """
        if self.get_credential(credential.id) is not None:
            raise ValueError(f"Credential '{credential.id}' already exists")
        self._credentials.append(credential)
        self._save()
        logger.info("Stored %s credential %s", credential.type.value, credential.id)
        return _masked(credential)

    def update_credential(self, credential_id: str, updates: dict[str, Any]) -> Credential:
        """Apply *updates* (snake_case field names) and return the masked result.

        Raises:
            KeyError: No credential with *credential_id*.
        """
        index = self._index_of(self._credentials, credential_id)
        safe_updates = {k: v for k, v in updates.items() if k != "id"}
        safe_updates["updated_at"] = utc_now_iso()
        updated = self._credentials[index].model_copy(update=safe_updates)
        self._credentials[index] = updated
        self._save()
        logger.info("Updated credential %s", credential_id)
        return _masked(updated)

    def remove_credential(self, credential_id: str) -> bool:
        try:
            index = self._index_of(self._credentials, credential_id)
        except KeyError:
            return False
        del self._credentials[index]
        self._save()
        logger.info("Removed credential %s", credential_id)
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not self.data_path.exists():
            return
        try:
            raw = json.loads(self.data_path.read_text(encoding="utf-8"))
            self._api_docs = [ApiDoc.model_validate(d) for d in raw.get("apiDocs", [])]
            self._credentials = [
                Credential.model_validate(c) for c in raw.get("credentials", [])
            ]
        except (OSError, ValueError, AttributeError, ValidationError) as exc:
            logger.error("Could not load %s, starting empty: %s", self.data_path, exc)
            self._api_docs = []
            self._credentials = []

    def _save(self) -> None:
        payload = {
            "apiDocs": [doc.to_json_dict() for doc in self._api_docs],
            "credentials": [credential.to_json_dict() for credential in self._credentials],
        }
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        atomic_write_text(
            self.data_path,
            json.dumps(payload, indent=2),
            mode=PRIVATE_FILE_MODE,
        )
        set_file_mode(self.data_path)

    @staticmethod
    def _index_of(records: list[Any], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise KeyError(record_id)


def _masked(credential: Credential) -> Credential:
    return credential.model_copy(update={"config": mask_credential_config(credential.config)})
