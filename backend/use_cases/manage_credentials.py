"""CredentialManager — validated create/list/delete operations on the store."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from domain.errors import (
    CredentialNotFoundError, DuplicateCredentialError, InvalidCredentialError,
)
from domain.masking import mask_secret
from ports.credential_store import CredentialStorePort

logger = logging.getLogger(__name__)


@dataclass
class BatchImportResult:
    added: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class BatchDeleteResult:
    deleted: int = 0
    not_found: int = 0
    errors: list[str] = field(default_factory=list)


def _clean(value: Any) -> Optional[str]:
    """Return a trimmed non-empty string, or None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class CredentialManager:
    def __init__(self, store: CredentialStorePort):
        self._store = store

    def list_masked(self) -> list[tuple[str, str]]:
        return [(cred.id, mask_secret(cred.secret)) for cred in self._store.list_all()]

    def count(self) -> int:
        return len(self._store.list_all())

    def add(self, credential_id: Any, secret: Any) -> None:
        if credential_id is None or secret is None:
            raise InvalidCredentialError("id and key are required")
        cid, key = _clean(credential_id), _clean(secret)
        if not cid or not key:
            raise InvalidCredentialError("id and key cannot be empty")
        if self._store.exists(cid):
            raise DuplicateCredentialError("Key ID already exists")
        self._store.add(cid, key)
        logger.info(f"Added key ID {cid}")

    def import_batch(self, items: list[Any]) -> BatchImportResult:
        result = BatchImportResult()
        for item in items:
            if not isinstance(item, dict) or "id" not in item or "key" not in item:
                result.errors.append("Invalid entry: missing id or key")
                continue
            cid, key = _clean(item["id"]), _clean(item["key"])
            if not cid or not key:
                result.errors.append("Invalid entry: empty id or key")
                continue
            if self._store.exists(cid):
                result.skipped += 1
                continue
            self._store.add(cid, key)
            result.added += 1

        logger.info(f"Batch import: added={result.added}, skipped={result.skipped}, errors={len(result.errors)}")
        return result

    def delete(self, credential_id: str) -> None:
        if not credential_id:
            raise InvalidCredentialError("Key ID is required")
        if not self._store.exists(credential_id):
            raise CredentialNotFoundError("Key not found")
        self._store.delete(credential_id)
        logger.info(f"Deleted key ID {credential_id}")

    def delete_batch(self, ids: Any) -> BatchDeleteResult:
        if not isinstance(ids, list):
            raise InvalidCredentialError("ids must be an array")
        if not ids:
            raise InvalidCredentialError("ids array cannot be empty")

        result = BatchDeleteResult()
        for cid in ids:
            if not isinstance(cid, str) or not cid:
                result.errors.append(f"Invalid ID: {cid}")
                continue
            if not self._store.exists(cid):
                result.not_found += 1
                continue
            try:
                self._store.delete(cid)
                result.deleted += 1
            except OSError as e:
                result.errors.append(f"Failed to delete {cid}: {e}")

        logger.info(f"Batch delete: deleted={result.deleted}, not_found={result.not_found}, errors={len(result.errors)}")
        return result
