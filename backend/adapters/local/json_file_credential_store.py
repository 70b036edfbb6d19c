"""JsonFileCredentialStore — thread-safe, JSON-backed credential store."""

import json
import logging
import os
import tempfile
import threading

from domain.models import Credential
from ports.credential_store import CredentialStorePort

logger = logging.getLogger(__name__)


class JsonFileCredentialStore(CredentialStorePort):
    """Keeps credentials in memory and mirrors every change to a JSON file.

    File layout: ``{"keys": [{"id": "...", "key": "..."}, ...]}``.
    The in-memory view only changes once the file write has succeeded.
    """

    def __init__(self, path: str):
        self._path = path
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        try:
            with open(self._path) as f:
                raw = json.load(f)
            for entry in raw.get("keys", []):
                cid, secret = entry.get("id"), entry.get("key")
                if not isinstance(cid, str) or not isinstance(secret, str) or not cid or not secret:
                    logger.warning(f"Skipping malformed credential entry (id={cid!r})")
                    continue
                self._data[cid] = secret
            logger.info(f"Credentials loaded from {self._path} ({len(self._data)} keys)")
        except FileNotFoundError:
            logger.info(f"No credential file at {self._path}, starting empty")
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logger.warning(f"Could not load credential file: {e}, starting empty")

    def _flush(self, data: dict[str, str]) -> None:
        """Atomically write ``data`` to disk via temp-file + os.replace."""
        dir_name = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(dir_name, exist_ok=True)
        payload = {"keys": [{"id": k, "key": v} for k, v in data.items()]}
        fd, tmp = tempfile.mkstemp(dir=dir_name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp, self._path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def list_all(self) -> list[Credential]:
        with self._lock:
            return [Credential(id=k, secret=v) for k, v in self._data.items()]

    def exists(self, credential_id: str) -> bool:
        with self._lock:
            return credential_id in self._data

    def add(self, credential_id: str, secret: str) -> None:
        with self._lock:
            updated = {**self._data, credential_id: secret}
            self._flush(updated)
            self._data = updated

    def delete(self, credential_id: str) -> None:
        with self._lock:
            if credential_id not in self._data:
                return
            updated = {k: v for k, v in self._data.items() if k != credential_id}
            self._flush(updated)
            self._data = updated
