"""InMemoryCredentialStore — process-local store, lost on restart."""

import threading
from typing import Iterable, Optional

from domain.models import Credential
from ports.credential_store import CredentialStorePort


class InMemoryCredentialStore(CredentialStorePort):
    def __init__(self, credentials: Optional[Iterable[Credential]] = None):
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}
        for cred in credentials or ():
            self._data[cred.id] = cred.secret

    def list_all(self) -> list[Credential]:
        with self._lock:
            return [Credential(id=k, secret=v) for k, v in self._data.items()]

    def exists(self, credential_id: str) -> bool:
        with self._lock:
            return credential_id in self._data

    def add(self, credential_id: str, secret: str) -> None:
        with self._lock:
            self._data[credential_id] = secret

    def delete(self, credential_id: str) -> None:
        with self._lock:
            self._data.pop(credential_id, None)
