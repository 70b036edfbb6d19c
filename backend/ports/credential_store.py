"""CredentialStorePort — abstract interface for durable credential storage."""

from abc import ABC, abstractmethod

from domain.models import Credential


class CredentialStorePort(ABC):
    @abstractmethod
    def list_all(self) -> list[Credential]:
        """Return every stored credential, in insertion order."""

    @abstractmethod
    def exists(self, credential_id: str) -> bool:
        """Return True if a credential with this id is stored."""

    @abstractmethod
    def add(self, credential_id: str, secret: str) -> None:
        """Store a credential. Callers check for duplicates first."""

    @abstractmethod
    def delete(self, credential_id: str) -> None:
        """Remove a credential. Deleting an unknown id is a no-op."""
