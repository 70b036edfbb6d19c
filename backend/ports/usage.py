"""UsageFetcherPort — abstract interface for querying one credential's usage."""

from abc import ABC, abstractmethod

from domain.models import FetchOutcome


class UsageFetcherPort(ABC):
    @abstractmethod
    async def fetch(self, credential_id: str, secret: str) -> FetchOutcome:
        """Query usage for one credential.

        Must never raise: every failure is returned as a FailureOutcome.
        """

    async def aclose(self) -> None:
        """Release any pooled connections. Default: nothing to release."""
