"""BalanceSinkPort — diagnostic channel for credentials that still have balance.

This is the only channel that receives raw secrets after a fetch. Adapters
must be treated as sensitive.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from domain.models import Credential


class BalanceSinkPort(ABC):
    @abstractmethod
    def emit_keys(self, credentials: Sequence[Credential]) -> None:
        """Emit the credentials whose remaining allowance is positive."""

    @abstractmethod
    def emit_none_remaining(self) -> None:
        """Emit a single notice that no credential has balance left."""
