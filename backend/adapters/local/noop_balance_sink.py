"""NoOpBalanceSink — discards balance diagnostics."""

from typing import Sequence

from domain.models import Credential
from ports.balance_sink import BalanceSinkPort


class NoOpBalanceSink(BalanceSinkPort):
    def emit_keys(self, credentials: Sequence[Credential]) -> None:
        pass

    def emit_none_remaining(self) -> None:
        pass
