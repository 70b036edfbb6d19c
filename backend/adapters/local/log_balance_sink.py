"""LogBalanceSink — writes credentials with remaining balance to a dedicated logger.

The logger name is fixed so operators can route or silence it separately:
these lines carry raw secrets.
"""

import logging
from typing import Sequence

from domain.models import Credential
from ports.balance_sink import BalanceSinkPort

BALANCE_LOGGER_NAME = "usage_monitor.balances"

logger = logging.getLogger(BALANCE_LOGGER_NAME)


class LogBalanceSink(BalanceSinkPort):
    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def emit_keys(self, credentials: Sequence[Credential]) -> None:
        self._log.info("=" * 80)
        self._log.info(f"API keys with remaining balance ({len(credentials)}):")
        self._log.info("-" * 80)
        for cred in credentials:
            self._log.info(cred.secret)
        self._log.info("=" * 80)

    def emit_none_remaining(self) -> None:
        self._log.warning("No API keys with remaining balance")
