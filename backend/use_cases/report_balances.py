"""Balance reporting side channel run after each aggregation."""

import logging
from typing import Sequence

from domain.models import Credential, UsageOutcome
from ports.balance_sink import BalanceSinkPort

logger = logging.getLogger(__name__)


def report_balances(
    successes: Sequence[UsageOutcome],
    credentials: Sequence[Credential],
    sink: BalanceSinkPort,
) -> list[Credential]:
    """Send credentials with strictly positive remaining allowance to ``sink``.

    Remaining is taken unclamped, so a credential sitting exactly at its
    allowance is not reported. Returns the credentials that were emitted.
    """
    by_id = {cred.id: cred for cred in credentials}
    with_balance = []
    for outcome in successes:
        if outcome.remaining <= 0:
            continue
        cred = by_id.get(outcome.id)
        if cred is None:
            logger.debug(f"Key ID {outcome.id} vanished before balance report")
            continue
        with_balance.append(cred)

    if with_balance:
        sink.emit_keys(with_balance)
    else:
        sink.emit_none_remaining()
    return with_balance
