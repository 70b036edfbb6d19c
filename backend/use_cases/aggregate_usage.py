"""AggregateUsageUseCase — fan out one usage fetch per credential and merge.

All fetches run concurrently (optionally capped by a semaphore) and the
snapshot is only assembled once every fetch has settled. Outcomes keep the
order the credentials were read in, not completion order.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from domain.errors import NoCredentialsError
from domain.masking import mask_secret
from domain.models import (
    NOT_AVAILABLE, AggregateTotals, Credential, FailureOutcome, FetchOutcome, Snapshot,
)
from ports.balance_sink import BalanceSinkPort
from ports.credential_store import CredentialStorePort
from ports.usage import UsageFetcherPort
from use_cases.report_balances import report_balances

logger = logging.getLogger(__name__)

REASON_UNEXPECTED = "unexpected error"


def compute_totals(outcomes: Iterable[FetchOutcome]) -> AggregateTotals:
    """Sum usage outcomes; failures contribute nothing.

    Remaining is clamped per credential before summing, so one over-used
    credential cannot cancel out another credential's balance.
    """
    total_used = 0
    total_allowance = 0
    total_remaining = 0
    for outcome in outcomes:
        if isinstance(outcome, FailureOutcome):
            continue
        total_used += outcome.used
        total_allowance += outcome.allowance
        total_remaining += max(0, outcome.remaining)
    return AggregateTotals(
        total_used=total_used,
        total_allowance=total_allowance,
        total_remaining=total_remaining,
    )


class AggregateUsageUseCase:
    """Builds a Snapshot across every configured credential.

    Args:
        fetcher: Queries one credential's usage; anything it raises becomes a FailureOutcome
        balance_sink: Receives credentials that still have balance
        credential_store: Source of credentials for execute()
        max_concurrency: Upper bound on in-flight fetches; 0 or None = uncapped
    """

    def __init__(
        self,
        fetcher: UsageFetcherPort,
        balance_sink: BalanceSinkPort,
        credential_store: Optional[CredentialStorePort] = None,
        max_concurrency: Optional[int] = None,
    ):
        self._fetcher = fetcher
        self._balance_sink = balance_sink
        self._store = credential_store
        self._max_concurrency = max_concurrency if max_concurrency and max_concurrency > 0 else None

    async def execute(self) -> Snapshot:
        """Read the current credential set from the store and aggregate it."""
        if self._store is None:
            raise RuntimeError("AggregateUsageUseCase has no credential store")
        return await self.aggregate(self._store.list_all())

    async def aggregate(self, credentials: Sequence[Credential]) -> Snapshot:
        credentials = list(credentials)
        if not credentials:
            raise NoCredentialsError()

        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

        async def _guarded_fetch(cred: Credential) -> FetchOutcome:
            try:
                return await self._fetcher.fetch(cred.id, cred.secret)
            except Exception as e:
                logger.error(f"Usage fetch for key ID {cred.id} raised: {e}", exc_info=True)
                masked = mask_secret(cred.secret) if isinstance(cred.secret, str) else NOT_AVAILABLE
                return FailureOutcome(id=cred.id, masked_secret=masked, reason=REASON_UNEXPECTED)

        async def _fetch_one(cred: Credential) -> FetchOutcome:
            if semaphore is None:
                return await _guarded_fetch(cred)
            async with semaphore:
                return await _guarded_fetch(cred)

        # gather() returns results in argument order regardless of completion order
        outcomes = await asyncio.gather(*(_fetch_one(cred) for cred in credentials))

        snapshot = Snapshot(
            generated_at=datetime.now(timezone.utc),
            credential_count=len(credentials),
            totals=compute_totals(outcomes),
            outcomes=tuple(outcomes),
        )
        successes = snapshot.successes
        logger.info(
            f"Aggregated {len(credentials)} keys: {len(successes)} ok, "
            f"{len(snapshot.failures)} failed, remaining={snapshot.totals.total_remaining}"
        )

        try:
            report_balances(successes, credentials, self._balance_sink)
        except Exception as e:
            logger.warning(f"Balance report failed: {e}")

        return snapshot
