"""HttpxUsageFetcher — queries the upstream chat-usage endpoint for one credential.

Response envelope:
    {"usage": {"startDate": <epoch ms>, "endDate": <epoch ms>,
               "standard": {"orgTotalTokensUsed": n, "totalAllowance": n, "usedRatio": r}}}

Every outcome (including transport errors and timeouts) is returned as data;
fetch() never raises.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from domain.masking import mask_secret
from domain.models import (
    INVALID_DATE, NOT_AVAILABLE, FailureOutcome, FetchOutcome, UsageOutcome,
)
from ports.usage import UsageFetcherPort

logger = logging.getLogger(__name__)

REASON_TRANSPORT = "transport error"
REASON_INVALID_STRUCTURE = "invalid response structure"

# Upstream error bodies can be large HTML pages
MAX_LOGGED_BODY_CHARS = 500


def format_epoch_millis(value: Any) -> str:
    """Convert an epoch-millisecond timestamp into an ISO calendar date (UTC)."""
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return INVALID_DATE
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return INVALID_DATE


def _number(value: Any, floor_at_zero: bool = False) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    if floor_at_zero and value < 0:
        return 0
    return value


def parse_usage_payload(credential_id: str, masked_secret: str, payload: Any) -> FetchOutcome:
    """Map a decoded response body onto a UsageOutcome, or a structural failure."""
    usage = payload.get("usage") if isinstance(payload, dict) else None
    standard = usage.get("standard") if isinstance(usage, dict) else None
    if not isinstance(standard, dict):
        return FailureOutcome(id=credential_id, masked_secret=masked_secret, reason=REASON_INVALID_STRUCTURE)

    return UsageOutcome(
        id=credential_id,
        masked_secret=masked_secret,
        window_start=format_epoch_millis(usage.get("startDate")),
        window_end=format_epoch_millis(usage.get("endDate")),
        used=_number(standard.get("orgTotalTokensUsed"), floor_at_zero=True),
        allowance=_number(standard.get("totalAllowance"), floor_at_zero=True),
        used_ratio=_number(standard.get("usedRatio")),
    )


class HttpxUsageFetcher(UsageFetcherPort):
    """One GET per fetch, sharing a pooled httpx.AsyncClient across fetches.

    Args:
        endpoint: Upstream usage URL
        user_agent: Fixed User-Agent header sent with every request
        timeout: Deadline in seconds for the whole call; exceeding it is a transport error
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        endpoint: str,
        user_agent: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = endpoint
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def fetch(self, credential_id: str, secret: str) -> FetchOutcome:
        masked = NOT_AVAILABLE
        try:
            masked = mask_secret(secret)
            headers = {
                "Authorization": f"Bearer {secret}",
                "User-Agent": self._user_agent,
            }
            # httpx timeouts bound each read separately; this bounds the whole call
            response = await asyncio.wait_for(
                self._get_client().get(self._endpoint, headers=headers),
                self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Usage fetch for key ID {credential_id} exceeded {self._timeout}s")
            return FailureOutcome(id=credential_id, masked_secret=masked, reason=REASON_TRANSPORT)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch usage for key ID {credential_id}: {type(e).__name__}: {e}")
            return FailureOutcome(id=credential_id, masked_secret=masked, reason=REASON_TRANSPORT)
        except Exception as e:
            logger.error(f"Unexpected error fetching usage for key ID {credential_id}: {e}", exc_info=True)
            return FailureOutcome(id=credential_id, masked_secret=masked, reason=REASON_TRANSPORT)

        if not response.is_success:
            body = response.text[:MAX_LOGGED_BODY_CHARS]
            logger.error(f"Error fetching usage for key ID {credential_id}: {response.status_code} {body}")
            return FailureOutcome(id=credential_id, masked_secret=masked, reason=f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Usage response for key ID {credential_id} is not valid JSON")
            return FailureOutcome(id=credential_id, masked_secret=masked, reason=REASON_INVALID_STRUCTURE)

        outcome = parse_usage_payload(credential_id, masked, payload)
        if isinstance(outcome, FailureOutcome):
            logger.warning(f"Usage response for key ID {credential_id} is missing usage.standard")
        return outcome

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
