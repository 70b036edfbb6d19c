"""Domain types for usage aggregation.

Framework-free dataclasses. The HTTP layer converts these into pydantic
response models (see models.py); nothing here knows about FastAPI.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

NOT_AVAILABLE = "N/A"
INVALID_DATE = "Invalid Date"


@dataclass(frozen=True)
class Credential:
    """An id/secret pair used to authenticate against the usage endpoint."""
    id: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class UsageOutcome:
    id: str
    masked_secret: str
    window_start: str  # ISO date, or NOT_AVAILABLE / INVALID_DATE
    window_end: str
    used: float = 0
    allowance: float = 0
    used_ratio: float = 0

    @property
    def remaining(self) -> float:
        """Allowance left on this credential, unclamped (may be negative)."""
        return self.allowance - self.used


@dataclass(frozen=True)
class FailureOutcome:
    id: str
    masked_secret: str
    reason: str


FetchOutcome = Union[UsageOutcome, FailureOutcome]


@dataclass(frozen=True)
class AggregateTotals:
    total_used: float = 0
    total_allowance: float = 0
    total_remaining: float = 0


@dataclass(frozen=True)
class Snapshot:
    """One complete aggregation result, in credential-read order."""
    generated_at: datetime
    credential_count: int
    totals: AggregateTotals
    outcomes: tuple[FetchOutcome, ...]

    @property
    def successes(self) -> list[UsageOutcome]:
        return [o for o in self.outcomes if isinstance(o, UsageOutcome)]

    @property
    def failures(self) -> list[FailureOutcome]:
        return [o for o in self.outcomes if isinstance(o, FailureOutcome)]
