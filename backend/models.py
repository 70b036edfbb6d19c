from datetime import datetime, timedelta, timezone
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from domain.models import FailureOutcome, FetchOutcome, Snapshot, UsageOutcome

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class UsageItem(BaseModel):
    """A successful per-key usage reading"""
    kind: Literal["usage"] = "usage"
    id: str
    masked_key: str
    window_start: str
    window_end: str
    used: float
    allowance: float
    used_ratio: float


class FailureItem(BaseModel):
    """A per-key fetch failure"""
    kind: Literal["failure"] = "failure"
    id: str
    masked_key: str
    error: str


OutcomeItem = Annotated[Union[UsageItem, FailureItem], Field(discriminator="kind")]


class Totals(BaseModel):
    total_used: float
    total_allowance: float
    total_remaining: float


class SnapshotResponse(BaseModel):
    """Response format for /api/data"""
    generated_at: datetime
    update_time: str  # generated_at shifted to the display offset
    credential_count: int
    totals: Totals
    outcomes: List[OutcomeItem]


class KeyInfo(BaseModel):
    id: str
    key: str  # masked


class BatchImportResponse(BaseModel):
    success: bool = True
    added: int
    skipped: int
    errors: Optional[List[str]] = None


class BatchDeleteResponse(BaseModel):
    success: bool = True
    deleted: int
    not_found: int
    errors: Optional[List[str]] = None


def outcome_to_item(outcome: FetchOutcome) -> OutcomeItem:
    if isinstance(outcome, UsageOutcome):
        return UsageItem(
            id=outcome.id,
            masked_key=outcome.masked_secret,
            window_start=outcome.window_start,
            window_end=outcome.window_end,
            used=outcome.used,
            allowance=outcome.allowance,
            used_ratio=outcome.used_ratio,
        )
    if isinstance(outcome, FailureOutcome):
        return FailureItem(id=outcome.id, masked_key=outcome.masked_secret, error=outcome.reason)
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def format_display_time(moment: datetime, utc_offset_hours: float) -> str:
    shifted = moment.astimezone(timezone(timedelta(hours=utc_offset_hours)))
    return shifted.strftime(DISPLAY_TIME_FORMAT)


def snapshot_to_response(snapshot: Snapshot, utc_offset_hours: float = 0) -> SnapshotResponse:
    totals = snapshot.totals
    return SnapshotResponse(
        generated_at=snapshot.generated_at,
        update_time=format_display_time(snapshot.generated_at, utc_offset_hours),
        credential_count=snapshot.credential_count,
        totals=Totals(
            total_used=totals.total_used,
            total_allowance=totals.total_allowance,
            total_remaining=totals.total_remaining,
        ),
        outcomes=[outcome_to_item(o) for o in snapshot.outcomes],
    )
