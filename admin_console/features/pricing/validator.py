"""
Pricing-period overlap check.

Periods are half-open [valid_from, valid_to); a missing valid_to is
open-ended. Only active periods of the same user type can conflict, so a
period ending exactly when the next begins is fine.

This is a local pre-check. The backend runs the same rule on create and its
answer wins.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Union


class PeriodLike(Protocol):
    user_type_id: int
    valid_from: datetime
    valid_to: Optional[datetime]
    active: bool


@dataclass(frozen=True)
class Candidate:
    user_type_id: int
    valid_from: datetime
    valid_to: Optional[datetime] = None


@dataclass(frozen=True)
class OverlapResult:
    has_overlap: bool
    conflict: Optional[PeriodLike] = None


class DateOrderError(ValueError):
    """valid_to is not strictly after valid_from."""


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _optional_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def check_date_order(valid_from: datetime, valid_to: Optional[datetime]) -> None:
    if valid_to is not None and as_utc(valid_to) <= as_utc(valid_from):
        raise DateOrderError("End date must be after the start date")


def periods_overlap(
    a_from: datetime,
    a_to: Optional[datetime],
    b_from: datetime,
    b_to: Optional[datetime],
) -> bool:
    a_from, b_from = as_utc(a_from), as_utc(b_from)
    a_to, b_to = _optional_utc(a_to), _optional_utc(b_to)

    if a_to is not None and b_to is not None:
        return a_from < b_to and a_to > b_from
    if a_to is not None:
        return a_to > b_from
    if b_to is not None:
        return a_from < b_to
    return True


def find_overlap(candidate: Union[Candidate, PeriodLike], existing: Iterable[PeriodLike]) -> OverlapResult:
    """First active same-tier period that intersects the candidate, if any."""
    candidate_id = getattr(candidate, "id", None)
    for period in existing:
        if not period.active or period.user_type_id != candidate.user_type_id:
            continue
        if period is candidate or (candidate_id is not None and getattr(period, "id", None) == candidate_id):
            continue
        if periods_overlap(candidate.valid_from, candidate.valid_to, period.valid_from, period.valid_to):
            return OverlapResult(has_overlap=True, conflict=period)
    return OverlapResult(has_overlap=False)
