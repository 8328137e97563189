"""Overlap rules for pricing periods."""

from datetime import datetime, timedelta, timezone

import pytest

from admin_console.features.pricing.validator import (
    Candidate,
    DateOrderError,
    check_date_order,
    find_overlap,
    periods_overlap,
)
from admin_console.models.application import PricingPeriod

JAN = datetime(2025, 1, 1, tzinfo=timezone.utc)
FEB = datetime(2025, 2, 1, tzinfo=timezone.utc)
MAR = datetime(2025, 3, 1, tzinfo=timezone.utc)
APR = datetime(2025, 4, 1, tzinfo=timezone.utc)


def period(pid, valid_from, valid_to=None, user_type_id=1, active=True):
    return PricingPeriod(id=pid, user_type_id=user_type_id, valid_from=valid_from, valid_to=valid_to, active=active)


@pytest.mark.parametrize(
    "a, b",
    [
        ((JAN, MAR), (FEB, APR)),
        ((JAN, FEB), (FEB, MAR)),
        ((JAN, APR), (FEB, MAR)),
        ((JAN, FEB), (MAR, APR)),
    ],
)
def test_bounded_overlap_is_symmetric(a, b):
    assert periods_overlap(*a, *b) == periods_overlap(*b, *a)


def test_touching_endpoints_do_not_overlap():
    existing = [period(1, JAN, FEB)]
    assert not find_overlap(Candidate(1, FEB, MAR), existing).has_overlap
    assert not find_overlap(Candidate(1, datetime(2024, 12, 1, tzinfo=timezone.utc), JAN), existing).has_overlap


def test_partial_overlap_detected_and_reports_conflict():
    existing = [period(1, JAN, MAR)]
    result = find_overlap(Candidate(1, FEB, APR), existing)
    assert result.has_overlap
    assert result.conflict is existing[0]


def test_open_candidate_after_bounded_existing_ends():
    existing = [period(1, JAN, FEB)]
    assert not find_overlap(Candidate(1, MAR, None), existing).has_overlap
    assert find_overlap(Candidate(1, datetime(2025, 1, 15, tzinfo=timezone.utc), None), existing).has_overlap


def test_bounded_candidate_against_open_existing():
    existing = [period(1, MAR, None)]
    assert not find_overlap(Candidate(1, JAN, MAR), existing).has_overlap
    assert find_overlap(Candidate(1, JAN, APR), existing).has_overlap


def test_two_open_ended_periods_always_overlap():
    existing = [period(1, APR, None)]
    assert find_overlap(Candidate(1, JAN, None), existing).has_overlap


def test_inactive_and_other_tiers_never_conflict():
    existing = [
        period(1, JAN, None, active=False),
        period(2, JAN, None, user_type_id=2),
    ]
    assert not find_overlap(Candidate(1, FEB, MAR), existing).has_overlap


@pytest.mark.parametrize("valid_to", [MAR, None])
def test_inactive_exact_duplicate_never_conflicts(valid_to):
    existing = [period(1, FEB, valid_to, active=False)]
    assert not find_overlap(Candidate(1, FEB, valid_to), existing).has_overlap


def _d(year, month, day=1):
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "candidate, existing, expected",
    [
        ((_d(2024, 1), _d(2024, 6)), (_d(2024, 6), _d(2024, 12)), False),
        ((_d(2024, 1), _d(2024, 6)), (_d(2024, 5), _d(2024, 12)), True),
        ((_d(2024, 1), None), (_d(2023, 1), _d(2023, 6)), False),
        ((_d(2024, 1), None), (_d(2025, 1), None), True),
    ],
)
def test_reference_vectors(candidate, existing, expected):
    result = find_overlap(Candidate(1, *candidate), [period(9, *existing)])
    assert result.has_overlap is expected


def test_candidate_not_compared_with_itself():
    current = period(5, JAN, None)
    assert not find_overlap(current, [current]).has_overlap
    # same id, different object (e.g. reloaded from the backend)
    assert not find_overlap(current, [period(5, JAN, None)]).has_overlap


def test_naive_datetimes_are_utc():
    existing = [period(1, JAN, MAR)]
    naive = Candidate(1, datetime(2025, 3, 1), datetime(2025, 4, 1))
    assert not find_overlap(naive, existing).has_overlap


def test_short_circuits_on_first_match_regardless_of_order():
    a = period(1, JAN, FEB)
    b = period(2, FEB, MAR)
    candidate = Candidate(1, JAN + timedelta(days=20), FEB + timedelta(days=5))
    assert find_overlap(candidate, [a, b]).has_overlap
    assert find_overlap(candidate, [b, a]).has_overlap


def test_date_order_precondition():
    check_date_order(JAN, None)
    check_date_order(JAN, FEB)
    with pytest.raises(DateOrderError):
        check_date_order(FEB, FEB)
    with pytest.raises(DateOrderError):
        check_date_order(FEB, JAN)
