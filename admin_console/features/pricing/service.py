"""
Application pricing matrix: load, validate and schedule price periods.

Scheduling runs the local overlap pre-check against a fresh copy of the
pricing history first. The backend repeats the check and its 422
PRICING_OVERLAP answer is what the admin ultimately sees.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from admin_console.core.errors import FormValidationError
from admin_console.core.logging import log_event
from admin_console.features.applications.service import get_application
from admin_console.features.pricing.validator import (
    Candidate,
    DateOrderError,
    as_utc,
    check_date_order,
    find_overlap,
)
from admin_console.models.application import Application, PricingForm, PricingPeriod, PricingStatusFilter
from admin_console.models.common import MutationResult
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_meta

OVERLAP_MESSAGE = "Price period overlaps with existing pricing for this user type"


@dataclass
class PricingPage:
    application: Application
    periods: List[PricingPeriod]
    status_filter: PricingStatusFilter

    def to_dict(self) -> dict:
        return {
            "application": self.application.model_dump(mode="json"),
            "status_filter": self.status_filter.value,
            "periods": [
                {**period.model_dump(mode="json"), "display_price": period.display_price()}
                for period in self.periods
            ],
        }


async def fetch_pricing(api: UpstreamClient, application_id: int, current: Optional[bool] = None) -> List[PricingPeriod]:
    payload = await api.get(f"/applications/{application_id}/pricing", params={"current": current})
    return [PricingPeriod.model_validate(item) for item in unwrap(payload, "pricing")]


def filter_periods(periods: Iterable[PricingPeriod], status_filter: PricingStatusFilter) -> List[PricingPeriod]:
    if status_filter == PricingStatusFilter.ACTIVE:
        selected = [p for p in periods if p.active]
    elif status_filter == PricingStatusFilter.INACTIVE:
        selected = [p for p in periods if not p.active]
    else:
        selected = list(periods)
    return sorted(selected, key=lambda p: (p.user_type_id, as_utc(p.valid_from)))


async def load_pricing_page(
    api: UpstreamClient,
    application_id: int,
    status_filter: PricingStatusFilter = PricingStatusFilter.ALL,
) -> PricingPage:
    application, periods = await asyncio.gather(
        get_application(api, application_id),
        fetch_pricing(api, application_id, current=False),
    )
    return PricingPage(application=application, periods=filter_periods(periods, status_filter), status_filter=status_filter)


def validate_pricing_form(form: PricingForm, existing: Iterable[PricingPeriod]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if form.price is None or form.price <= Decimal("0"):
        errors["price"] = "Price must be greater than zero"

    if form.valid_from is None:
        errors["valid_from"] = "Start date is required"
        return errors

    try:
        check_date_order(form.valid_from, form.valid_to)
    except DateOrderError as exc:
        errors["valid_to"] = str(exc)
        return errors

    candidate = Candidate(user_type_id=form.user_type_id, valid_from=form.valid_from, valid_to=form.valid_to)
    result = find_overlap(candidate, existing)
    if result.has_overlap:
        errors["valid_from"] = OVERLAP_MESSAGE
    return errors


def _create_payload(form: PricingForm) -> dict:
    payload = {
        "userTypeId": form.user_type_id,
        "price": float(form.price),
        "currency": form.currency.value,
        "billingCycle": form.billing_cycle.value,
        "validFrom": form.valid_from.isoformat(),
        "active": True,
    }
    if form.valid_to is not None:
        payload["validTo"] = form.valid_to.isoformat()
    return payload


async def schedule_price(api: UpstreamClient, application_id: int, form: PricingForm) -> PricingPeriod:
    existing = await fetch_pricing(api, application_id, current=False)
    errors = validate_pricing_form(form, existing)
    if errors:
        raise FormValidationError(errors)

    payload = await api.post(f"/applications/{application_id}/pricing", json=_create_payload(form))
    created = PricingPeriod.model_validate(unwrap(payload, "pricing"))
    log_event(
        "info",
        "pricing.scheduled",
        application_id=application_id,
        event_type="pricing",
        extra={"user_type_id": form.user_type_id, "pricing_id": created.id},
    )
    return created


async def end_price(api: UpstreamClient, application_id: int, pricing_id: str) -> MutationResult:
    payload = await api.post(f"/applications/{application_id}/pricing/{pricing_id}/end")
    log_event("info", "pricing.ended", application_id=application_id, event_type="pricing", extra={"pricing_id": pricing_id})
    return MutationResult.model_validate(unwrap_meta(payload))
