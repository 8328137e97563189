"""Application catalog and per-application pricing matrix."""

from typing import Optional

from fastapi import APIRouter, Depends

from admin_console.core.auth import get_notifier, get_upstream
from admin_console.core.state import SessionNotifier
from admin_console.features.applications import service as applications
from admin_console.features.pricing import service as pricing
from admin_console.models.application import Application, ApplicationStatus, PricingForm, PricingStatusFilter
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/applications")


def _app_view(app: Application) -> dict:
    return {**app.model_dump(mode="json"), "status_badge": app.status.badge}


@router.get("")
async def list_applications(
    search: Optional[str] = None,
    status: Optional[ApplicationStatus] = None,
    api: UpstreamClient = Depends(get_upstream),
):
    apps = await applications.list_applications(api, search=search, status=status)
    return {"items": [_app_view(app) for app in apps]}


@router.get("/{application_id}")
async def get_application(application_id: int, api: UpstreamClient = Depends(get_upstream)):
    return _app_view(await applications.get_application(api, application_id))


@router.get("/{application_id}/pricing")
async def get_pricing(
    application_id: int,
    status: PricingStatusFilter = PricingStatusFilter.ALL,
    api: UpstreamClient = Depends(get_upstream),
):
    page = await pricing.load_pricing_page(api, application_id, status)
    return page.to_dict()


@router.post("/{application_id}/pricing", status_code=201)
async def schedule_price(
    application_id: int,
    form: PricingForm,
    status: PricingStatusFilter = PricingStatusFilter.ALL,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    """Schedule a new price period and return the reloaded pricing view."""
    created = await pricing.schedule_price(api, application_id, form)
    notifier.success("Price scheduled successfully")
    page = await pricing.load_pricing_page(api, application_id, status)
    return {"created": created.model_dump(mode="json"), **page.to_dict()}


@router.post("/{application_id}/pricing/{pricing_id}/end")
async def end_price(
    application_id: int,
    pricing_id: str,
    status: PricingStatusFilter = PricingStatusFilter.ALL,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    result = await pricing.end_price(api, application_id, pricing_id)
    notifier.success(result.message or "Price period ended successfully")
    page = await pricing.load_pricing_page(api, application_id, status)
    return page.to_dict()
