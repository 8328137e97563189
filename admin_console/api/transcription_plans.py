"""Transcription quota plans."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_console.core.auth import get_notifier, get_upstream, require_session
from admin_console.core.config import settings
from admin_console.core.state import Session, SessionNotifier
from admin_console.features.transcription_plans import service as plans
from admin_console.models.transcription_plan import TranscriptionPlanForm
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/transcription-plans")


@router.get("")
async def list_plans(
    active: Optional[bool] = None,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    api: UpstreamClient = Depends(get_upstream),
):
    result = await plans.list_plans(api, active=active, limit=limit, offset=offset)
    return result.model_dump(mode="json")


@router.get("/defaults")
async def plan_defaults(_: Session = Depends(require_session)):
    """Values the create form starts with."""
    form = plans.with_defaults(TranscriptionPlanForm())
    return {
        **form.model_dump(mode="json"),
        "basic_monthly_limit": settings.TRANSCRIPTION_BASIC_MONTHLY_LIMIT,
    }


@router.get("/{plan_id}")
async def get_plan(plan_id: int, api: UpstreamClient = Depends(get_upstream)):
    return (await plans.get_plan(api, plan_id)).model_dump(mode="json")


@router.post("", status_code=201)
async def create_plan(
    form: TranscriptionPlanForm,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    plan = await plans.create_plan(api, form)
    notifier.success(f"Plan '{plan.name}' created successfully")
    return plan.model_dump(mode="json")


@router.put("/{plan_id}")
async def update_plan(
    plan_id: int,
    form: TranscriptionPlanForm,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    plan = await plans.update_plan(api, plan_id, form)
    notifier.success(f"Plan '{plan.name}' updated successfully")
    return plan.model_dump(mode="json")


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: int,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    result = await plans.delete_plan(api, plan_id)
    notifier.success(result.message or "Plan deleted successfully")
    return {"status": "ok", **result.model_dump(mode="json")}
