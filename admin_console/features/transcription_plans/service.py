"""Transcription quota plans: CRUD plus slug generation and form rules."""

import re
import unicodedata
from typing import Dict, List, Optional

from admin_console.core.config import Settings, settings
from admin_console.core.errors import FormValidationError
from admin_console.core.logging import log_event
from admin_console.models.common import MutationResult, Page, build_page
from admin_console.models.transcription_plan import TranscriptionPlan, TranscriptionPlanForm
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_meta, unwrap_object, unwrap_pagination

SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def generate_slug(name: str) -> str:
    """URL-safe slug from a plan name: "Básico Plus" -> "basico-plus"."""
    text = unicodedata.normalize("NFD", name.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def with_defaults(form: TranscriptionPlanForm, settings_obj: Optional[Settings] = None) -> TranscriptionPlanForm:
    """Fill in what the create form pre-populates."""
    cfg = settings_obj or settings
    updates = {}
    if not form.slug and form.name:
        updates["slug"] = generate_slug(form.name)
    if form.stt_model is None:
        updates["stt_model"] = cfg.TRANSCRIPTION_DEFAULT_STT_MODEL
    if form.cost_per_minute_usd is None:
        updates["cost_per_minute_usd"] = cfg.TRANSCRIPTION_DEFAULT_COST_PER_MINUTE
    if form.monthly_minutes_limit is None:
        updates["monthly_minutes_limit"] = cfg.TRANSCRIPTION_BASIC_MONTHLY_LIMIT
    if form.active is None:
        updates["active"] = True
    return form.model_copy(update=updates) if updates else form


def validate_plan(form: TranscriptionPlanForm, *, partial: bool = False, settings_obj: Optional[Settings] = None) -> Dict[str, str]:
    """Field errors for a plan form. With `partial`, only fields that are set are checked."""
    cfg = settings_obj or settings
    basic_limit = cfg.TRANSCRIPTION_BASIC_MONTHLY_LIMIT
    errors: Dict[str, str] = {}

    if not partial or form.name is not None:
        if not (form.name or "").strip():
            errors["name"] = "Name is required"

    if not partial or form.slug is not None:
        if not form.slug:
            errors["slug"] = "Slug is required (generated from name)"
        elif not SLUG_RE.match(form.slug):
            errors["slug"] = "Slug must contain only lowercase letters, numbers, and hyphens"

    if form.monthly_minutes_limit is not None and form.monthly_minutes_limit < basic_limit:
        errors["monthly_minutes_limit"] = f"Monthly limit cannot be below {basic_limit} minutes"

    if form.cost_per_minute_usd is not None and form.cost_per_minute_usd <= 0:
        errors["cost_per_minute_usd"] = "Cost per minute must be greater than 0"
    return errors


async def list_plans(
    api: UpstreamClient,
    *,
    active: Optional[bool] = None,
    limit: int = 20,
    offset: int = 0,
) -> Page:
    payload = await api.get("/transcription-plans", params={"active": active, "limit": limit, "offset": offset})
    plans: List[TranscriptionPlan] = [TranscriptionPlan.model_validate(item) for item in unwrap(payload, "plans")]
    return build_page(plans, unwrap_pagination(payload), limit=limit, offset=offset)


async def get_plan(api: UpstreamClient, plan_id: int) -> TranscriptionPlan:
    payload = await api.get(f"/transcription-plans/{plan_id}")
    return TranscriptionPlan.model_validate(unwrap_object(payload, "plan"))


async def create_plan(api: UpstreamClient, form: TranscriptionPlanForm) -> TranscriptionPlan:
    form = with_defaults(form)
    errors = validate_plan(form)
    if errors:
        raise FormValidationError(errors)
    payload = await api.post("/transcription-plans", json=form.to_upstream())
    plan = TranscriptionPlan.model_validate(unwrap_object(payload, "plan"))
    log_event("info", "transcription_plan.created", event_type="transcription_plan", extra={"plan_id": plan.id, "slug": plan.slug})
    return plan


async def update_plan(api: UpstreamClient, plan_id: int, form: TranscriptionPlanForm) -> TranscriptionPlan:
    errors = validate_plan(form, partial=True)
    if errors:
        raise FormValidationError(errors)
    payload = await api.put(f"/transcription-plans/{plan_id}", json=form.to_upstream())
    log_event("info", "transcription_plan.updated", event_type="transcription_plan", extra={"plan_id": plan_id})
    return TranscriptionPlan.model_validate(unwrap_object(payload, "plan"))


async def delete_plan(api: UpstreamClient, plan_id: int) -> MutationResult:
    payload = await api.delete(f"/transcription-plans/{plan_id}")
    log_event("info", "transcription_plan.deleted", event_type="transcription_plan", extra={"plan_id": plan_id})
    return MutationResult.model_validate(unwrap_meta(payload))
