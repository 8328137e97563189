"""Console landing page."""

from fastapi import APIRouter, Depends

from admin_console.core.auth import get_upstream
from admin_console.features.dashboard import service as dashboard
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/dashboard")


@router.get("")
async def platform_overview(api: UpstreamClient = Depends(get_upstream)):
    overview = await dashboard.get_platform_overview(api)
    return {
        **overview.model_dump(mode="json"),
        "cards": dashboard.overview_cards(overview),
    }
