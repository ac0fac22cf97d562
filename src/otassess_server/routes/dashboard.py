"""Dashboard endpoint: one round trip for the home screen."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_core.context import RequestContext
from otassess_core.dashboard import DashboardAggregator
from otassess_core.models import DashboardStats

from otassess_server.dependencies import get_dashboard, get_db, get_request_context

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    dashboard: DashboardAggregator = Depends(get_dashboard),
) -> DashboardStats:
    """Counts, revenue, upcoming work and alerts for the current user."""
    return await dashboard.stats(db, ctx)
