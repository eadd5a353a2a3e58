"""Dashboard statistics endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import RequestContext, get_db, require_org_context
from services.dashboard_service import DashboardService

router = APIRouter(tags=["dashboard"])


@router.get("/stats")
async def get_stats(
    context: RequestContext = Depends(require_org_context),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Agent, workflow and usage counters for the caller's organization.
    """
    return await DashboardService(db).stats(context)
