from fastapi import APIRouter, Query

from app.api import deps
from app.schemas.dashboard import DashboardData
from app.schemas.response import APIResponse
from app.services.dashboard import get_dashboard

router = APIRouter()

@router.get("/", response_model=APIResponse[DashboardData])
async def read_dashboard(
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    recent: int = Query(5, ge=1, le=20, description="Number of recent items per list"),
):
    """
    Totals, group fill rates, monthly collections and recent activity.
    """
    data = await get_dashboard(session, recent)
    return APIResponse(message="Dashboard data retrieved", data=data)
