# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Personal and family dashboard."""
from fastapi import APIRouter, Depends, Path

from clubhours.core.dependencies import get_dashboard_service
from clubhours.core.security import get_current_member_id
from clubhours.schemas import DashboardResponse
from clubhours.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/dashboard/{year}", response_model=DashboardResponse)
async def get_dashboard(
    year: int = Path(..., ge=1900, le=2999),
    member_id: str = Depends(get_current_member_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.build_dashboard(member_id, year)
