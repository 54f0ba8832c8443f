# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Work-hour entries of the authenticated member."""
from fastapi import APIRouter, Depends

from clubhours.core.dependencies import get_work_hour_service
from clubhours.core.security import get_current_member_id
from clubhours.schemas import WorkHourCommandResponse, WorkHourSubmission
from clubhours.services.work_hour_service import WorkHourService

router = APIRouter(prefix="/api", tags=["Work hours"])


@router.get("/arbeitsstunden/{entry_id}")
async def get_work_hour(entry_id: str,
                        member_id: str = Depends(get_current_member_id),
                        service: WorkHourService = Depends(get_work_hour_service)):
    data = await service.get_entry(member_id, entry_id)
    return {"success": True, "data": data}


@router.post("/arbeitsstunden", response_model=WorkHourCommandResponse)
async def create_work_hour(body: WorkHourSubmission,
                           member_id: str = Depends(get_current_member_id),
                           service: WorkHourService = Depends(get_work_hour_service)):
    data = await service.create_entry(member_id, body)
    return WorkHourCommandResponse(message="Work hour entry created successfully", data=data)


@router.put("/arbeitsstunden/{entry_id}", response_model=WorkHourCommandResponse)
async def update_work_hour(entry_id: str, body: WorkHourSubmission,
                           member_id: str = Depends(get_current_member_id),
                           service: WorkHourService = Depends(get_work_hour_service)):
    data = await service.update_entry(member_id, entry_id, body)
    return WorkHourCommandResponse(message="Work hour entry updated successfully", data=data)


@router.delete("/arbeitsstunden/{entry_id}")
async def delete_work_hour(entry_id: str,
                           member_id: str = Depends(get_current_member_id),
                           service: WorkHourService = Depends(get_work_hour_service)):
    await service.delete_entry(member_id, entry_id)
    return {"success": True, "message": "Work hour deleted successfully"}
