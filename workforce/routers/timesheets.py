"""Timesheets router – the signed-in employee logs hours against a project."""

from fastapi import APIRouter, Depends, status

from workforce.models.user import User
from workforce.permissions import require
from workforce.schemas.timesheet import TimesheetIn, TimesheetOut
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api/timesheets", tags=["timesheets"])


@router.post("", response_model=TimesheetOut, status_code=status.HTTP_201_CREATED)
async def log_hours(
    payload: TimesheetIn,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """
    Record hours for one calendar day.

    The caller must be assigned to the project, and the day's total across
    all projects may not go above the daily limit.
    """
    timesheet, project = await store.log_timesheet(
        employee_id=current_user.id,
        project_id=payload.project_id,
        work_date=payload.work_date,
        hours=payload.hours,
    )
    return TimesheetOut.model_validate(timesheet).model_copy(
        update={"project_name": project.name, "project_code": project.code}
    )
