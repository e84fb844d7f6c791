"""
Employees router — per-employee skills, assignments and timesheets.

Reads are open to the employee themself and to roles that can view
employee records; rating a skill is strictly self-service.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from workforce.models.user import User
from workforce.permissions import Permission, ensure_self_or, require
from workforce.schemas.project import AssignmentOut
from workforce.schemas.skill import SkillMappingIn, SkillMappingOut
from workforce.schemas.timesheet import TimesheetOut
from workforce.schemas.user import EmployeeOut
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api/employees", tags=["employees"])


def _mapping_out(mapping, skill) -> SkillMappingOut:
    return SkillMappingOut.model_validate(mapping).model_copy(
        update={"skill_name": skill.name, "skill_category": skill.category}
    )


@router.get("", response_model=List[EmployeeOut])
async def list_employees(
    current_user: User = Depends(require(Permission.VIEW_EMPLOYEE_RECORDS)),
    store: WorkforceStore = Depends(get_store),
):
    """Employee-role users with how many skills they rated and whether they are on the bench."""
    overview = await store.employee_overview()
    return [
        EmployeeOut.model_validate(employee).model_copy(update={
            "skills_count": skills_count,
            "assignments_count": assignments_count,
            "on_bench": on_bench,
        })
        for employee, skills_count, assignments_count, on_bench in overview
    ]


@router.get("/{employee_id}/skills", response_model=List[SkillMappingOut])
async def list_employee_skills(
    employee_id: int,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    ensure_self_or(current_user, employee_id, Permission.VIEW_EMPLOYEE_RECORDS)
    return [_mapping_out(m, s) for m, s in await store.list_skill_mappings(employee_id)]


@router.post("/{employee_id}/skills", response_model=SkillMappingOut, status_code=status.HTTP_201_CREATED)
async def rate_skill(
    employee_id: int,
    payload: SkillMappingIn,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """Create or update the caller's rating for a skill at an experience band."""
    if current_user.id != employee_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    mapping, skill = await store.upsert_skill_mapping(
        employee_id=employee_id,
        skill_id=payload.skill_id,
        experience_band=payload.experience_band,
        rating=payload.rating,
        years_of_experience=payload.years_of_experience,
    )
    return _mapping_out(mapping, skill)


@router.get("/{employee_id}/assignments", response_model=List[AssignmentOut])
async def list_employee_assignments(
    employee_id: int,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    ensure_self_or(current_user, employee_id, Permission.VIEW_EMPLOYEE_RECORDS)
    rows = await store.list_assignments(employee_id=employee_id)
    return [
        AssignmentOut.model_validate(a).model_copy(update={
            "skill_name": skill.name,
            "employee_name": employee.name,
            "project_name": project.name,
            "project_code": project.code,
        })
        for a, skill, employee, project in rows
    ]


@router.get("/{employee_id}/timesheets", response_model=List[TimesheetOut])
async def list_employee_timesheets(
    employee_id: int,
    work_date: Optional[date] = Query(default=None, alias="date"),
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """Timesheet entries, newest day first; ``?date=`` narrows to one calendar day."""
    ensure_self_or(current_user, employee_id, Permission.VIEW_EMPLOYEE_RECORDS)
    rows = await store.list_timesheets(employee_id, work_date=work_date)
    return [
        TimesheetOut.model_validate(t).model_copy(
            update={"project_name": project.name, "project_code": project.code}
        )
        for t, project in rows
    ]
