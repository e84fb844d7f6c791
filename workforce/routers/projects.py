"""Projects router – projects, their staffing requirements and assignments."""

from typing import List

from fastapi import APIRouter, Depends, status

from workforce.models.user import User
from workforce.permissions import Permission, require
from workforce.schemas.project import (
    AssignmentIn,
    AssignmentOut,
    ProjectCreate,
    ProjectDetail,
    ProjectOut,
    ProjectSummary,
    RequirementIn,
    RequirementOut,
)
from workforce.services import staffing
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=List[ProjectSummary])
async def list_projects(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """All projects with requirement/assignment counts and fulfillment %."""
    return [
        ProjectSummary.model_validate(project).model_copy(update={
            "requirements_count": requirements_count,
            "assignments_count": assignments_count,
            "fulfillment_percentage": staffing.project_fulfillment(requirements_count, assignments_count),
        })
        for project, requirements_count, assignments_count in await store.list_projects()
    ]


@router.get("/{project_id}", response_model=ProjectDetail)
async def project_detail(
    project_id: int,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """A project with per-requirement fulfillment and the people assigned to it."""
    project = await store.get_project(project_id)
    creator = await store.get_user_or_none(project.created_by)
    requirement_rows = await store.list_requirements(project_id)
    assignment_rows = await store.list_assignments(project_id=project_id)
    assignments = [row[0] for row in assignment_rows]

    requirements = []
    for requirement, skill in requirement_rows:
        assigned_count, fulfillment = staffing.requirement_fulfillment(requirement, assignments)
        requirements.append(RequirementOut.model_validate(requirement).model_copy(update={
            "skill_name": skill.name,
            "assigned_count": assigned_count,
            "fulfillment_percentage": fulfillment,
        }))

    return ProjectDetail(
        **ProjectOut.model_validate(project).model_dump(),
        created_by_name=creator.name if creator else "Admin",
        created_by_email=creator.email if creator else "Unknown",
        requirements_count=len(requirement_rows),
        assignments_count=len(assignment_rows),
        fulfillment_percentage=staffing.project_fulfillment(len(requirement_rows), len(assignment_rows)),
        requirements=requirements,
        assignments=[
            AssignmentOut.model_validate(a).model_copy(update={
                "skill_name": skill.name,
                "employee_name": employee.name,
            })
            for a, skill, employee, _ in assignment_rows
        ],
    )


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    current_user: User = Depends(require(Permission.MANAGE_PROJECTS)),
    store: WorkforceStore = Depends(get_store),
):
    return await store.create_project(
        name=payload.name,
        code=payload.code,
        description=payload.description,
        start_date=payload.start_date,
        end_date=payload.end_date,
        actor_id=current_user.id,
    )


@router.post("/{project_id}/requirements", response_model=RequirementOut, status_code=status.HTTP_201_CREATED)
async def add_requirement(
    project_id: int,
    payload: RequirementIn,
    current_user: User = Depends(require(Permission.MANAGE_PROJECTS)),
    store: WorkforceStore = Depends(get_store),
):
    requirement, skill = await store.add_requirement(
        project_id=project_id,
        skill_id=payload.skill_id,
        experience_band=payload.experience_band,
        people_needed=payload.people_needed,
        hours_per_month=payload.hours_per_month,
        actor_id=current_user.id,
    )
    return RequirementOut.model_validate(requirement).model_copy(update={"skill_name": skill.name})


@router.post("/{project_id}/assignments", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
async def assign_employee(
    project_id: int,
    payload: AssignmentIn,
    current_user: User = Depends(require(Permission.MANAGE_ASSIGNMENTS)),
    store: WorkforceStore = Depends(get_store),
):
    assignment, skill, employee, project = await store.assign_employee(
        project_id=project_id,
        employee_id=payload.employee_id,
        skill_id=payload.skill_id,
        experience_band=payload.experience_band,
        assigned_hours_per_month=payload.assigned_hours_per_month,
        actor_id=current_user.id,
    )
    return AssignmentOut.model_validate(assignment).model_copy(update={
        "skill_name": skill.name,
        "employee_name": employee.name,
        "project_name": project.name,
        "project_code": project.code,
    })
