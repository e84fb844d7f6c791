"""Project, requirement and assignment schemas."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator

from workforce.models.skill import ExperienceBand
from workforce.schemas.base import CamelModel, UtcDatetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _in_90_days() -> datetime:
    return _now() + timedelta(days=90)


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=300)
    code: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    start_date: UtcDatetime = Field(default_factory=_now)
    end_date: UtcDatetime = Field(default_factory=_in_90_days, validate_default=True)

    @field_validator("end_date")
    @classmethod
    def ends_after_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_date")
        if start is not None and value < start:
            raise ValueError("End date must be on or after the start date")
        return value


class ProjectOut(CamelModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None
    start_date: UtcDatetime
    end_date: UtcDatetime
    created_by: int
    created_at: Optional[UtcDatetime] = None


class ProjectSummary(ProjectOut):
    requirements_count: int = 0
    assignments_count: int = 0
    fulfillment_percentage: int = 0


class RequirementIn(CamelModel):
    skill_id: int
    experience_band: ExperienceBand
    people_needed: int = Field(ge=1)
    hours_per_month: int = Field(ge=1)


class RequirementOut(CamelModel):
    id: int
    project_id: int
    skill_id: int
    experience_band: ExperienceBand
    people_needed: int
    hours_per_month: int
    skill_name: Optional[str] = None
    assigned_count: Optional[int] = None
    fulfillment_percentage: Optional[int] = None


class AssignmentIn(CamelModel):
    employee_id: int
    skill_id: int
    experience_band: ExperienceBand
    assigned_hours_per_month: int = Field(ge=1)


class AssignmentOut(CamelModel):
    id: int
    project_id: int
    employee_id: int
    skill_id: int
    experience_band: ExperienceBand
    assigned_hours_per_month: int
    assigned_by: int
    assigned_at: Optional[UtcDatetime] = None
    skill_name: Optional[str] = None
    employee_name: Optional[str] = None
    project_name: Optional[str] = None
    project_code: Optional[str] = None


class ProjectDetail(ProjectSummary):
    created_by_name: str
    created_by_email: str
    requirements: List[RequirementOut] = []
    assignments: List[AssignmentOut] = []
