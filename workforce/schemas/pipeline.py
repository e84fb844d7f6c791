"""Sales pipeline schemas."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator

from workforce.models.pipeline import PipelineStatus
from workforce.models.skill import ExperienceBand
from workforce.schemas.base import CamelModel, UtcDatetime


def _in_30_days() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=30)


def _in_120_days() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=120)


class PipelineCreate(CamelModel):
    name: str = Field(min_length=1, max_length=300)
    expected_start_date: UtcDatetime = Field(default_factory=_in_30_days)
    expected_end_date: UtcDatetime = Field(default_factory=_in_120_days, validate_default=True)
    status: PipelineStatus = PipelineStatus.PROSPECT

    @field_validator("expected_start_date")
    @classmethod
    def not_in_past(cls, value: datetime) -> datetime:
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        if value < today:
            raise ValueError("Start date cannot be in the past")
        return value

    @field_validator("expected_end_date")
    @classmethod
    def ends_after_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("expected_start_date")
        if start is not None and value < start:
            raise ValueError("End date must be after start date")
        return value


class DemandIn(CamelModel):
    skill_id: int
    experience_band: ExperienceBand
    people_needed: int = Field(ge=1)


class DemandOut(CamelModel):
    id: int
    pipeline_id: int
    skill_id: int
    experience_band: ExperienceBand
    people_needed: int
    skill_name: Optional[str] = None


class PipelineOut(CamelModel):
    id: int
    name: str
    expected_start_date: UtcDatetime
    expected_end_date: UtcDatetime
    status: PipelineStatus
    created_by: int
    created_at: Optional[UtcDatetime] = None
    demands: List[DemandOut] = []
