"""Timesheet schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from workforce.config import settings
from workforce.schemas.base import CamelModel, UtcDatetime


class TimesheetIn(CamelModel):
    project_id: int
    work_date: date = Field(alias="date")
    hours: float = Field(ge=0.5)

    @field_validator("hours")
    @classmethod
    def within_daily_limit(cls, value: float) -> float:
        # a single entry can never exceed what the whole day allows
        if value > settings.DAILY_HOUR_LIMIT:
            raise ValueError(f"Hours cannot exceed {settings.DAILY_HOUR_LIMIT:g} per day")
        return value

    @field_validator("work_date", mode="before")
    @classmethod
    def calendar_day(cls, value):
        """Accept a date, a datetime or an ISO timestamp and keep only the day."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value


class TimesheetOut(CamelModel):
    id: int
    employee_id: int
    project_id: int
    work_date: date = Field(alias="date")
    hours: float
    created_at: Optional[UtcDatetime] = None
    project_name: Optional[str] = None
    project_code: Optional[str] = None
