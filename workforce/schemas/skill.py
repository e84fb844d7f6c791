"""Skill, category and skill-mapping schemas."""

from typing import Optional

from pydantic import Field

from workforce.models.skill import ExperienceBand, SkillRating
from workforce.schemas.base import CamelModel, UtcDatetime


class SkillCreate(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    category: str = Field(min_length=1, max_length=100)


class SkillUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)


class SkillOut(CamelModel):
    id: int
    name: str
    category: str


class CategoryIn(CamelModel):
    name: str = Field(min_length=2, max_length=100)


class CategoryOut(CamelModel):
    id: int
    name: str


class SkillMappingIn(CamelModel):
    skill_id: int
    experience_band: ExperienceBand
    rating: SkillRating
    years_of_experience: float = Field(ge=0, le=50)


class SkillMappingOut(CamelModel):
    id: int
    employee_id: int
    skill_id: int
    experience_band: ExperienceBand
    rating: SkillRating
    years_of_experience: float
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
    skill_name: Optional[str] = None
    skill_category: Optional[str] = None
