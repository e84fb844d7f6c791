"""Dashboard schemas — KPI counters, skill distribution, recruitment needs, activity feed."""

from typing import Dict, Optional

from workforce.schemas.base import CamelModel, UtcDatetime


class DashboardMetrics(CamelModel):
    active_projects: int
    bench_employees: int
    pipeline_projects: int
    skill_gaps: int


class SkillDistribution(CamelModel):
    skill_id: int
    skill_name: str
    category: str
    bands: Dict[str, int]
    beginner: int
    intermediate: int
    expert: int
    total: int


class RecruitmentNeed(CamelModel):
    skill_id: int
    skill_name: str
    experience_band: str
    needed: int
    available: int
    gap: int
    fulfillment_percentage: int
    priority: str


class ActivityOut(CamelModel):
    id: int
    type: str
    description: str
    user_id: Optional[int] = None
    related_id: Optional[int] = None
    created_at: Optional[UtcDatetime] = None
    user_name: str = "System"
