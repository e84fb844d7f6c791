"""
Dashboard router — live aggregates over the whole workforce.

Endpoints:
    GET /api/dashboard/metrics              → KPI counters
    GET /api/dashboard/skill-distribution   → per-skill band and rating histogram
    GET /api/dashboard/recruitment-needs    → (skill, band) pairs short of people
    GET /api/activities                     → audit feed, newest first
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from workforce.models.user import User
from workforce.permissions import require
from workforce.schemas.dashboard import ActivityOut, DashboardMetrics, RecruitmentNeed, SkillDistribution
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/metrics", response_model=DashboardMetrics)
async def metrics(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return DashboardMetrics(**await store.dashboard_metrics())


@router.get("/dashboard/skill-distribution", response_model=List[SkillDistribution])
async def skill_distribution(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return [SkillDistribution(**row) for row in await store.skill_distribution()]


@router.get("/dashboard/recruitment-needs", response_model=List[RecruitmentNeed])
async def recruitment_needs(
    limit: Optional[int] = Query(default=None, ge=1),
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """Shortfalls ordered high → low priority, widest gap first within a priority."""
    needs = await store.recruitment_needs()
    if limit is not None:
        needs = needs[:limit]
    return [RecruitmentNeed(**row) for row in needs]


@router.get("/activities", response_model=List[ActivityOut])
async def activities(
    limit: Optional[int] = Query(default=None, ge=1),
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return [
        ActivityOut.model_validate(activity).model_copy(
            update={"user_name": user_name or "System"}
        )
        for activity, user_name in await store.list_activities(limit)
    ]
