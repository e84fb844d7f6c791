"""
Demand/supply reconciliation for the dashboard.

Everything here is a pure function over already-loaded ORM rows, so the
numbers can be checked without a database:

* ``skill_distribution``   – employees per skill by experience band and rating
* ``recruitment_needs``    – gap, fulfillment % and priority per (skill, band)
* ``dashboard_metrics``    – the four KPI counters
* ``project_fulfillment`` / ``requirement_fulfillment`` – staffing progress
"""

import math
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from workforce.models.pipeline import PipelineSkillDemand, PipelineStatus, ProjectPipeline
from workforce.models.project import Project, ProjectAssignment, ProjectRequirement
from workforce.models.skill import ExperienceBand, Skill, SkillMapping, SkillRating
from workforce.models.user import Role, User

BAND_ORDER: List[str] = [band.value for band in ExperienceBand]
RATING_ORDER: List[str] = [rating.value for rating in SkillRating]

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

OPEN_PIPELINE_STATUSES = (PipelineStatus.PROSPECT.value, PipelineStatus.NEGOTIATION.value)

DemandKey = Tuple[int, str]


def _value(item) -> str:
    """Plain string for an enum member or a raw string column."""
    return getattr(item, "value", item)


def as_utc(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def round_percentage(part: float, whole: float) -> int:
    """``part / whole`` as a whole percentage, halves rounded up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


# ═══════════════════════════════════════════════════════════════
#  Skill distribution
# ═══════════════════════════════════════════════════════════════

def skill_distribution(skills: Sequence[Skill], mappings: Iterable[SkillMapping]) -> List[dict]:
    """
    Count mappings per skill on two independent axes: experience band and
    rating. Skills without any mapping are still listed, with zero counts,
    in the order ``skills`` is given.
    """
    by_skill: Dict[int, List[SkillMapping]] = defaultdict(list)
    for mapping in mappings:
        by_skill[mapping.skill_id].append(mapping)

    distribution = []
    for skill in skills:
        bands = {band: 0 for band in BAND_ORDER}
        ratings = {rating: 0 for rating in RATING_ORDER}
        skill_mappings = by_skill.get(skill.id, [])
        for mapping in skill_mappings:
            bands[_value(mapping.experience_band)] += 1
            ratings[_value(mapping.rating)] += 1

        distribution.append({
            "skill_id": skill.id,
            "skill_name": skill.name,
            "category": skill.category,
            "bands": bands,
            "beginner": ratings[SkillRating.BEGINNER.value],
            "intermediate": ratings[SkillRating.INTERMEDIATE.value],
            "expert": ratings[SkillRating.EXPERT.value],
            "total": len(skill_mappings),
        })
    return distribution


# ═══════════════════════════════════════════════════════════════
#  Recruitment needs
# ═══════════════════════════════════════════════════════════════

def demand_gap(needed: int, available: int) -> Tuple[int, int]:
    """Return ``(gap, fulfillment_percentage)`` for one demand."""
    gap = max(0, needed - available)
    return gap, round_percentage(available, needed)


def classify_priority(fulfillment_percentage: int, high_below: int = 50, medium_below: int = 75) -> str:
    if fulfillment_percentage < high_below:
        return "high"
    if fulfillment_percentage < medium_below:
        return "medium"
    return "low"


def aggregate_demand(
    projects: Iterable[Project],
    requirements: Iterable[ProjectRequirement],
    pipelines: Iterable[ProjectPipeline],
    pipeline_demands: Iterable[PipelineSkillDemand],
    now: Optional[datetime] = None,
    pipeline_statuses: Sequence[str] = OPEN_PIPELINE_STATUSES,
) -> Dict[DemandKey, int]:
    """
    Sum people needed per (skill, band) across requirements of projects that
    have not ended yet and demands of pipelines still in play.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    active_projects = {p.id for p in projects if as_utc(p.end_date) >= now}
    open_pipelines = {p.id for p in pipelines if _value(p.status) in pipeline_statuses}

    demand: Dict[DemandKey, int] = defaultdict(int)
    for req in requirements:
        if req.project_id in active_projects:
            demand[(req.skill_id, _value(req.experience_band))] += req.people_needed
    for item in pipeline_demands:
        if item.pipeline_id in open_pipelines:
            demand[(item.skill_id, _value(item.experience_band))] += item.people_needed
    return dict(demand)


def available_supply(mappings: Iterable[SkillMapping]) -> Dict[DemandKey, int]:
    """Distinct employees holding each (skill, band)."""
    holders: Dict[DemandKey, Set[int]] = defaultdict(set)
    for mapping in mappings:
        holders[(mapping.skill_id, _value(mapping.experience_band))].add(mapping.employee_id)
    return {key: len(employees) for key, employees in holders.items()}


def sort_needs(needs: Iterable[dict]) -> List[dict]:
    """High before medium before low; bigger gaps first within a priority."""
    return sorted(
        needs,
        key=lambda n: (
            PRIORITY_ORDER.get(n["priority"], len(PRIORITY_ORDER)),
            -n["gap"],
            n["skill_name"],
            BAND_ORDER.index(n["experience_band"]) if n["experience_band"] in BAND_ORDER else len(BAND_ORDER),
        ),
    )


def recruitment_needs(
    skills: Iterable[Skill],
    mappings: Iterable[SkillMapping],
    demand: Dict[DemandKey, int],
    high_below: int = 50,
    medium_below: int = 75,
) -> List[dict]:
    """
    One row per (skill, band) whose demand is not covered by the employees
    holding that skill at that band. Fully covered combinations are left out.
    """
    names = {skill.id: skill.name for skill in skills}
    supply = available_supply(mappings)

    needs = []
    for (skill_id, band), needed in demand.items():
        available = supply.get((skill_id, band), 0)
        gap, fulfillment = demand_gap(needed, available)
        if gap <= 0:
            continue
        needs.append({
            "skill_id": skill_id,
            "skill_name": names.get(skill_id, "Unknown"),
            "experience_band": band,
            "needed": needed,
            "available": available,
            "gap": gap,
            "fulfillment_percentage": fulfillment,
            "priority": classify_priority(fulfillment, high_below, medium_below),
        })
    return sort_needs(needs)


# ═══════════════════════════════════════════════════════════════
#  Dashboard KPIs
# ═══════════════════════════════════════════════════════════════

def bench_employee_ids(users: Iterable[User], assignments: Iterable[ProjectAssignment]) -> Set[int]:
    """Employee-role users without any project assignment."""
    assigned = {a.employee_id for a in assignments}
    return {u.id for u in users if _value(u.role) == Role.EMPLOYEE.value and u.id not in assigned}


def dashboard_metrics(
    projects: Iterable[Project],
    users: Iterable[User],
    assignments: Iterable[ProjectAssignment],
    pipelines: Iterable[ProjectPipeline],
    skill_gaps: int,
    now: Optional[datetime] = None,
) -> dict:
    now = as_utc(now or datetime.now(timezone.utc))
    return {
        "active_projects": sum(1 for p in projects if as_utc(p.end_date) >= now),
        "bench_employees": len(bench_employee_ids(users, assignments)),
        "pipeline_projects": sum(
            1 for p in pipelines if _value(p.status) in OPEN_PIPELINE_STATUSES
        ),
        "skill_gaps": skill_gaps,
    }


# ═══════════════════════════════════════════════════════════════
#  Project fulfillment
# ═══════════════════════════════════════════════════════════════

def project_fulfillment(requirements_count: int, assignments_count: int) -> int:
    """Assignments per requirement row as a percentage; not capped at 100."""
    return round_percentage(assignments_count, requirements_count)


def requirement_fulfillment(
    requirement: ProjectRequirement,
    assignments: Iterable[ProjectAssignment],
) -> Tuple[int, int]:
    """
    Return ``(assigned_count, fulfillment_percentage)`` for one requirement,
    counting the project's assignments with the same skill and band.
    """
    band = _value(requirement.experience_band)
    assigned = sum(
        1
        for a in assignments
        if a.project_id == requirement.project_id
        and a.skill_id == requirement.skill_id
        and _value(a.experience_band) == band
    )
    return assigned, round_percentage(assigned, requirement.people_needed)
