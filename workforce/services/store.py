"""
Repository over the async session.

Handlers talk to ``WorkforceStore`` only; it owns every query, enforces the
business rules that need to read other rows first, appends to the activity
log, and commits. Lookups of ids taken from the URL raise ``NotFoundError``;
ids referenced from a request body raise ``BusinessRuleError``.
"""

import asyncio
import logging
import weakref
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from fastapi import Depends
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.config import settings
from workforce.database import Base, async_session, create_tables, get_db
from workforce.errors import BusinessRuleError, NotFoundError
from workforce.models.activity import Activity
from workforce.models.pipeline import PipelineSkillDemand, ProjectPipeline
from workforce.models.project import Project, ProjectAssignment, ProjectRequirement
from workforce.models.skill import Skill, SkillCategory, SkillMapping
from workforce.models.timesheet import Timesheet
from workforce.models.user import Role, User
from workforce.services import staffing

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# One lock per (employee, day) so the daily-cap check and the insert it
# guards cannot interleave with another submission for the same day.
_DAY_LOCKS: "weakref.WeakValueDictionary[Tuple[int, date], asyncio.Lock]" = weakref.WeakValueDictionary()


def _day_lock(employee_id: int, work_date: date) -> asyncio.Lock:
    key = (employee_id, work_date)
    lock = _DAY_LOCKS.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _DAY_LOCKS[key] = lock
    return lock


class WorkforceStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Plumbing ─────────────────────────────────────────────

    async def _get(self, model: Type[ModelT], ident: int) -> Optional[ModelT]:
        return await self.db.get(model, ident)

    async def _get_or_404(self, model: Type[ModelT], ident: int, label: str) -> ModelT:
        instance = await self._get(model, ident)
        if instance is None:
            raise NotFoundError(f"{label} not found")
        return instance

    async def _get_or_400(self, model: Type[ModelT], ident: int, label: str) -> ModelT:
        instance = await self._get(model, ident)
        if instance is None:
            raise BusinessRuleError(f"{label} not found")
        return instance

    async def _count(self, model: Type[Base], *criteria) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*criteria))
        return result.scalar() or 0

    async def _flush_unique(self, message: str) -> None:
        """Flush pending rows; a unique-index violation becomes a 400."""
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise BusinessRuleError(message)

    async def _commit(self, *instances) -> None:
        await self.db.commit()
        for instance in instances:
            await self.db.refresh(instance)

    def log_activity(
        self,
        type: str,
        description: str,
        user_id: Optional[int] = None,
        related_id: Optional[int] = None,
    ) -> None:
        """Queue an audit entry in the current transaction."""
        self.db.add(Activity(
            type=type,
            description=description,
            user_id=user_id,
            related_id=related_id,
        ))

    # ── Users ────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> User:
        return await self._get_or_404(User, user_id, "User")

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def list_users(self, role: Optional[Role] = None) -> List[User]:
        query = select(User).order_by(User.id)
        if role is not None:
            query = query.where(User.role == role)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        email: str,
        role: Role,
        actor_id: Optional[int] = None,
    ) -> User:
        user = User(
            username=username,
            password_hash=password_hash,
            name=name,
            email=email,
            role=role,
        )
        self.db.add(user)
        await self._flush_unique("Username or email already exists")

        if actor_id is None:
            self.log_activity("user_registered", f"New user registered: {user.name}", user.id)
        else:
            self.log_activity("user_created", f"New user created: {user.name}", actor_id, user.id)
        await self._commit(user)
        logger.info("Created user %s (%s) with role %s", user.id, user.username, user.role.value)
        return user

    async def update_user(self, user_id: int, actor_id: int, **changes) -> User:
        user = await self.get_user(user_id)
        for field, value in changes.items():
            setattr(user, field, value)
        await self._flush_unique("Username or email already exists")
        self.log_activity("user_updated", f"User {user.name} was updated", actor_id, user.id)
        await self._commit(user)
        return user

    async def delete_user(self, user_id: int, actor_id: int) -> None:
        user = await self.get_user(user_id)
        if user.id == actor_id:
            raise BusinessRuleError("You cannot delete your own account")

        references = (
            await self._count(SkillMapping, SkillMapping.employee_id == user_id)
            + await self._count(ProjectAssignment, ProjectAssignment.employee_id == user_id)
            + await self._count(ProjectAssignment, ProjectAssignment.assigned_by == user_id)
            + await self._count(Timesheet, Timesheet.employee_id == user_id)
            + await self._count(Project, Project.created_by == user_id)
            + await self._count(ProjectPipeline, ProjectPipeline.created_by == user_id)
        )
        if references:
            raise BusinessRuleError(
                "Cannot delete a user with skills, assignments, timesheets or projects on record"
            )

        name = user.name
        await self.db.delete(user)
        self.log_activity("user_deleted", f"User deleted: {name}", actor_id, user_id)
        await self.db.commit()
        logger.info("Deleted user %s", user_id)

    # ── Skills ───────────────────────────────────────────────

    async def list_skills(self) -> List[Skill]:
        result = await self.db.execute(select(Skill).order_by(Skill.id))
        return list(result.scalars().all())

    async def get_skill(self, skill_id: int) -> Skill:
        return await self._get_or_404(Skill, skill_id, "Skill")

    async def create_skill(self, name: str, category: str, actor_id: int) -> Skill:
        skill = Skill(name=name, category=category)
        self.db.add(skill)
        await self._flush_unique("Skill already exists")
        self.log_activity("skill_created", f"New skill created: {skill.name}", actor_id, skill.id)
        await self._commit(skill)
        return skill

    async def update_skill(self, skill_id: int, actor_id: int, **changes) -> Skill:
        skill = await self.get_skill(skill_id)
        for field, value in changes.items():
            setattr(skill, field, value)
        await self._flush_unique("Skill already exists")
        self.log_activity("skill_updated", f'Skill "{skill.name}" was updated', actor_id, skill.id)
        await self._commit(skill)
        return skill

    async def delete_skill(self, skill_id: int, actor_id: int) -> None:
        skill = await self.get_skill(skill_id)

        if await self._count(SkillMapping, SkillMapping.skill_id == skill_id):
            raise BusinessRuleError(
                "Cannot delete skill that's in use by employees. "
                "Remove all employee skill ratings first."
            )
        staffing_refs = (
            await self._count(ProjectRequirement, ProjectRequirement.skill_id == skill_id)
            + await self._count(ProjectAssignment, ProjectAssignment.skill_id == skill_id)
            + await self._count(PipelineSkillDemand, PipelineSkillDemand.skill_id == skill_id)
        )
        if staffing_refs:
            raise BusinessRuleError(
                "Cannot delete skill that's referenced by project requirements, "
                "assignments or pipeline demands."
            )

        name = skill.name
        await self.db.delete(skill)
        self.log_activity("skill_deleted", f'Skill "{name}" was deleted', actor_id, skill_id)
        await self.db.commit()
        logger.info("Deleted skill %s (%s)", skill_id, name)

    # ── Skill categories ─────────────────────────────────────

    async def list_categories(self) -> List[SkillCategory]:
        result = await self.db.execute(select(SkillCategory).order_by(SkillCategory.id))
        return list(result.scalars().all())

    async def create_category(self, name: str, actor_id: int) -> SkillCategory:
        category = SkillCategory(name=name)
        self.db.add(category)
        await self._flush_unique("Category already exists")
        self.log_activity(
            "category_created", f"New skill category created: {name}", actor_id, category.id
        )
        await self._commit(category)
        return category

    async def update_category(self, category_id: int, name: str, actor_id: int) -> SkillCategory:
        category = await self._get_or_404(SkillCategory, category_id, "Category")
        old_name = category.name
        category.name = name
        await self._flush_unique("Category name already taken")

        # Skills carry the category by name; keep them pointing at it.
        await self.db.execute(
            update(Skill).where(Skill.category == old_name).values(category=name)
        )
        self.log_activity(
            "category_updated",
            f'Skill category renamed from "{old_name}" to "{name}"',
            actor_id,
            category.id,
        )
        await self._commit(category)
        return category

    async def delete_category(self, category_id: int, actor_id: int) -> None:
        category = await self._get_or_404(SkillCategory, category_id, "Category")
        if await self._count(Skill, Skill.category == category.name):
            raise BusinessRuleError("Cannot delete category that's in use by skills")

        name = category.name
        await self.db.delete(category)
        self.log_activity("category_deleted", f"Skill category deleted: {name}", actor_id, category_id)
        await self.db.commit()

    # ── Skill mappings ───────────────────────────────────────

    async def list_skill_mappings(self, employee_id: int) -> List[Tuple[SkillMapping, Skill]]:
        result = await self.db.execute(
            select(SkillMapping, Skill)
            .join(Skill, Skill.id == SkillMapping.skill_id)
            .where(SkillMapping.employee_id == employee_id)
            .order_by(SkillMapping.id)
        )
        return [tuple(row) for row in result.all()]

    async def upsert_skill_mapping(
        self,
        employee_id: int,
        skill_id: int,
        experience_band,
        rating,
        years_of_experience: float,
    ) -> Tuple[SkillMapping, Skill]:
        """Create the mapping, or update it in place when (skill, band) is already rated."""
        skill = await self._get_or_400(Skill, skill_id, "Skill")

        result = await self.db.execute(
            select(SkillMapping).where(
                SkillMapping.employee_id == employee_id,
                SkillMapping.skill_id == skill_id,
                SkillMapping.experience_band == experience_band,
            )
        )
        mapping = result.scalar_one_or_none()
        if mapping is None:
            mapping = SkillMapping(
                employee_id=employee_id,
                skill_id=skill_id,
                experience_band=experience_band,
            )
            self.db.add(mapping)
        mapping.rating = rating
        mapping.years_of_experience = years_of_experience
        await self._flush_unique("This skill was rated concurrently, please retry")

        self.log_activity(
            "skill_mapping_updated",
            f"Skill mapping updated for {skill.name}",
            employee_id,
            mapping.id,
        )
        await self._commit(mapping)
        logger.info(
            "Employee %s rated %s (%s) as %s",
            employee_id, skill.name, mapping.experience_band.value, mapping.rating.value,
        )
        return mapping, skill

    # ── Projects ─────────────────────────────────────────────

    async def _counts_by(self, column) -> Dict[int, int]:
        result = await self.db.execute(
            select(column, func.count()).group_by(column)
        )
        return {project_id: count for project_id, count in result.all()}

    async def list_projects(self) -> List[Tuple[Project, int, int]]:
        """Every project with its requirement and assignment counts."""
        result = await self.db.execute(select(Project).order_by(Project.id))
        projects = result.scalars().all()
        requirement_counts = await self._counts_by(ProjectRequirement.project_id)
        assignment_counts = await self._counts_by(ProjectAssignment.project_id)
        return [
            (p, requirement_counts.get(p.id, 0), assignment_counts.get(p.id, 0))
            for p in projects
        ]

    async def get_project(self, project_id: int) -> Project:
        return await self._get_or_404(Project, project_id, "Project")

    async def get_user_or_none(self, user_id: int) -> Optional[User]:
        return await self._get(User, user_id)

    async def list_requirements(self, project_id: int) -> List[Tuple[ProjectRequirement, Skill]]:
        result = await self.db.execute(
            select(ProjectRequirement, Skill)
            .join(Skill, Skill.id == ProjectRequirement.skill_id)
            .where(ProjectRequirement.project_id == project_id)
            .order_by(ProjectRequirement.id)
        )
        return [tuple(row) for row in result.all()]

    async def list_assignments(
        self,
        project_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> List[Tuple[ProjectAssignment, Skill, User, Project]]:
        query = (
            select(ProjectAssignment, Skill, User, Project)
            .join(Skill, Skill.id == ProjectAssignment.skill_id)
            .join(User, User.id == ProjectAssignment.employee_id)
            .join(Project, Project.id == ProjectAssignment.project_id)
            .order_by(ProjectAssignment.id)
        )
        if project_id is not None:
            query = query.where(ProjectAssignment.project_id == project_id)
        if employee_id is not None:
            query = query.where(ProjectAssignment.employee_id == employee_id)
        result = await self.db.execute(query)
        return [tuple(row) for row in result.all()]

    async def create_project(
        self,
        name: str,
        code: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
        actor_id: int,
    ) -> Project:
        project = Project(
            name=name,
            code=code,
            description=description,
            start_date=start_date,
            end_date=end_date,
            created_by=actor_id,
        )
        self.db.add(project)
        await self._flush_unique("Project code already exists")
        self.log_activity("project_created", f"New project created: {project.name}", actor_id, project.id)
        await self._commit(project)
        return project

    async def add_requirement(
        self,
        project_id: int,
        skill_id: int,
        experience_band,
        people_needed: int,
        hours_per_month: int,
        actor_id: int,
    ) -> Tuple[ProjectRequirement, Skill]:
        project = await self.get_project(project_id)
        skill = await self._get_or_400(Skill, skill_id, "Skill")

        requirement = ProjectRequirement(
            project_id=project.id,
            skill_id=skill.id,
            experience_band=experience_band,
            people_needed=people_needed,
            hours_per_month=hours_per_month,
        )
        self.db.add(requirement)
        await self.db.flush()
        self.log_activity(
            "project_requirement_added",
            f"Requirement added to {project.name}: {skill.name}",
            actor_id,
            project.id,
        )
        await self._commit(requirement)
        return requirement, skill

    async def assign_employee(
        self,
        project_id: int,
        employee_id: int,
        skill_id: int,
        experience_band,
        assigned_hours_per_month: int,
        actor_id: int,
    ) -> Tuple[ProjectAssignment, Skill, User, Project]:
        project = await self.get_project(project_id)
        employee = await self._get_or_400(User, employee_id, "Employee")
        skill = await self._get_or_400(Skill, skill_id, "Skill")

        assignment = ProjectAssignment(
            project_id=project.id,
            employee_id=employee.id,
            skill_id=skill.id,
            experience_band=experience_band,
            assigned_hours_per_month=assigned_hours_per_month,
            assigned_by=actor_id,
        )
        self.db.add(assignment)
        await self.db.flush()
        self.log_activity(
            "employee_assigned",
            f"{employee.name} assigned to {project.name} for {skill.name}",
            actor_id,
            project.id,
        )
        await self._commit(assignment)
        logger.info(
            "Assigned employee %s to project %s as %s (%s)",
            employee.id, project.code, skill.name, assignment.experience_band.value,
        )
        return assignment, skill, employee, project

    # ── Timesheets ───────────────────────────────────────────

    async def list_timesheets(
        self,
        employee_id: int,
        work_date: Optional[date] = None,
    ) -> List[Tuple[Timesheet, Project]]:
        query = (
            select(Timesheet, Project)
            .join(Project, Project.id == Timesheet.project_id)
            .where(Timesheet.employee_id == employee_id)
            .order_by(Timesheet.work_date.desc(), Timesheet.id)
        )
        if work_date is not None:
            query = query.where(Timesheet.work_date == work_date)
        result = await self.db.execute(query)
        return [tuple(row) for row in result.all()]

    async def hours_logged(self, employee_id: int, work_date: date) -> float:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Timesheet.hours), 0.0)).where(
                Timesheet.employee_id == employee_id,
                Timesheet.work_date == work_date,
            )
        )
        return float(result.scalar() or 0.0)

    async def log_timesheet(
        self,
        employee_id: int,
        project_id: int,
        work_date: date,
        hours: float,
    ) -> Tuple[Timesheet, Project]:
        project = await self._get_or_400(Project, project_id, "Project")
        assigned = await self._count(
            ProjectAssignment,
            ProjectAssignment.employee_id == employee_id,
            ProjectAssignment.project_id == project_id,
        )
        if not assigned:
            raise BusinessRuleError("You are not assigned to this project")

        async with _day_lock(employee_id, work_date):
            total = await self.hours_logged(employee_id, work_date)
            if total + hours > settings.DAILY_HOUR_LIMIT:
                raise BusinessRuleError(
                    f"Daily limit exceeded. You already have {total:g} hours logged for this date."
                )

            timesheet = Timesheet(
                employee_id=employee_id,
                project_id=project.id,
                work_date=work_date,
                hours=hours,
            )
            self.db.add(timesheet)
            await self.db.flush()
            self.log_activity(
                "timesheet_logged",
                f"{hours:g} hours logged on {project.name} for {work_date.isoformat()}",
                employee_id,
                timesheet.id,
            )
            await self._commit(timesheet)

        logger.info(
            "Employee %s logged %sh on project %s for %s", employee_id, hours, project.code, work_date
        )
        return timesheet, project

    # ── Sales pipeline ───────────────────────────────────────

    async def list_pipelines(self) -> List[Tuple[ProjectPipeline, List[Tuple[PipelineSkillDemand, Skill]]]]:
        result = await self.db.execute(select(ProjectPipeline).order_by(ProjectPipeline.id))
        pipelines = result.scalars().all()

        demand_rows = await self.db.execute(
            select(PipelineSkillDemand, Skill)
            .join(Skill, Skill.id == PipelineSkillDemand.skill_id)
            .order_by(PipelineSkillDemand.id)
        )
        demands: Dict[int, List[Tuple[PipelineSkillDemand, Skill]]] = {}
        for demand, skill in demand_rows.all():
            demands.setdefault(demand.pipeline_id, []).append((demand, skill))
        return [(p, demands.get(p.id, [])) for p in pipelines]

    async def create_pipeline(
        self,
        name: str,
        expected_start_date: datetime,
        expected_end_date: datetime,
        status,
        actor_id: int,
    ) -> ProjectPipeline:
        pipeline = ProjectPipeline(
            name=name,
            expected_start_date=expected_start_date,
            expected_end_date=expected_end_date,
            status=status,
            created_by=actor_id,
        )
        self.db.add(pipeline)
        await self.db.flush()
        self.log_activity(
            "pipeline_created", f"New pipeline project created: {pipeline.name}", actor_id, pipeline.id
        )
        await self._commit(pipeline)
        return pipeline

    async def add_pipeline_demand(
        self,
        pipeline_id: int,
        skill_id: int,
        experience_band,
        people_needed: int,
        actor_id: int,
    ) -> Tuple[PipelineSkillDemand, Skill]:
        pipeline = await self._get_or_404(ProjectPipeline, pipeline_id, "Pipeline project")
        skill = await self._get_or_400(Skill, skill_id, "Skill")

        demand = PipelineSkillDemand(
            pipeline_id=pipeline.id,
            skill_id=skill.id,
            experience_band=experience_band,
            people_needed=people_needed,
        )
        self.db.add(demand)
        await self.db.flush()
        self.log_activity(
            "pipeline_skill_added",
            f"Skill demand added to {pipeline.name}: {skill.name}",
            actor_id,
            pipeline.id,
        )
        await self._commit(demand)
        return demand, skill

    # ── Activities ───────────────────────────────────────────

    async def list_activities(self, limit: Optional[int] = None) -> List[Tuple[Activity, Optional[str]]]:
        query = (
            select(Activity, User.name)
            .outerjoin(User, User.id == Activity.user_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return [tuple(row) for row in result.all()]

    # ── Aggregations ─────────────────────────────────────────

    async def _all(self, model: Type[ModelT]) -> Sequence[ModelT]:
        result = await self.db.execute(select(model).order_by(model.id))
        return result.scalars().all()

    async def employee_overview(self) -> List[Tuple[User, int, int, bool]]:
        """Employee-role users with skill count, assignment count and bench flag."""
        employees = await self.list_users(role=Role.EMPLOYEE)
        skill_counts = await self._counts_by(SkillMapping.employee_id)
        assignments = await self._all(ProjectAssignment)
        bench = staffing.bench_employee_ids(employees, assignments)
        assignment_counts: Dict[int, int] = {}
        for a in assignments:
            assignment_counts[a.employee_id] = assignment_counts.get(a.employee_id, 0) + 1
        return [
            (e, skill_counts.get(e.id, 0), assignment_counts.get(e.id, 0), e.id in bench)
            for e in employees
        ]

    async def skill_distribution(self) -> List[dict]:
        return staffing.skill_distribution(await self._all(Skill), await self._all(SkillMapping))

    async def recruitment_needs(self, now: Optional[datetime] = None) -> List[dict]:
        demand = staffing.aggregate_demand(
            projects=await self._all(Project),
            requirements=await self._all(ProjectRequirement),
            pipelines=await self._all(ProjectPipeline),
            pipeline_demands=await self._all(PipelineSkillDemand),
            now=now,
            pipeline_statuses=settings.RECRUITMENT_PIPELINE_STATUSES,
        )
        return staffing.recruitment_needs(
            await self._all(Skill),
            await self._all(SkillMapping),
            demand,
            high_below=settings.RECRUITMENT_HIGH_PRIORITY_BELOW,
            medium_below=settings.RECRUITMENT_MEDIUM_PRIORITY_BELOW,
        )

    async def dashboard_metrics(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        needs = await self.recruitment_needs(now)
        return staffing.dashboard_metrics(
            projects=await self._all(Project),
            users=await self._all(User),
            assignments=await self._all(ProjectAssignment),
            pipelines=await self._all(ProjectPipeline),
            skill_gaps=len(needs),
            now=now,
        )


# ── Dependency for FastAPI routes ──
async def get_store(db: AsyncSession = Depends(get_db)) -> WorkforceStore:
    return WorkforceStore(db)


async def bootstrap() -> None:
    """Create tables and seed the default skill categories on an empty database."""
    await create_tables()

    async with async_session() as db:
        existing = await db.execute(select(func.count(SkillCategory.id)))
        if existing.scalar():
            return
        db.add_all(SkillCategory(name=name) for name in settings.DEFAULT_SKILL_CATEGORIES)
        await db.commit()
        logger.info("Seeded %d default skill categories", len(settings.DEFAULT_SKILL_CATEGORIES))
