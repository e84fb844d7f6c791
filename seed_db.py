"""
Load a small demo workforce into the configured database.

    python seed_db.py

Creates one account per role (password ``password``), a handful of skills,
two projects with requirements, one assignment, a pipeline opportunity and
some skill ratings, so every dashboard panel has something to show.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from workforce.database import async_session
from workforce.models.pipeline import PipelineStatus
from workforce.models.skill import ExperienceBand, SkillRating
from workforce.models.user import Role
from workforce.routers.auth import hash_password
from workforce.services.store import WorkforceStore, bootstrap

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

USERS = [
    ("admin", "Avery Admin", Role.ADMIN),
    ("pm", "Parker Manager", Role.PROJECT_MANAGER),
    ("sales", "Sam Sales", Role.SALES),
    ("recruiter", "Riley Recruiter", Role.RECRUITMENT),
    ("alice", "Alice Builder", Role.EMPLOYEE),
    ("bob", "Bob Designer", Role.EMPLOYEE),
    ("charlie", "Charlie Research", Role.EMPLOYEE),
]

SKILLS = [
    ("React.js", "Frontend"),
    ("Python", "Backend"),
    ("PostgreSQL", "Database"),
    ("Kubernetes", "DevOps"),
    ("Figma", "Design"),
]


async def seed(store: WorkforceStore) -> dict:
    """Populate an empty database through the store; returns ids by name."""
    users = {}
    for username, name, role in USERS:
        user = await store.create_user(
            username=username,
            password_hash=hash_password(DEMO_PASSWORD),
            name=name,
            email=f"{username}@example.com",
            role=role,
        )
        users[username] = user
    admin_id = users["admin"].id

    skills = {}
    for name, category in SKILLS:
        skills[name] = await store.create_skill(name, category, actor_id=admin_id)

    # Ratings: Alice and Bob both know React at 0-2, Charlie is a senior Pythonista.
    ratings = [
        ("alice", "React.js", ExperienceBand.ZERO_TWO, SkillRating.INTERMEDIATE, 2),
        ("bob", "React.js", ExperienceBand.ZERO_TWO, SkillRating.BEGINNER, 1),
        ("bob", "Figma", ExperienceBand.TWO_FIVE, SkillRating.EXPERT, 4),
        ("charlie", "Python", ExperienceBand.SEVEN_TEN, SkillRating.EXPERT, 8),
    ]
    for username, skill_name, band, rating, years in ratings:
        await store.upsert_skill_mapping(
            employee_id=users[username].id,
            skill_id=skills[skill_name].id,
            experience_band=band,
            rating=rating,
            years_of_experience=years,
        )

    now = datetime.now(timezone.utc)
    portal = await store.create_project(
        name="Customer Portal",
        code="PRJ-001",
        description="Self-service portal rebuild",
        start_date=now - timedelta(days=30),
        end_date=now + timedelta(days=120),
        actor_id=admin_id,
    )
    await store.add_requirement(
        portal.id, skills["React.js"].id, ExperienceBand.ZERO_TWO, 4, 160, actor_id=admin_id
    )
    await store.add_requirement(
        portal.id, skills["Python"].id, ExperienceBand.SEVEN_TEN, 1, 80, actor_id=admin_id
    )
    await store.assign_employee(
        portal.id, users["charlie"].id, skills["Python"].id, ExperienceBand.SEVEN_TEN, 80,
        actor_id=users["pm"].id,
    )

    platform = await store.create_project(
        name="Platform Migration",
        code="PRJ-002",
        description="Move services onto Kubernetes",
        start_date=now,
        end_date=now + timedelta(days=90),
        actor_id=admin_id,
    )
    await store.add_requirement(
        platform.id, skills["Kubernetes"].id, ExperienceBand.FIVE_SEVEN, 2, 120, actor_id=admin_id
    )

    pipeline = await store.create_pipeline(
        name="Retail Analytics",
        expected_start_date=now + timedelta(days=30),
        expected_end_date=now + timedelta(days=150),
        status=PipelineStatus.NEGOTIATION,
        actor_id=users["sales"].id,
    )
    await store.add_pipeline_demand(
        pipeline.id, skills["PostgreSQL"].id, ExperienceBand.TWO_FIVE, 2, actor_id=users["sales"].id
    )

    return {
        "users": {username: u.id for username, u in users.items()},
        "skills": {name: s.id for name, s in skills.items()},
        "projects": [portal.id, platform.id],
        "pipelines": [pipeline.id],
    }


async def async_main():
    await bootstrap()
    async with async_session() as db:
        store = WorkforceStore(db)
        if await store.get_user_by_username("admin"):
            logger.info("Demo data already present, nothing to do")
            return
        ids = await seed(store)
    logger.info("Seeded %d users and %d skills", len(ids["users"]), len(ids["skills"]))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(async_main())
