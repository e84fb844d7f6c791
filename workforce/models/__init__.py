"""
Workforce Hub – SQLAlchemy ORM models package.

Imports all model classes so ``Base.metadata`` and the app can discover them
through a single ``import workforce.models``.
"""

from workforce.models.user import Role, User                                  # noqa: F401
from workforce.models.skill import (                                          # noqa: F401
    ExperienceBand,
    Skill,
    SkillCategory,
    SkillMapping,
    SkillRating,
)
from workforce.models.project import Project, ProjectAssignment, ProjectRequirement  # noqa: F401
from workforce.models.timesheet import Timesheet                              # noqa: F401
from workforce.models.pipeline import (                                       # noqa: F401
    PipelineSkillDemand,
    PipelineStatus,
    ProjectPipeline,
)
from workforce.models.activity import Activity                                # noqa: F401
